# -*- coding: utf-8 -*-
"""Tests for the command line entry point.

Copyright 2025
SPDX-License-Identifier: Apache-2.0
Authors: Mihai Criveti, Keval Mahajan
"""

# Standard
import runpy
import signal
import sys

# Third-Party
import pytest

# First-Party
from ssebridge import cli
from ssebridge.config import Settings


@pytest.fixture
def fake_run(monkeypatch):
    """Replace the async runner and settings so main() never touches stdio."""
    calls = []

    async def _run(base_url, settings):
        calls.append((base_url, settings))

    monkeypatch.setattr(cli, "run_bridge", _run)
    monkeypatch.setattr(cli, "get_settings", lambda: Settings(_env_file=None, log_level="OFF"))
    return calls


@pytest.mark.parametrize(
    "url, ok",
    [
        ("http://localhost:8077", True),
        ("https://example.com", True),
        ("http://127.0.0.1:8077/base/", True),
        ("  http://localhost:8077  ", True),
        ("localhost:8077", False),
        ("ftp://example.com", False),
        ("http://", False),
        ("http://host:notaport", False),
        ("", False),
    ],
)
def test_is_valid_url(url, ok):
    assert cli.is_valid_url(url) is ok


def test_missing_url_exits_1(capsys, fake_run):
    with pytest.raises(SystemExit) as exc:
        cli.main([])
    assert exc.value.code == 1
    err = capsys.readouterr().err
    assert "Error: Server URL is required" in err
    assert "Usage: ssebridge <server-url>" in err
    assert "Example: ssebridge http://localhost:8077" in err
    assert fake_run == []


def test_invalid_url_exits_1(capsys, fake_run):
    with pytest.raises(SystemExit) as exc:
        cli.main(["localhost:8077"])
    assert exc.value.code == 1
    captured = capsys.readouterr()
    assert "Error: Invalid URL format: localhost:8077" in captured.err
    assert captured.out == ""
    assert fake_run == []


def test_extra_arguments_exit_1(capsys, fake_run):
    with pytest.raises(SystemExit) as exc:
        cli.main(["http://a", "http://b"])
    assert exc.value.code == 1
    assert "unrecognized arguments" in capsys.readouterr().err


def test_valid_url_runs_bridge(capsys, fake_run):
    cli.main([" http://localhost:8077 "])
    assert len(fake_run) == 1
    base_url, settings = fake_run[0]
    assert base_url == "http://localhost:8077"
    assert isinstance(settings, Settings)
    assert capsys.readouterr().out == ""


def test_keyboard_interrupt_is_clean(monkeypatch, fake_run):
    def _interrupt(coro):
        coro.close()
        raise KeyboardInterrupt

    monkeypatch.setattr(cli.asyncio, "run", _interrupt)
    cli.main(["http://localhost:8077"])


def test_reads_sys_argv_by_default(monkeypatch, fake_run):
    monkeypatch.setattr(sys, "argv", ["ssebridge", "http://h:1"])
    cli.main()
    assert fake_run[0][0] == "http://h:1"


def test_python_dash_m(monkeypatch, capsys):
    monkeypatch.setattr(sys, "argv", ["ssebridge"])
    with pytest.raises(SystemExit) as exc:
        runpy.run_module("ssebridge", run_name="__main__")
    assert exc.value.code == 1
    assert "Server URL is required" in capsys.readouterr().err


def test_install_signal_handlers_registers_and_tolerates_errors():
    registered = []

    class DummyLoop:
        def add_signal_handler(self, sig, cb):
            registered.append(sig)
            if sig == signal.SIGTERM:
                raise NotImplementedError

    cli._install_signal_handlers(DummyLoop(), lambda: None)
    assert signal.SIGINT in registered
    assert signal.SIGTERM in registered


@pytest.mark.asyncio
async def test_run_bridge_wires_stdio(monkeypatch):
    events = []

    class DummyStdio:
        async def connect(self):
            events.append("connect")

        async def disconnect(self):
            events.append("disconnect")

        def send_line(self, line):
            return True

        async def receive_lines(self):
            yield "x"

    class DummyBridge:
        def __init__(self, base_url, settings, *, output):
            events.append(("bridge", base_url, output.__self__ is stdio))

        def request_shutdown(self):
            pass

        async def run(self, lines):
            events.append("run")
            raise RuntimeError("stop")

    stdio = DummyStdio()
    monkeypatch.setattr(cli, "StdioTransport", lambda: stdio)
    monkeypatch.setattr(cli, "SessionBridge", DummyBridge)
    monkeypatch.setattr(cli, "_install_signal_handlers", lambda loop, cb: events.append("signals"))

    with pytest.raises(RuntimeError, match="stop"):
        await cli.run_bridge("http://h:1", Settings(_env_file=None))
    assert events == ["connect", ("bridge", "http://h:1", True), "signals", "run", "disconnect"]
