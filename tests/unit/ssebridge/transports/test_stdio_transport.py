# -*- coding: utf-8 -*-
"""Tests for the stdio transport.

Copyright 2025
SPDX-License-Identifier: Apache-2.0
Authors: Mihai Criveti
"""

# Standard
import errno
import io
import os

# Third-Party
import pytest

# First-Party
from ssebridge.transports import stdio_transport
from ssebridge.transports.stdio_transport import StdioTransport


def _pipe_with(data: bytes):
    """Readable pipe end pre-filled with ``data`` and already at EOF."""
    r, w = os.pipe()
    os.write(w, data)
    os.close(w)
    return os.fdopen(r, "rb", buffering=0)


async def _collect(transport):
    return [line async for line in transport.receive_lines()]


class _BrokenStream:
    def __init__(self, err):
        self.err = err
        self.writes = 0

    def write(self, s):
        self.writes += 1
        raise OSError(self.err, os.strerror(self.err))

    def flush(self):
        pass


def test_send_line_appends_newline_and_flushes():
    out = io.StringIO()
    transport = StdioTransport(stdout=out)
    assert transport.send_line('{"a":1}') is True
    assert transport.send_line("second") is True
    assert out.getvalue() == '{"a":1}\nsecond\n'


def test_send_line_broken_pipe_reports_false_and_stays_broken():
    stream = _BrokenStream(errno.EPIPE)
    transport = StdioTransport(stdout=stream)
    assert transport.send_line("x") is False
    assert transport.send_line("y") is False
    assert stream.writes == 1


def test_send_line_other_oserror(caplog):
    transport = StdioTransport(stdout=_BrokenStream(errno.EIO))
    with caplog.at_level("ERROR", logger="ssebridge"):
        assert transport.send_line("x") is False
    assert "Failed to write to stdout" in caplog.text


@pytest.mark.asyncio
async def test_receive_lines_strips_and_skips_blank():
    transport = StdioTransport(stdin=_pipe_with(b'  {"id":1}  \n\n\r\n{"id":2}\nlast-without-newline'))
    await transport.connect()
    assert await transport.is_connected()
    assert await _collect(transport) == ['{"id":1}', '{"id":2}', "last-without-newline"]
    await transport.disconnect()
    assert not await transport.is_connected()


@pytest.mark.asyncio
async def test_receive_lines_decodes_utf8():
    transport = StdioTransport(stdin=_pipe_with('{"name":"zoë"}\n'.encode("utf-8")))
    await transport.connect()
    assert await _collect(transport) == ['{"name":"zoë"}']


@pytest.mark.asyncio
async def test_oversized_line_is_dropped(monkeypatch):
    monkeypatch.setattr(stdio_transport, "STDIN_LINE_LIMIT", 16)
    transport = StdioTransport(stdin=_pipe_with(b"short\n" + b"x" * 40 + b"\nafter\n"))
    await transport.connect()
    assert await _collect(transport) == ["short", "after"]


@pytest.mark.asyncio
async def test_receive_lines_requires_connect():
    transport = StdioTransport()
    with pytest.raises(RuntimeError, match="not connected"):
        await _collect(transport)


@pytest.mark.asyncio
async def test_disconnect_flushes_stdout():
    flushed = []

    class _Out(io.StringIO):
        def flush(self):
            flushed.append(True)

    transport = StdioTransport(stdout=_Out())
    await transport.disconnect()
    assert flushed


@pytest.mark.asyncio
async def test_disconnect_closes_read_pipe():
    r, w = os.pipe()
    transport = StdioTransport(stdin=os.fdopen(r, "rb", buffering=0), stdout=io.StringIO())
    try:
        await transport.connect()
        pipe = transport._read_transport
        assert pipe is not None and not pipe.is_closing()
        await transport.disconnect()
        assert pipe.is_closing()
        assert transport._read_transport is None
    finally:
        os.close(w)
