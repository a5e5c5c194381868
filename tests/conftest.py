# -*- coding: utf-8 -*-
"""Shared fixtures for the bridge test-suite.

Copyright 2025
SPDX-License-Identifier: Apache-2.0
Authors: Mihai Criveti

A hand-driven clock, an in-memory stdout and an ``httpx.MockTransport`` backed
client, so no test touches the network or the real terminal.
"""

# Standard
from typing import Callable, List, Optional

# Third-Party
import httpx
import pytest

# First-Party
from ssebridge.bridge import SessionBridge
from ssebridge.config import Settings
from ssebridge.events import SSEEvent

BASE_URL = "http://bridge.test:8077"


class FakeClock:
    """Monotonic clock moved by hand."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class OutputCollector:
    """Stands in for stdout; ``alive = False`` behaves like a closed pipe."""

    def __init__(self):
        self.lines: List[str] = []
        self.alive = True

    def __call__(self, line: str) -> bool:
        if not self.alive:
            return False
        self.lines.append(line)
        return True


def _accepted(request: httpx.Request) -> httpx.Response:
    return httpx.Response(202)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def output():
    return OutputCollector()


@pytest.fixture
def settings():
    return Settings(_env_file=None)


@pytest.fixture
def make_bridge(settings, output, clock):
    """Factory: ``make_bridge(handler, ready=False, **setting_overrides)``.

    With ``ready=True`` the bridge is driven through stream open and an
    ``endpoint`` event carrying session ``abc123``; the lines that produces
    on the output are cleared.
    """

    def _make(handler: Optional[Callable] = None, *, ready: bool = False, **overrides) -> SessionBridge:
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler or _accepted))
        cfg = settings.model_copy(update=overrides) if overrides else settings
        bridge = SessionBridge(BASE_URL, cfg, output=output, client=client, clock=clock)
        if ready:
            bridge.handle_open()
            bridge.handle_event(SSEEvent("endpoint", '{"session_id":"abc123"}'))
            output.lines.clear()
        return bridge

    return _make
