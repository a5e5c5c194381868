# -*- coding: utf-8 -*-
"""Tests for the SSE connection manager.

Copyright 2025
SPDX-License-Identifier: Apache-2.0
Authors: Mihai Criveti, Manav Gupta
"""

# Standard
import asyncio

# Third-Party
import httpx
import pytest

# First-Party
from ssebridge.errors import StreamClosedError
from ssebridge.transports.sse_transport import SSE_HEADERS, SSEConnection

URL = "http://bridge.test/sse"


class Recorder:
    def __init__(self):
        self.opened = 0
        self.events = []
        self.errors = []

    def on_open(self):
        self.opened += 1

    def on_event(self, event):
        self.events.append((event.event, event.data))

    def on_error(self, exc):
        self.errors.append(exc)


def _connection(handler, rec):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return SSEConnection(client, URL, on_open=rec.on_open, on_event=rec.on_event, on_error=rec.on_error, connect_timeout=1.0)


@pytest.mark.asyncio
async def test_stream_events_then_server_close():
    seen = {}

    def handler(request):
        seen["method"] = request.method
        seen["accept"] = request.headers.get("accept")
        body = b": hello\n\nevent: endpoint\ndata: /messages/?session_id=abc\n\ndata: {\"id\":1}\n\n"
        return httpx.Response(200, headers={"content-type": "text/event-stream"}, content=body)

    rec = Recorder()
    conn = _connection(handler, rec)
    await conn.connect()
    await conn.wait_closed()

    assert seen == {"method": "GET", "accept": SSE_HEADERS["Accept"]}
    assert rec.opened == 1
    assert rec.events == [("endpoint", "/messages/?session_id=abc"), ("message", '{"id":1}')]
    assert len(rec.errors) == 1 and isinstance(rec.errors[0], StreamClosedError)
    assert not await conn.is_connected()


@pytest.mark.asyncio
async def test_non_200_is_an_error_without_open():
    rec = Recorder()
    conn = _connection(lambda request: httpx.Response(404), rec)
    await conn.connect()
    await conn.wait_closed()
    assert rec.opened == 0
    assert isinstance(rec.errors[0], httpx.HTTPStatusError)
    assert "404" in str(rec.errors[0])


@pytest.mark.asyncio
async def test_connect_failure_is_reported():
    def handler(request):
        raise httpx.ConnectError("[Errno 111] Connection refused", request=request)

    rec = Recorder()
    conn = _connection(handler, rec)
    await conn.connect()
    await conn.wait_closed()
    assert rec.opened == 0
    assert isinstance(rec.errors[0], httpx.ConnectError)


@pytest.mark.asyncio
async def test_disconnect_cancels_open_stream():
    release = asyncio.Event()

    async def body():
        yield b"event: endpoint\ndata: /m?session_id=s\n\n"
        await release.wait()
        yield b"data: never\n\n"

    async def handler(request):
        return httpx.Response(200, content=body())

    rec = Recorder()
    conn = _connection(handler, rec)
    await conn.connect()
    for _ in range(100):
        if rec.events:
            break
        await asyncio.sleep(0.01)

    assert await conn.is_connected()
    await conn.disconnect()
    assert not await conn.is_connected()
    assert rec.events == [("endpoint", "/m?session_id=s")]
    # Cancellation is not an error
    assert rec.errors == []


@pytest.mark.asyncio
async def test_connect_twice_is_rejected():
    rec = Recorder()
    conn = _connection(lambda request: httpx.Response(200, content=b""), rec)
    await conn.connect()
    with pytest.raises(RuntimeError):
        await conn.connect()
    await conn.disconnect()


@pytest.mark.asyncio
async def test_disconnect_before_connect_is_noop():
    conn = _connection(lambda request: httpx.Response(200), Recorder())
    await conn.disconnect()
    await conn.wait_closed()
