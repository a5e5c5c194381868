# -*- coding: utf-8 -*-
"""Location: ./ssebridge/transports/sse_transport.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0
Authors: Mihai Criveti, Manav Gupta

SSE Connection Manager.
Opens a single ``GET`` subscription to the server's event stream with httpx,
parses it line by line with :class:`ssebridge.events.SSEEvent`, and reports
``open``, ``event`` and ``error`` transitions through callbacks.

There is no reconnect loop: once the stream fails or the server
closes it, the connection reports the error and stays closed.
"""

# Standard
import asyncio
from contextlib import suppress
from typing import Callable, Optional

# Third-Party
import httpx

# First-Party
from ssebridge.errors import StreamClosedError
from ssebridge.events import SSEEvent
from ssebridge.services.logging_service import logging_service
from ssebridge.transports.base import Transport

logger = logging_service.get_logger(__name__)

SSE_HEADERS = {"Accept": "text/event-stream", "Cache-Control": "no-cache"}


class SSEConnection(Transport):
    """Persistent event-stream subscription.

    Examples:
        >>> import httpx
        >>> conn = SSEConnection(httpx.AsyncClient(), "http://localhost:8077/sse", on_open=lambda: None, on_event=print, on_error=print)
        >>> conn.url
        'http://localhost:8077/sse'
        >>> import asyncio
        >>> asyncio.run(conn.is_connected())
        False
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        url: str,
        *,
        on_open: Callable[[], None],
        on_event: Callable[[SSEEvent], None],
        on_error: Callable[[BaseException], None],
        connect_timeout: float = 10.0,
    ):
        """Initialize the connection.

        Args:
            client: Shared HTTP client.
            url: Full stream URL (base URL + SSE path).
            on_open: Called once the server answers 200.
            on_event: Called for every completed event.
            on_error: Called once when the stream fails or ends.
            connect_timeout: Seconds allowed to establish the connection.
        """
        self.url = url
        self._client = client
        self._on_open = on_open
        self._on_event = on_event
        self._on_error = on_error
        self._timeout = httpx.Timeout(None, connect=connect_timeout)
        self._task: Optional[asyncio.Task] = None
        self._connected = False

    async def connect(self) -> None:
        """Start the subscription in the background.

        Raises:
            RuntimeError: If the connection was already started.
        """
        if self._task is not None:
            raise RuntimeError("SSE connection already started")
        logger.info(f"Connecting to SSE endpoint: {self.url}")
        self._task = asyncio.create_task(self._pump())

    async def disconnect(self) -> None:
        """Close the subscription."""
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
            with suppress(asyncio.CancelledError):
                await task
        self._connected = False

    async def is_connected(self) -> bool:
        """Check if the stream is open.

        Returns:
            True if connected
        """
        return self._connected

    async def wait_closed(self) -> None:
        """Wait until the stream has ended (error, close, or disconnect)."""
        if self._task is not None:
            with suppress(asyncio.CancelledError):
                await self._task

    async def _pump(self) -> None:
        """Read the stream until it ends and dispatch events.

        Raises:
            asyncio.CancelledError: When disconnected.
        """
        try:
            async with self._client.stream("GET", self.url, headers=SSE_HEADERS, timeout=self._timeout) as response:
                if response.status_code != 200:
                    raise httpx.HTTPStatusError(f"SSE endpoint returned {response.status_code}", request=response.request, response=response)

                self._connected = True
                self._on_open()

                current_event: Optional[SSEEvent] = None
                async for line in response.aiter_lines():
                    event, is_complete = SSEEvent.parse_sse_line(line, current_event)
                    current_event = event

                    if is_complete and current_event:
                        logger.debug(f"SSE event: {current_event.event} - {current_event.data[:100]}")
                        self._on_event(current_event)
                        # Reset for next event
                        current_event = None

            raise StreamClosedError("Server closed the SSE stream")
        except asyncio.CancelledError:
            self._connected = False
            raise
        except Exception as e:
            self._connected = False
            self._on_error(e)
