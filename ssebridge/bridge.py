# -*- coding: utf-8 -*-
"""Location: ./ssebridge/bridge.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0
Authors: Keval Mahajan, Mihai Criveti

Session Bridge.
stdio client <-> SSE+HTTP server

The bridge owns the session state and wires four parts together:

- the SSE connection (``GET <base>/sse``), whose ``endpoint`` event yields the
  session identifier;
- the inbound forwarder, which writes every server event to stdout;
- the outbound forwarder, which POSTs every stdin line to
  ``<base>/messages/?session_id=<id>`` once the session is ready;
- the liveness monitor, which pings an idle server through the same outbound
  entry point as real input.

Lines arriving before the session is ready are dropped, not queued. All
protocol traffic goes to stdout; all diagnostics go to stderr.

Examples:
    >>> from ssebridge.config import Settings
    >>> out = []
    >>> bridge = SessionBridge("http://localhost:8077/", Settings(), output=lambda line: out.append(line) or True)
    >>> bridge.sse_url, bridge.message_url
    ('http://localhost:8077/sse', 'http://localhost:8077/messages/')
    >>> bridge.submit('{"jsonrpc":"2.0","id":1,"method":"ping"}') is None
    True
    >>> bridge.session.status.value
    'init'
"""

# Standard
import asyncio
from contextlib import suppress
import json
import time
from typing import AsyncIterator, Callable, Dict, Optional, Set

# Third-Party
import httpx

# First-Party
from ssebridge.config import get_settings, Settings
from ssebridge.errors import classify_exception, classify_status, describe_failure, extract_request_id, FailureKind, JSONRPC_SERVER_ERROR, make_error
from ssebridge.events import DEFAULT_EVENT, format_inbound, SSEEvent
from ssebridge.handshake import resolve_session_id
from ssebridge.liveness import LivenessMonitor
from ssebridge.services.logging_service import logging_service
from ssebridge.session import begin_connect, mark_closed, mark_open, resolve, Session, touch
from ssebridge.transports.sse_transport import SSEConnection

logger = logging_service.get_logger(__name__)

RESPONSE_EVENT = "response"

TROUBLESHOOTING_TIPS = (
    "Connection troubleshooting suggestions:",
    "1. Verify the server URL is correct",
    "2. Check that the server is running and accessible",
    "3. Ensure the server supports SSE connections at the {sse_path} endpoint",
    "4. Check whether the server listens on a different port",
    "5. Try accessing the SSE endpoint directly in a browser",
)


def _single_line(body: str) -> str:
    """Collapse a JSON response body onto one line.

    Args:
        body: Response text, already stripped.

    Returns:
        str: Compact JSON when the body parses; a multi-line body that is not
        JSON is wrapped as a ``response`` event; anything else unchanged.

    Examples:
        >>> _single_line('{\\n  "id": 1\\n}')
        '{"id": 1}'
        >>> _single_line("Accepted")
        'Accepted'
        >>> _single_line("line one\\nline two")
        '{"event": "response", "data": "line one\\\\nline two"}'
    """
    if "\n" not in body and "\r" not in body:
        return body
    try:
        return json.dumps(json.loads(body), ensure_ascii=False)
    except ValueError:
        return format_inbound(SSEEvent(RESPONSE_EVENT, body))


class SessionBridge:
    """Bridge between a line-oriented stdio client and an SSE+HTTP server."""

    def __init__(
        self,
        base_url: str,
        settings: Optional[Settings] = None,
        *,
        output: Callable[[str], bool],
        client: Optional[httpx.AsyncClient] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize the bridge.

        Args:
            base_url: Validated server base URL.
            settings: Bridge configuration, the cached settings when omitted.
            output: Writes one protocol line to the client; returns False when
                the client is gone.
            client: HTTP client to use; one is created (and owned) when omitted.
            clock: Monotonic clock.
        """
        self.settings = settings or get_settings()
        self.base_url = base_url
        self.sse_url = self.settings.sse_url(base_url)
        self.message_url = self.settings.message_url(base_url)
        self.session = Session()

        self._output = output
        self._client = client
        self._owns_client = client is None
        self._clock = clock
        self._pending: Set[asyncio.Task] = set()
        self._shutdown: Optional[asyncio.Event] = None
        self._connection: Optional[SSEConnection] = None
        self._troubleshooting_shown = False

        # Named events with behaviour beyond forwarding
        self._handlers: Dict[str, Callable[[SSEEvent], None]] = {
            "endpoint": self._on_endpoint,
        }

        self.liveness = LivenessMonitor(
            lambda: self.session,
            self.submit,
            interval=self.settings.heartbeat_interval,
            idle_threshold=self.settings.idle_threshold,
            max_unanswered=self.settings.max_unanswered_pings,
            target=self.sse_url,
            clock=clock,
            on_disconnected=self.show_troubleshooting,
        )

    # ------------------------------------------------------------------ #
    # Connection Manager callbacks
    # ------------------------------------------------------------------ #
    def handle_open(self) -> None:
        """Stream opened."""
        now = self._clock()
        self.session = mark_open(self.session, now)
        self._troubleshooting_shown = False
        started = self.session.open_requested_at if self.session.open_requested_at is not None else now
        logger.info(f"SSE connection established (took {(now - started) * 1000:.0f}ms)")

    def handle_error(self, exc: BaseException) -> None:
        """Stream failed or was closed by the server.

        Args:
            exc: What ended the stream.
        """
        self.session = mark_closed(self.session)
        logger.error(f"SSE connection error: {exc}")
        self.show_troubleshooting()

    def show_troubleshooting(self) -> None:
        """Print connection tips once per error burst.

        Called on stream errors and from the liveness tick while disconnected,
        so a stream that fails right away still gets the tips once
        ``troubleshoot_after`` has passed.
        """
        if self.session.identifier is not None or self._troubleshooting_shown:
            return
        started = self.session.open_requested_at
        if started is None or self._clock() - started <= self.settings.troubleshoot_after:
            return
        self._troubleshooting_shown = True
        for tip in TROUBLESHOOTING_TIPS:
            logger.error(tip.format(sse_path=self.settings.sse_path))

    # ------------------------------------------------------------------ #
    # Inbound
    # ------------------------------------------------------------------ #
    def handle_event(self, event: SSEEvent) -> None:
        """Dispatch one server event and forward it to the client.

        Args:
            event: Completed event from the stream.
        """
        try:
            self.session = touch(self.session, self._clock())
            self.liveness.reset()

            handler = self._handlers.get(event.event)
            if handler is not None:
                handler(event)

            if event.event != DEFAULT_EVENT and not self.settings.forward_named_events:
                return
            suffix = "..." if len(event.data) > 100 else ""
            logger.debug(f"Received {event.event}: {event.data[:100]}{suffix}")
            self._emit(format_inbound(event))
        except Exception:
            logger.exception(f"Error processing {event.event!r} event")

    def _on_endpoint(self, event: SSEEvent) -> None:
        """Resolve the session identifier from a handshake event.

        Args:
            event: The ``endpoint`` event.
        """
        if self.session.identifier is not None:
            logger.debug(f"Ignoring endpoint event, session already resolved: {self.session.identifier}")
            return
        logger.debug(f"Endpoint event received: {event.data}")
        identifier = resolve_session_id(event.data)
        if identifier is None:
            logger.warning("Will continue running but messages cannot be sent until a session ID is received")
            return
        self.session = resolve(self.session, identifier, self._clock())

    # ------------------------------------------------------------------ #
    # Outbound
    # ------------------------------------------------------------------ #
    def submit(self, raw_line: str, *, synthetic: bool = False) -> Optional["asyncio.Task[None]"]:
        """Forward one client line to the server.

        This is the single outbound entry point: real stdin lines and the
        liveness monitor's pings both come through here.

        Args:
            raw_line: Line as read from stdin.
            synthetic: True for pings generated by the bridge itself.

        Returns:
            The POST task, or None when the line was blank or dropped.
        """
        line = raw_line.strip()
        if not line:
            return None
        if not self.session.connected:
            logger.warning("Cannot send message: no connection to server")
            return None
        if self.session.identifier is None:
            logger.warning("Cannot send message: awaiting session ID (still initializing)")
            return None

        task = asyncio.create_task(self._post(line, self.session.identifier, synthetic))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _post(self, line: str, session_id: str, synthetic: bool) -> None:
        """POST one line and route the outcome.

        Args:
            line: Trimmed request body.
            session_id: Identifier captured when the line was submitted.
            synthetic: Whether the line is a liveness ping.
        """
        logger.debug(f"Sending message to {self.message_url}?session_id={session_id}")
        try:
            response = await self._http().post(
                self.message_url,
                params={"session_id": session_id},
                content=line.encode("utf-8"),
                headers={"Content-Type": "application/json"},
                timeout=self.settings.post_timeout,
            )
        except asyncio.CancelledError:
            raise
        except Exception as e:
            kind = classify_exception(e)
            if kind is FailureKind.UNEXPECTED:
                logger.exception("Unexpected error while sending message")
            self._report_failure(line, kind, detail=str(e) or type(e).__name__, synthetic=synthetic)
            return

        if not response.is_success:
            self._report_failure(line, classify_status(response.status_code), status=response.status_code, detail=response.reason_phrase, synthetic=synthetic)
            return

        logger.debug(f"Message sent successfully (HTTP {response.status_code})")
        body = response.text.strip()
        if body and self.settings.forward_post_responses and not synthetic:
            self._emit(_single_line(body))

    def _report_failure(self, line: str, kind: FailureKind, *, status: Optional[int] = None, detail: Optional[str] = None, synthetic: bool = False) -> None:
        """Log an outbound failure and optionally mirror it to the client.

        Args:
            line: Request that failed.
            kind: Failure classification.
            status: HTTP status, when the server answered.
            detail: Extra context (reason phrase or exception text).
            synthetic: Whether the request was a liveness ping.
        """
        message = describe_failure(kind, status)
        logger.error(f"Error sending message [{kind.value}]: {message}" + (f" ({detail})" if detail else ""))

        if synthetic or not self.settings.mirror_errors:
            return
        request_id = extract_request_id(line)
        if request_id is None:
            return
        data: Dict[str, object] = {"kind": kind.value}
        if status is not None:
            data["status"] = status
        self._emit(json.dumps(make_error(message, JSONRPC_SERVER_ERROR, data=data, request_id=request_id), ensure_ascii=False))

    def _emit(self, line: str) -> None:
        """Write one line to the client, shutting down if the client is gone.

        Args:
            line: Protocol line.
        """
        if not self._output(line):
            self.request_shutdown()

    def _http(self) -> httpx.AsyncClient:
        """HTTP client, created on first use.

        Returns:
            httpx.AsyncClient: Shared client.
        """
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self.settings.post_timeout, connect=self.settings.connect_timeout))
            self._owns_client = True
        return self._client

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #
    @property
    def shutdown_event(self) -> asyncio.Event:
        """Event set when the bridge should stop.

        Returns:
            asyncio.Event: Shutdown flag.
        """
        if self._shutdown is None:
            self._shutdown = asyncio.Event()
        return self._shutdown

    def request_shutdown(self) -> None:
        """Ask the bridge to stop; safe to call from signal handlers."""
        if not self.shutdown_event.is_set():
            logger.debug("Shutdown requested")
            self.shutdown_event.set()

    async def start(self) -> None:
        """Open the stream and start the liveness monitor."""
        self.session = begin_connect(self.session, self._clock())
        self._connection = SSEConnection(
            self._http(),
            self.sse_url,
            on_open=self.handle_open,
            on_event=self.handle_event,
            on_error=self.handle_error,
            connect_timeout=self.settings.connect_timeout,
        )
        await self._connection.connect()
        self.liveness.start()

    async def drain(self) -> None:
        """Wait for the POSTs in flight right now to finish."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def _pump_input(self, lines: AsyncIterator[str]) -> None:
        """Submit every input line; at EOF finish in-flight POSTs and stop.

        Args:
            lines: Client lines.
        """
        try:
            async for line in lines:
                try:
                    self.submit(line)
                except Exception:
                    logger.exception("Failed to forward input line")
            logger.info("Input closed, finishing in-flight requests")
            await self.liveness.stop()
            await self.drain()
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Input reader failed")
        self.request_shutdown()

    async def run(self, lines: AsyncIterator[str]) -> None:
        """Run the bridge until input ends or shutdown is requested.

        Args:
            lines: Client lines, typically ``StdioTransport.receive_lines()``.
        """
        await self.start()
        reader = asyncio.create_task(self._pump_input(lines))
        try:
            await self.shutdown_event.wait()
        finally:
            reader.cancel()
            with suppress(asyncio.CancelledError):
                await reader
            await self.aclose()

    async def aclose(self) -> None:
        """Close the stream, abandon in-flight POSTs, and release the client."""
        await self.liveness.stop()
        if self._connection is not None:
            await self._connection.disconnect()
        for task in list(self._pending):
            task.cancel()
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None
