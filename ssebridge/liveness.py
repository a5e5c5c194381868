# -*- coding: utf-8 -*-
"""Location: ./ssebridge/liveness.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0
Authors: Keval Mahajan

Liveness monitor.
Ticks on a fixed interval. While the bridge is not ready it only reports what
it is waiting for; once ready and idle for too long it submits a synthetic
``ping`` through the bridge's normal outbound entry point and counts pings
that go unanswered.
"""

# Standard
import asyncio
from contextlib import suppress
import json
import time
from typing import Any, Callable, Optional
import uuid

# First-Party
from ssebridge.services.logging_service import logging_service
from ssebridge.session import Session
from ssebridge.types import SessionStatus

logger = logging_service.get_logger(__name__)

PING_ID_PREFIX = "bridge-ping-"


def make_ping() -> str:
    """Build a synthetic JSON-RPC ping with a unique id.

    Returns:
        str: Serialized request line.

    Examples:
        >>> import json
        >>> ping = json.loads(make_ping())
        >>> ping["method"], ping["jsonrpc"], ping["id"].startswith("bridge-ping-")
        ('ping', '2.0', True)
        >>> make_ping() != make_ping()
        True
    """
    return json.dumps({"jsonrpc": "2.0", "id": f"{PING_ID_PREFIX}{uuid.uuid4().hex}", "method": "ping"})


class LivenessMonitor:
    """Periodic connection/session check with idle pings.

    Examples:
        >>> from ssebridge.session import Session, begin_connect, mark_open, resolve
        >>> state = resolve(mark_open(begin_connect(Session(), 0.0), 0.0), "abc", 0.0)
        >>> sent = []
        >>> monitor = LivenessMonitor(lambda: state, lambda line, synthetic: sent.append(line) or object(), idle_threshold=30.0, clock=lambda: 31.0)
        >>> monitor.tick()
        >>> len(sent), monitor.consecutive_heartbeats_without_reply
        (1, 1)
        >>> monitor.reset()
        >>> monitor.consecutive_heartbeats_without_reply
        0
    """

    def __init__(
        self,
        state: Callable[[], Session],
        submit: Callable[..., Any],
        *,
        interval: float = 5.0,
        idle_threshold: float = 30.0,
        max_unanswered: int = 5,
        target: str = "server",
        clock: Callable[[], float] = time.monotonic,
        on_disconnected: Optional[Callable[[], None]] = None,
    ):
        """Initialize the monitor.

        Args:
            state: Returns the bridge's current session.
            submit: The bridge's outbound entry point, called as ``submit(line, synthetic=True)``.
            interval: Seconds between ticks.
            idle_threshold: Idle seconds before a ping is injected.
            max_unanswered: Consecutive pings that trigger the warning.
            target: Stream URL, used in waiting notices.
            clock: Monotonic clock.
            on_disconnected: Called on every tick while the stream is down.
        """
        self._state = state
        self._submit = submit
        self.interval = interval
        self.idle_threshold = idle_threshold
        self.max_unanswered = max_unanswered
        self._target = target
        self._clock = clock
        self._on_disconnected = on_disconnected
        self._task: Optional[asyncio.Task] = None
        self._warned = False
        self.consecutive_heartbeats_without_reply = 0

    def reset(self) -> None:
        """Forget unanswered pings; called for every inbound event."""
        self.consecutive_heartbeats_without_reply = 0
        self._warned = False

    def tick(self) -> None:
        """Run one check."""
        session = self._state()
        if not session.connected:
            if session.status is SessionStatus.DISCONNECTED:
                logger.info(f"Disconnected from {self._target}; restart the bridge to reconnect")
                if self._on_disconnected is not None:
                    self._on_disconnected()
            else:
                logger.info(f"Still trying to connect to {self._target}...")
            return
        if session.identifier is None:
            logger.info("Connected but waiting for session ID...")
            return

        now = self._clock()
        last = session.last_activity_at if session.last_activity_at is not None else now
        idle = now - last
        if idle <= self.idle_threshold:
            return

        if self._submit(make_ping(), synthetic=True) is None:
            return
        self.consecutive_heartbeats_without_reply += 1
        logger.debug(f"Idle for {idle:.0f}s, sent ping #{self.consecutive_heartbeats_without_reply}")

        if self.consecutive_heartbeats_without_reply >= self.max_unanswered and not self._warned:
            self._warned = True
            logger.error(f"No reply from server after {self.consecutive_heartbeats_without_reply} pings ({idle:.0f}s idle); the remote server may be unresponsive")

    def start(self) -> None:
        """Schedule the periodic task on the running loop."""
        if self._task is None:
            self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """Cancel the periodic task."""
        task, self._task = self._task, None
        if task is not None:
            task.cancel()
            with suppress(asyncio.CancelledError):
                await task

    async def _run(self) -> None:
        """Tick forever; a failing tick is logged and the loop continues."""
        while True:
            await asyncio.sleep(self.interval)
            try:
                self.tick()
            except Exception:
                logger.exception("Liveness check failed")
