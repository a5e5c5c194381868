# -*- coding: utf-8 -*-
"""Location: ./ssebridge/session.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0
Authors: Mihai Criveti

Bridge session state.
The session is an immutable value; every transition is a plain function that
returns the next state, so the bridge can be exercised without a network.

Examples:
    >>> s = Session()
    >>> s.status.value, s.identifier, s.connected
    ('init', None, False)
    >>> s = begin_connect(s, now=1.0)
    >>> s = mark_open(s, now=1.5)
    >>> s.status.value
    'connected_no_session'
    >>> s = resolve(s, "abc123", now=2.0)
    >>> s.status.value, s.identifier, s.ready
    ('ready', 'abc123', True)
    >>> resolve(s, "other", now=3.0).identifier
    'abc123'
    >>> mark_closed(s).status.value
    'disconnected'
"""

# Standard
from dataclasses import dataclass, replace
from typing import Optional

# First-Party
from ssebridge.types import SessionStatus


@dataclass(frozen=True)
class Session:
    """Connection and handshake state of the bridge.

    Args:
        identifier: Session id issued by the server, set at most once.
        connected: Whether the event stream is currently open.
        status: Lifecycle status.
        open_requested_at: Clock reading when the stream was requested.
        established_at: Clock reading when the stream opened.
        last_activity_at: Clock reading of the last inbound event.
    """

    identifier: Optional[str] = None
    connected: bool = False
    status: SessionStatus = SessionStatus.INIT
    open_requested_at: Optional[float] = None
    established_at: Optional[float] = None
    last_activity_at: Optional[float] = None

    @property
    def ready(self) -> bool:
        """Whether outbound requests may be dispatched.

        Returns:
            bool: True when connected and the identifier is known.
        """
        return self.connected and self.identifier is not None


def begin_connect(session: Session, now: float) -> Session:
    """Record that the stream has been requested.

    Args:
        session: Current state.
        now: Clock reading.

    Returns:
        Session: Next state.
    """
    return replace(session, status=SessionStatus.CONNECTING, open_requested_at=now)


def mark_open(session: Session, now: float) -> Session:
    """Record a successful stream open.

    Args:
        session: Current state.
        now: Clock reading.

    Returns:
        Session: Next state.
    """
    status = SessionStatus.READY if session.identifier is not None else SessionStatus.CONNECTED_NO_SESSION
    return replace(session, connected=True, status=status, established_at=now, last_activity_at=now)


def mark_closed(session: Session) -> Session:
    """Record a stream error or close. The identifier is kept.

    Args:
        session: Current state.

    Returns:
        Session: Next state.
    """
    return replace(session, connected=False, status=SessionStatus.DISCONNECTED)


def resolve(session: Session, identifier: str, now: float) -> Session:
    """Set the session identifier unless one is already set.

    Args:
        session: Current state.
        identifier: Identifier extracted from the handshake.
        now: Clock reading.

    Returns:
        Session: Next state; unchanged when already resolved.
    """
    if session.identifier is not None:
        return session
    status = SessionStatus.READY if session.connected else session.status
    return replace(session, identifier=identifier, status=status, last_activity_at=now)


def touch(session: Session, now: float) -> Session:
    """Record inbound activity.

    Args:
        session: Current state.
        now: Clock reading.

    Returns:
        Session: Next state.
    """
    return replace(session, last_activity_at=now)
