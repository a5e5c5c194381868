# -*- coding: utf-8 -*-
"""Location: ./ssebridge/types.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0
Authors: Mihai Criveti

SSE Bridge Shared Types.
Enumerations shared between the session state, the logging service and the
liveness monitor.

Examples:
    >>> from ssebridge.types import LogLevel, SessionStatus
    >>> LogLevel.WARNING.value
    'warning'
    >>> SessionStatus.READY.value
    'ready'
"""

# Standard
from enum import Enum


class LogLevel(str, Enum):
    """Standard syslog severity levels as defined in RFC 5424.

    Attributes:
        DEBUG (str): Debug level.
        INFO (str): Informational level.
        NOTICE (str): Notice level.
        WARNING (str): Warning level.
        ERROR (str): Error level.
        CRITICAL (str): Critical level.
        ALERT (str): Alert level.
        EMERGENCY (str): Emergency level.
    """

    DEBUG = "debug"
    INFO = "info"
    NOTICE = "notice"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"
    ALERT = "alert"
    EMERGENCY = "emergency"


class SessionStatus(str, Enum):
    """Lifecycle of the bridge session.

    ``INIT -> CONNECTING -> CONNECTED_NO_SESSION -> READY``; any state may fall
    to ``DISCONNECTED`` and nothing leaves ``DISCONNECTED`` automatically.

    Attributes:
        INIT (str): Created, stream not requested yet.
        CONNECTING (str): Stream requested, not open.
        CONNECTED_NO_SESSION (str): Stream open, handshake not resolved.
        READY (str): Stream open and session identifier known.
        DISCONNECTED (str): Stream failed or closed.
    """

    INIT = "init"
    CONNECTING = "connecting"
    CONNECTED_NO_SESSION = "connected_no_session"
    READY = "ready"
    DISCONNECTED = "disconnected"
