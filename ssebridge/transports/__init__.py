# -*- coding: utf-8 -*-
"""Location: ./ssebridge/transports/__init__.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0
Authors: Mihai Criveti

Bridge Transport Package.
This package provides the two ends of the bridge:
- stdio: line-delimited protocol messages on stdin/stdout
- SSE: the server's event stream, consumed over HTTP

Examples:
    >>> from ssebridge.transports import Transport, StdioTransport, SSEConnection
    >>> issubclass(StdioTransport, Transport), issubclass(SSEConnection, Transport)
    (True, True)
    >>> from ssebridge.transports import __all__
    >>> sorted(__all__)
    ['SSEConnection', 'StdioTransport', 'Transport']
"""

from ssebridge.transports.base import Transport
from ssebridge.transports.sse_transport import SSEConnection
from ssebridge.transports.stdio_transport import StdioTransport

__all__ = ["Transport", "StdioTransport", "SSEConnection"]
