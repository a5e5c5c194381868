# -*- coding: utf-8 -*-
"""Location: ./ssebridge/__init__.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0
Authors: Mihai Criveti

SSE Bridge - a stdio <-> SSE+HTTP session bridge for line-delimited protocols such as MCP.
"""

__author__ = "Mihai Criveti"
__copyright__ = "Copyright 2025"
__license__ = "Apache 2.0"
__version__ = "0.7.0"
__description__ = "Bridge a stdio request/response client to an SSE+HTTP server"
__packages__ = ["ssebridge"]

# Export main components for easier imports
__all__ = [
    "__version__",
    "__author__",
    "__license__",
    "bridge",
    "cli",
    "handshake",
]
