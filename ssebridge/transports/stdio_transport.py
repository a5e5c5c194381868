# -*- coding: utf-8 -*-
"""Location: ./ssebridge/transports/stdio_transport.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0
Authors: Mihai Criveti

stdio Transport Implementation.
Reads newline-delimited text from stdin without blocking the event loop and
writes one flushed line per protocol message to stdout. Diagnostics never go
through this transport.

Note:
    Reading uses ``loop.connect_read_pipe`` and therefore needs stdin to be a
    pipe, socket or terminal. A broken stdout (EPIPE) is reported to the
    caller instead of raising, so the bridge can shut down in order.
"""

# Standard
import asyncio
import errno
import sys
from typing import AsyncGenerator, Optional, TextIO

# First-Party
from ssebridge.services.logging_service import logging_service
from ssebridge.transports.base import Transport

logger = logging_service.get_logger(__name__)

# Protocol messages can be large; the asyncio default (64 KiB) is too small.
STDIN_LINE_LIMIT = 16 * 1024 * 1024


class StdioTransport(Transport):
    """Transport implementation using stdio streams.

    Examples:
        >>> import io
        >>> out = io.StringIO()
        >>> transport = StdioTransport(stdout=out)
        >>> transport.send_line('{"jsonrpc":"2.0","id":1,"result":{}}')
        True
        >>> out.getvalue()
        '{"jsonrpc":"2.0","id":1,"result":{}}\\n'
        >>> import asyncio
        >>> asyncio.run(transport.is_connected())
        False
    """

    def __init__(self, stdin: Optional[TextIO] = None, stdout: Optional[TextIO] = None):
        """Initialize stdio transport.

        Args:
            stdin: Input stream, ``sys.stdin`` when omitted.
            stdout: Output stream, ``sys.stdout`` when omitted.
        """
        self._stdin = stdin
        self._stdout = stdout
        self._stdin_reader: Optional[asyncio.StreamReader] = None
        self._read_transport: Optional[asyncio.ReadTransport] = None
        self._connected = False
        self._broken = False

    async def connect(self) -> None:
        """Attach a non-blocking reader to stdin."""
        loop = asyncio.get_running_loop()
        reader = asyncio.StreamReader(limit=STDIN_LINE_LIMIT)
        protocol = asyncio.StreamReaderProtocol(reader)
        self._read_transport, _ = await loop.connect_read_pipe(lambda: protocol, self._stdin or sys.stdin)
        self._stdin_reader = reader
        self._connected = True
        logger.debug("stdio transport connected")

    async def disconnect(self) -> None:
        """Stop reading; stdout is flushed but left open for the interpreter."""
        if self._read_transport is not None:
            self._read_transport.close()
            self._read_transport = None
        self._stdin_reader = None
        self._connected = False
        if not self._broken:
            try:
                (self._stdout or sys.stdout).flush()
            except (OSError, ValueError):
                pass  # already gone at interpreter shutdown
        logger.debug("stdio transport disconnected")

    async def is_connected(self) -> bool:
        """Check if transport is connected.

        Returns:
            True if connected
        """
        return self._connected

    def send_line(self, line: str) -> bool:
        """Write one protocol line followed by a newline, then flush.

        Args:
            line: Text without a trailing newline.

        Returns:
            bool: False when stdout is gone (e.g. broken pipe).
        """
        if self._broken:
            return False
        stream = self._stdout or sys.stdout
        try:
            stream.write(line + "\n")
            stream.flush()
        except OSError as e:
            self._broken = True
            if e.errno in (errno.EPIPE, errno.EINVAL):
                logger.warning("stdout closed by the client")
            else:
                logger.error(f"Failed to write to stdout: {e}")
            return False
        return True

    async def receive_lines(self) -> AsyncGenerator[str, None]:
        """Receive lines from stdin.

        Yields:
            Non-blank lines with surrounding whitespace removed. The generator
            ends at EOF.

        Raises:
            RuntimeError: If transport is not connected
        """
        if not self._stdin_reader:
            raise RuntimeError("Transport not connected")

        while True:
            try:
                raw = await self._stdin_reader.readline()
            except ValueError as e:
                # Line longer than STDIN_LINE_LIMIT; the reader has discarded it.
                logger.error(f"Dropping oversized stdin line: {e}")
                continue
            if not raw:
                break
            line = raw.decode("utf-8", errors="replace").strip()
            if line:
                yield line
