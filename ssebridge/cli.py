# -*- coding: utf-8 -*-
"""Location: ./ssebridge/cli.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0
Authors: Mihai Criveti, Keval Mahajan

SSE Bridge command line entry point.

Usage:
    ssebridge <server-url>

Example:
    $ ssebridge http://localhost:8077
    $ python3 -m ssebridge http://localhost:8077

Everything else is configured through ``SSE_BRIDGE_*`` environment variables
(see :mod:`ssebridge.config`). Exit status is 0 on normal or interrupted
shutdown and 1 when the URL argument is missing or invalid.
"""

# Standard
import argparse
import asyncio
from contextlib import suppress
import signal
import sys
from typing import Callable, NoReturn, Optional, Sequence
from urllib.parse import urlsplit

# First-Party
from ssebridge import __version__
from ssebridge.bridge import SessionBridge
from ssebridge.config import get_settings, Settings
from ssebridge.services.logging_service import logging_service
from ssebridge.transports.stdio_transport import StdioTransport

logger = logging_service.get_logger(__name__)

PROG = "ssebridge"
EXIT_USAGE = 1


class _BridgeArgumentParser(argparse.ArgumentParser):
    """Argument parser that reports usage errors with exit status 1."""

    def error(self, message: str) -> NoReturn:
        """Print usage and exit 1.

        Args:
            message: argparse error text.
        """
        self.print_usage(sys.stderr)
        self.exit(EXIT_USAGE, f"{self.prog}: error: {message}\n")


def is_valid_url(value: str) -> bool:
    """Check that ``value`` is an absolute http(s) URL with a host.

    Args:
        value: Candidate server URL.

    Returns:
        bool: True when usable as a base URL.

    Examples:
        >>> is_valid_url("http://localhost:8077")
        True
        >>> is_valid_url("https://example.com/mcp/")
        True
        >>> is_valid_url("localhost:8077")
        False
        >>> is_valid_url("ftp://example.com")
        False
        >>> is_valid_url("http://")
        False
    """
    try:
        parts = urlsplit(value.strip())
        # Accessing .port validates it
        _ = parts.port
    except ValueError:
        return False
    return parts.scheme in ("http", "https") and bool(parts.hostname)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    """Parse command line arguments.

    Args:
        argv: Arguments without the program name.

    Returns:
        argparse.Namespace: Parsed arguments (``url`` may be None).

    Examples:
        >>> _parse_args(["http://localhost:8077"]).url
        'http://localhost:8077'
        >>> _parse_args([]).url is None
        True
    """
    parser = _BridgeArgumentParser(
        prog=PROG,
        description="Bridge a stdio client to an SSE+HTTP server",
        epilog="Example: ssebridge http://localhost:8077",
    )
    parser.add_argument("url", nargs="?", help="Server base URL, e.g. http://host:port")
    return parser.parse_args(argv)


def _fail(*lines: str) -> NoReturn:
    """Print ``lines`` to stderr and exit with the usage status.

    Args:
        *lines: Messages.

    Raises:
        SystemExit: Always.
    """
    for line in lines:
        print(line, file=sys.stderr)
    sys.exit(EXIT_USAGE)


def _install_signal_handlers(loop: asyncio.AbstractEventLoop, callback: Callable[[], None]) -> None:
    """Install SIGINT/SIGTERM handlers that trigger graceful shutdown.

    Args:
        loop: The asyncio event loop to attach handlers to.
        callback: Called when a signal arrives.

    Examples:
        >>> import asyncio
        >>> loop = asyncio.new_event_loop()
        >>> _install_signal_handlers(loop, lambda: None)
        >>> loop.close()
    """
    for sig in (getattr(signal, "SIGINT", None), getattr(signal, "SIGTERM", None)):
        if sig is None:
            continue
        with suppress(NotImplementedError, RuntimeError, ValueError):
            loop.add_signal_handler(sig, callback)


async def run_bridge(base_url: str, settings: Settings) -> None:
    """Wire stdio to a :class:`SessionBridge` and run until shutdown.

    Args:
        base_url: Validated server base URL.
        settings: Bridge configuration.
    """
    stdio = StdioTransport()
    await stdio.connect()
    bridge = SessionBridge(base_url, settings, output=stdio.send_line)
    _install_signal_handlers(asyncio.get_running_loop(), bridge.request_shutdown)
    try:
        await bridge.run(stdio.receive_lines())
    finally:
        await stdio.disconnect()


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Entry point for the bridge.

    - Parses and validates the server URL
    - Configures stderr logging
    - Runs the bridge with signal handling

    Args:
        argv: Optional sequence of command line arguments. If None, uses sys.argv[1:].
    """
    args = _parse_args(sys.argv[1:] if argv is None else argv)
    if not args.url:
        _fail("Error: Server URL is required", f"Usage: {PROG} <server-url>", f"Example: {PROG} http://localhost:8077")
    if not is_valid_url(args.url):
        _fail(f"Error: Invalid URL format: {args.url}", "Please provide a valid URL including the protocol (http:// or https://)")

    settings = get_settings()
    logging_service.configure(settings.log_level)
    logger.info(f"Starting {PROG} {__version__} -> {args.url.strip()}")
    try:
        asyncio.run(run_bridge(args.url.strip(), settings))
    except KeyboardInterrupt:
        pass
    finally:
        logger.info("Shutdown complete.")
        logging_service.shutdown()


if __name__ == "__main__":  # pragma: no cover
    main()
