# -*- coding: utf-8 -*-
"""Location: ./ssebridge/errors.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0
Authors: Keval Mahajan

Outbound failure classification.
Every failed POST is reduced to a :class:`FailureKind` so it can be logged on
stderr with a stable label and, when enabled, mirrored to the client as a
JSON-RPC error object.

Examples:
    >>> classify_status(404)
    <FailureKind.ENDPOINT_MISSING: 'endpoint_missing'>
    >>> classify_status(403)
    <FailureKind.SESSION_INVALID: 'session_invalid'>
    >>> classify_status(500)
    <FailureKind.HTTP_ERROR: 'http_error'>
"""

# Standard
from enum import Enum
import errno
import json
from typing import Any, Dict, Optional

# Third-Party
import httpx

JSONRPC_INTERNAL_ERROR = -32603
JSONRPC_SERVER_ERROR = -32000


class FailureKind(str, Enum):
    """Why an outbound request did not reach the server.

    Attributes:
        ENDPOINT_MISSING (str): Server answered 404 on the message endpoint.
        SESSION_INVALID (str): Server answered 401 or 403.
        HTTP_ERROR (str): Any other non-success status.
        TIMEOUT (str): The POST exceeded its timeout.
        CONNECTION_REFUSED (str): Nothing listening at the server address.
        NETWORK_ERROR (str): Other transport-level failure.
        UNEXPECTED (str): A bug or unforeseen exception in the handler.
    """

    ENDPOINT_MISSING = "endpoint_missing"
    SESSION_INVALID = "session_invalid"
    HTTP_ERROR = "http_error"
    TIMEOUT = "timeout"
    CONNECTION_REFUSED = "connection_refused"
    NETWORK_ERROR = "network_error"
    UNEXPECTED = "unexpected"


class StreamClosedError(Exception):
    """Raised when the server ends the event stream without an error."""


def classify_status(status: int) -> FailureKind:
    """Map a non-success HTTP status onto a failure kind.

    Args:
        status: HTTP status code.

    Returns:
        FailureKind: Classification.

    Examples:
        >>> classify_status(401).value
        'session_invalid'
        >>> classify_status(502).value
        'http_error'
    """
    if status == 404:
        return FailureKind.ENDPOINT_MISSING
    if status in (401, 403):
        return FailureKind.SESSION_INVALID
    return FailureKind.HTTP_ERROR


def _is_connection_refused(exc: BaseException) -> bool:
    """Walk the exception chain looking for a refused connection.

    Args:
        exc: Exception raised by the HTTP client.

    Returns:
        bool: True when the peer refused the connection.
    """
    seen = set()
    current: Optional[BaseException] = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        if isinstance(current, ConnectionRefusedError):
            return True
        if isinstance(current, OSError) and current.errno == errno.ECONNREFUSED:
            return True
        if "connection refused" in str(current).lower():
            return True
        current = current.__cause__ or current.__context__
    return False


def classify_exception(exc: BaseException) -> FailureKind:
    """Map an exception raised while posting onto a failure kind.

    Args:
        exc: The exception.

    Returns:
        FailureKind: Classification.

    Examples:
        >>> classify_exception(httpx.ReadTimeout("slow")).value
        'timeout'
        >>> classify_exception(httpx.ConnectError("[Errno 111] Connection refused")).value
        'connection_refused'
        >>> classify_exception(httpx.ConnectError("Name or service not known")).value
        'network_error'
        >>> classify_exception(ValueError("boom")).value
        'unexpected'
    """
    if isinstance(exc, httpx.TimeoutException):
        return FailureKind.TIMEOUT
    if isinstance(exc, (httpx.TransportError, OSError)):
        if _is_connection_refused(exc):
            return FailureKind.CONNECTION_REFUSED
        return FailureKind.NETWORK_ERROR
    return FailureKind.UNEXPECTED


def describe_failure(kind: FailureKind, status: Optional[int] = None) -> str:
    """Human readable explanation for the diagnostic channel.

    Args:
        kind: Failure classification.
        status: HTTP status, when there was one.

    Returns:
        str: One-line explanation.

    Examples:
        >>> describe_failure(FailureKind.HTTP_ERROR, 500)
        'HTTP error 500'
        >>> describe_failure(FailureKind.TIMEOUT)
        'Request timed out waiting for the server'
    """
    if kind is FailureKind.ENDPOINT_MISSING:
        return "Endpoint not found. Make sure the server exposes the message endpoint"
    if kind is FailureKind.SESSION_INVALID:
        return f"Authentication error ({status}). Session ID might be invalid"
    if kind is FailureKind.HTTP_ERROR:
        return f"HTTP error {status}"
    if kind is FailureKind.TIMEOUT:
        return "Request timed out waiting for the server"
    if kind is FailureKind.CONNECTION_REFUSED:
        return "Connection refused. Make sure the server is running and accessible"
    if kind is FailureKind.NETWORK_ERROR:
        return "Network error while contacting the server"
    return "Unexpected error while forwarding the request"


def make_error(message: str, code: int = JSONRPC_INTERNAL_ERROR, data: Any = None, request_id: Any = None) -> Dict[str, Any]:
    """Construct a JSON-RPC error response.

    Args:
        message: Error message.
        code: JSON-RPC error code (default -32603).
        data: Optional extra error data.
        request_id: Id of the request that failed.

    Returns:
        dict: JSON-RPC error object.

    Examples:
        >>> make_error("Invalid input", code=-32600, request_id=7)
        {'jsonrpc': '2.0', 'id': 7, 'error': {'code': -32600, 'message': 'Invalid input'}}
        >>> make_error("Oops", data={"info": 1})["error"]["data"]
        {'info': 1}
    """
    err: Dict[str, Any] = {
        "jsonrpc": "2.0",
        "id": request_id,
        "error": {"code": code, "message": message},
    }
    if data is not None:
        err["error"]["data"] = data
    return err


def extract_request_id(line: str) -> Optional[Any]:
    """Return the ``id`` of a JSON-RPC request line, if it has one.

    Args:
        line: Raw outbound line.

    Returns:
        The request id, or None for notifications and non-JSON input.

    Examples:
        >>> extract_request_id('{"jsonrpc":"2.0","id":3,"method":"x"}')
        3
        >>> extract_request_id('{"jsonrpc":"2.0","method":"notify"}') is None
        True
        >>> extract_request_id("not json") is None
        True
    """
    try:
        obj = json.loads(line)
    except ValueError:
        return None
    if isinstance(obj, dict):
        return obj.get("id")
    return None
