# -*- coding: utf-8 -*-
"""Location: ./ssebridge/handshake.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0
Authors: Mihai Criveti

Session identifier extraction from the ``endpoint`` handshake event.

Servers disagree on how they announce the session: some send JSON, some a
full URL, some a relative path. Each strategy below is a pure function
``(payload) -> Optional[str]``; :func:`resolve_session_id` tries them in order
and the first non-empty result wins.

Examples:
    >>> resolve_session_id('{"session_id":"abc123"}')
    'abc123'
    >>> resolve_session_id('{"endpoint":"http://host/messages/?session_id=e1"}')
    'e1'
    >>> resolve_session_id("http://host/messages/?session_id=xyz")
    'xyz'
    >>> resolve_session_id("/messages/?session_id=rel&x=1")
    'rel'
    >>> resolve_session_id("not a url at all") is None
    True
"""

# Standard
import json
import re
from typing import Any, Callable, Optional, Sequence, Tuple
from urllib.parse import parse_qs, urlsplit

# First-Party
from ssebridge.services.logging_service import logging_service

logger = logging_service.get_logger(__name__)

SESSION_PARAM = "session_id"
URL_FIELDS = ("url", "endpoint", "uri")
_SESSION_PATTERN = re.compile(r"session_id=([^&]+)")

Strategy = Callable[[str], Optional[str]]


def _as_identifier(value: Any) -> Optional[str]:
    """Normalize a candidate identifier.

    Args:
        value: Raw candidate.

    Returns:
        Optional[str]: Stripped string, or None when empty or not scalar.

    Examples:
        >>> _as_identifier("  abc ")
        'abc'
        >>> _as_identifier(42)
        '42'
        >>> _as_identifier("") is None, _as_identifier({"a": 1}) is None, _as_identifier(True) is None
        (True, True, True)
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        value = str(value)
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


def _load_object(payload: str) -> Optional[dict]:
    """Parse the payload as a JSON object.

    Args:
        payload: Raw event data.

    Returns:
        Optional[dict]: The object, or None for other JSON values and non-JSON.
    """
    try:
        obj = json.loads(payload)
    except ValueError:
        return None
    return obj if isinstance(obj, dict) else None


def _query_session_id(url: str) -> Optional[str]:
    """Read the session query parameter from an absolute or relative URL.

    Args:
        url: URL text.

    Returns:
        Optional[str]: First non-empty ``session_id`` value.

    Examples:
        >>> _query_session_id("http://h/messages/?a=1&session_id=s%201")
        's 1'
        >>> _query_session_id("http://h/messages/") is None
        True
    """
    try:
        query = urlsplit(url.strip()).query
    except ValueError:
        return None
    for value in parse_qs(query).get(SESSION_PARAM, []):
        identifier = _as_identifier(value)
        if identifier:
            return identifier
    return None


def from_json_field(payload: str) -> Optional[str]:
    """Strategy 1: JSON object with a ``session_id`` field.

    Args:
        payload: Raw event data.

    Returns:
        Optional[str]: Identifier or None.

    Examples:
        >>> from_json_field('{"session_id": "abc"}')
        'abc'
        >>> from_json_field('"abc"') is None
        True
    """
    obj = _load_object(payload)
    if obj is None:
        return None
    return _as_identifier(obj.get(SESSION_PARAM))


def from_json_url(payload: str) -> Optional[str]:
    """Strategy 2: JSON object whose ``url``, ``endpoint`` or ``uri`` holds a URL.

    Args:
        payload: Raw event data.

    Returns:
        Optional[str]: Identifier or None.

    Examples:
        >>> from_json_url('{"uri": "/messages/?session_id=u1"}')
        'u1'
        >>> from_json_url('{"url": ""}') is None
        True
    """
    obj = _load_object(payload)
    if obj is None:
        return None
    # First truthy field wins, in declaration order
    url = next((obj[key] for key in URL_FIELDS if obj.get(key)), None)
    if not isinstance(url, str):
        return None
    logger.debug(f"Found URL in handshake object: {url}")
    return _query_session_id(url)


def from_url(payload: str) -> Optional[str]:
    """Strategy 3: the payload itself is a URL.

    Args:
        payload: Raw event data.

    Returns:
        Optional[str]: Identifier or None.
    """
    return _query_session_id(payload)


def from_pattern(payload: str) -> Optional[str]:
    """Strategy 4: scan for ``session_id=<value>`` anywhere in the text.

    Args:
        payload: Raw event data.

    Returns:
        Optional[str]: Identifier or None.

    Examples:
        >>> from_pattern("endpoint is /m#session_id=frag1&v=2")
        'frag1'
        >>> from_pattern("session_id=") is None
        True
    """
    match = _SESSION_PATTERN.search(payload)
    if not match:
        return None
    return _as_identifier(match.group(1))


STRATEGIES: Tuple[Tuple[str, Strategy], ...] = (
    ("json field", from_json_field),
    ("json url", from_json_url),
    ("direct url", from_url),
    ("text pattern", from_pattern),
)


def resolve_session_id(payload: str, strategies: Sequence[Tuple[str, Strategy]] = STRATEGIES) -> Optional[str]:
    """Extract the session identifier from a handshake payload.

    Args:
        payload: Data of the ``endpoint`` event.
        strategies: Ordered ``(name, strategy)`` pairs.

    Returns:
        Optional[str]: The identifier, or None when every strategy fails.
    """
    for name, strategy in strategies:
        identifier = strategy(payload)
        if identifier:
            logger.info(f"Extracted session ID via {name}: {identifier}")
            return identifier
        logger.debug(f"Handshake strategy '{name}' found no session ID")
    logger.error("Failed to extract session ID using all strategies")
    logger.error(f"Handshake payload was: {payload!r}")
    return None
