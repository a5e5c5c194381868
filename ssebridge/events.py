# -*- coding: utf-8 -*-
"""Location: ./ssebridge/events.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0
Authors: Mihai Criveti, Manav Gupta

Server-Sent Event parsing and stdout framing.

Examples:
    >>> ev = None
    >>> for line in ["event: endpoint", "data: /messages/?session_id=abc", ""]:
    ...     ev, done = SSEEvent.parse_sse_line(line, ev)
    >>> done, ev.event, ev.data
    (True, 'endpoint', '/messages/?session_id=abc')
    >>> format_inbound(SSEEvent("message", '{"jsonrpc":"2.0","id":1,"result":{}}'))
    '{"jsonrpc":"2.0","id":1,"result":{}}'
    >>> format_inbound(SSEEvent("endpoint", "/messages/?session_id=abc"))
    '{"event": "endpoint", "data": "/messages/?session_id=abc"}'
"""

# Standard
import json
from typing import Optional, Tuple

DEFAULT_EVENT = "message"


class SSEEvent:
    """One server-sent event being assembled from stream lines.

    Attributes:
        event: Event name; ``message`` unless the server names it.
        data: Payload, multiple ``data:`` lines joined with ``\\n``.
        event_id: Value of the last ``id:`` field, if any.
        retry: Reconnection hint in milliseconds, if the server sent a valid one.
    """

    def __init__(self, event: str = DEFAULT_EVENT, data: str = "", event_id: Optional[str] = None, retry: Optional[int] = None):
        """Initialize an SSE event.

        Args:
            event: Event name.
            data: Initial payload.
            event_id: Optional event ID.
            retry: Optional retry interval in milliseconds.
        """
        self.event = event
        self.data = data
        self.event_id = event_id
        self.retry = retry
        # A "data:" field was seen, even if its value was empty
        self._has_data = bool(data)

    def __repr__(self) -> str:
        """Debug representation.

        Returns:
            str: Event name and a truncated payload.
        """
        return f"SSEEvent(event={self.event!r}, data={self.data[:100]!r})"

    def add_data(self, value: str) -> None:
        """Append one ``data:`` field value.

        Args:
            value: Field value with the optional leading space removed.

        Examples:
            >>> ev = SSEEvent()
            >>> ev.add_data("")
            >>> ev.add_data("x")
            >>> ev.data
            '\\nx'
        """
        self.data = f"{self.data}\n{value}" if self._has_data else value
        self._has_data = True

    @classmethod
    def parse_sse_line(cls, line: str, current_event: Optional["SSEEvent"] = None) -> Tuple[Optional["SSEEvent"], bool]:
        """Feed one stream line into the event being built.

        Args:
            line: Line without its terminator (trailing CR/LF are tolerated).
            current_event: Event assembled so far, if any.

        Returns:
            ``(event, is_complete)``. A blank line completes an event that has
            a non-empty payload; events without payload are discarded.

        Examples:
            >>> SSEEvent.parse_sse_line(": keepalive comment")
            (None, False)
            >>> ev, done = SSEEvent.parse_sse_line("data: first")
            >>> ev, done = SSEEvent.parse_sse_line("data: second", ev)
            >>> ev.data
            'first\\nsecond'
            >>> SSEEvent.parse_sse_line("", ev)[1]
            True
            >>> SSEEvent.parse_sse_line("retry: soon")[0].retry is None
            True
        """
        line = line.rstrip("\r\n")
        if not line:
            complete = current_event is not None and bool(current_event.data)
            return (current_event, True) if complete else (None, False)
        if line.startswith(":"):
            return current_event, False

        name, _, value = line.partition(":")
        if value.startswith(" "):
            value = value[1:]
        event = current_event if current_event is not None else cls()

        if name == "event":
            event.event = value or DEFAULT_EVENT
        elif name == "data":
            event.add_data(value)
        elif name == "id":
            event.event_id = value
        elif name == "retry" and value.isdigit():
            event.retry = int(value)
        return event, False


def format_inbound(event: SSEEvent) -> str:
    """Serialize an event to the single line written on stdout.

    Default ``message`` events carry complete protocol messages and are written
    verbatim. Named events are wrapped so clients can tell them apart.

    Args:
        event: Completed event.

    Returns:
        str: Line without the trailing newline.
    """
    if event.event == DEFAULT_EVENT:
        return event.data
    return json.dumps({"event": event.event, "data": event.data}, ensure_ascii=False)
