# -*- coding: utf-8 -*-
"""Location: ./ssebridge/config.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0
Authors: Mihai Criveti, Manav Gupta

SSE Bridge Configuration.
This module defines configuration settings for the bridge using Pydantic.
It loads configuration from environment variables (prefix ``SSE_BRIDGE_``)
or a ``.env`` file.

Environment variables:
- SSE_BRIDGE_SSE_PATH: Stream path appended to the base URL (default: "/sse")
- SSE_BRIDGE_MESSAGE_PATH: POST path appended to the base URL (default: "/messages/")
- SSE_BRIDGE_POST_TIMEOUT: Seconds allowed per outbound POST (default: 10)
- SSE_BRIDGE_CONNECT_TIMEOUT: Seconds allowed to open the stream (default: 10)
- SSE_BRIDGE_HEARTBEAT_INTERVAL: Liveness check period in seconds (default: 5)
- SSE_BRIDGE_IDLE_THRESHOLD: Idle seconds before a synthetic ping (default: 30)
- SSE_BRIDGE_MAX_UNANSWERED_PINGS: Pings without reply before warning (default: 5)
- SSE_BRIDGE_TROUBLESHOOT_AFTER: Seconds before stream errors print tips (default: 10)
- SSE_BRIDGE_MIRROR_ERRORS: Mirror outbound failures on stdout (default: True)
- SSE_BRIDGE_FORWARD_NAMED_EVENTS: Forward non-message events (default: True)
- SSE_BRIDGE_FORWARD_POST_RESPONSES: Forward POST response bodies (default: True)
- SSE_BRIDGE_LOG_LEVEL: Logging level, or OFF (default: "INFO")

Examples:
    >>> from ssebridge.config import Settings
    >>> s = Settings()
    >>> s.sse_path, s.message_path
    ('/sse', '/messages/')
    >>> s.sse_url("http://localhost:8077/")
    'http://localhost:8077/sse'
    >>> s2 = Settings(message_path="messages")
    >>> s2.message_path
    '/messages'
"""

# Standard
from functools import lru_cache

# Third-Party
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def join_url(base_url: str, path: str) -> str:
    """Append ``path`` to ``base_url`` without doubling or dropping the separator.

    Args:
        base_url: Server base URL, with or without a trailing slash.
        path: Absolute path such as ``/sse``.

    Returns:
        str: The joined URL.

    Examples:
        >>> join_url("http://host:8077", "/sse")
        'http://host:8077/sse'
        >>> join_url("http://host:8077/", "/messages/")
        'http://host:8077/messages/'
        >>> join_url("http://host:8077/api//", "sse")
        'http://host:8077/api/sse'
    """
    return base_url.rstrip("/") + "/" + path.lstrip("/")


class Settings(BaseSettings):
    """
    SSE bridge configuration settings.

    Examples:
        >>> from ssebridge.config import Settings
        >>> s = Settings(post_timeout=2.5)
        >>> s.post_timeout
        2.5
        >>> s.message_url("http://x")
        'http://x/messages/'
        >>> s.heartbeat_interval, s.idle_threshold, s.max_unanswered_pings
        (5.0, 30.0, 5)
    """

    # Endpoints
    sse_path: str = "/sse"
    message_path: str = "/messages/"

    # Timeouts (seconds)
    post_timeout: float = Field(10.0, gt=0)
    connect_timeout: float = Field(10.0, gt=0)
    troubleshoot_after: float = Field(10.0, ge=0)

    # Liveness
    heartbeat_interval: float = Field(5.0, gt=0)
    idle_threshold: float = Field(30.0, gt=0)
    max_unanswered_pings: int = Field(5, ge=1)

    # Forwarding
    mirror_errors: bool = True
    forward_named_events: bool = True
    forward_post_responses: bool = True

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_prefix="SSE_BRIDGE_", env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore")

    @field_validator("sse_path", "message_path")
    @classmethod
    def _ensure_leading_slash(cls, v: str) -> str:
        """Normalize endpoint paths to start with a single slash.

        Args:
            v: Configured path.

        Returns:
            str: Path starting with ``/``.

        Examples:
            >>> Settings._ensure_leading_slash("sse")
            '/sse'
            >>> Settings._ensure_leading_slash("//messages/")
            '/messages/'
        """
        return "/" + v.strip().lstrip("/")

    def sse_url(self, base_url: str) -> str:
        """Stream endpoint for ``base_url``.

        Args:
            base_url: Validated server base URL.

        Returns:
            str: ``base_url`` + ``sse_path``.
        """
        return join_url(base_url, self.sse_path)

    def message_url(self, base_url: str) -> str:
        """POST endpoint for ``base_url`` (without the session query).

        Args:
            base_url: Validated server base URL.

        Returns:
            str: ``base_url`` + ``message_path``.
        """
        return join_url(base_url, self.message_path)


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings: A cached instance of the Settings class.

    Examples:
        >>> settings = get_settings()
        >>> isinstance(settings, Settings)
        True
        >>> settings is get_settings()
        True
    """
    return Settings()
