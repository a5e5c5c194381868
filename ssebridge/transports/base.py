# -*- coding: utf-8 -*-
"""Location: ./ssebridge/transports/base.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0
Authors: Mihai Criveti

Base Transport Interface.
This module defines the lifecycle shared by both ends of the bridge.
"""

# Standard
from abc import ABC, abstractmethod


class Transport(ABC):
    """Base class for bridge transport implementations.

    Examples:
        >>> try:
        ...     Transport()
        ... except TypeError as e:
        ...     print("Cannot instantiate abstract class")
        Cannot instantiate abstract class
    """

    @abstractmethod
    async def connect(self) -> None:
        """Initialize transport connection.

        This method should establish the underlying connection for the transport.
        It must be called before any traffic flows.
        """

    @abstractmethod
    async def disconnect(self) -> None:
        """Close transport connection and release its resources."""

    @abstractmethod
    async def is_connected(self) -> bool:
        """Check if transport is connected.

        Returns:
            True if connected
        """
