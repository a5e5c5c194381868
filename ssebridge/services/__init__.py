# -*- coding: utf-8 -*-
"""Location: ./ssebridge/services/__init__.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0
Authors: Mihai Criveti

Services Package.
Exposes the logging service used by every bridge component.
"""

# First-Party
from ssebridge.services.logging_service import LoggingService

__all__ = ["LoggingService"]
