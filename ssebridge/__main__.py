# -*- coding: utf-8 -*-
"""Location: ./ssebridge/__main__.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0
Authors: Mihai Criveti

Allow ``python3 -m ssebridge <server-url>``.
"""

# First-Party
from ssebridge.cli import main

if __name__ == "__main__":  # pragma: no cover
    main()
