# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""nodepulse Handlers Module.

Exports:
    HttpTransportHandler: httpx-based transport with a fixed timeout
"""

from nodepulse.handlers.handler_http import HttpTransportHandler

__all__: list[str] = ["HttpTransportHandler"]
