# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Utility modules for nodepulse.

This package provides common utilities used across the service:
    - util_env_parsing: Type-safe environment variable parsing with validation
    - util_ip_validation: Dotted-quad IPv4 validation
"""

from nodepulse.utils.util_env_parsing import (
    parse_env_float,
    parse_env_int,
)
from nodepulse.utils.util_ip_validation import (
    IPV4_PATTERN,
    is_valid_ipv4,
)

__all__: list[str] = [
    "parse_env_int",
    "parse_env_float",
    "IPV4_PATTERN",
    "is_valid_ipv4",
]
