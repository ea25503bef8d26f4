# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Dotted-quad IPv4 validation."""

from __future__ import annotations

import re

# Exactly four dot-separated octets, each 0-255, ASCII digits only
IPV4_PATTERN = re.compile(
    r"^(?:(?:25[0-5]|2[0-4][0-9]|1[0-9][0-9]|[1-9]?[0-9])\.){3}"
    r"(?:25[0-5]|2[0-4][0-9]|1[0-9][0-9]|[1-9]?[0-9])$"
)


def is_valid_ipv4(value: str) -> bool:
    """Return True if ``value`` is a dotted-quad IPv4 address.

    Example:
        >>> is_valid_ipv4("192.168.1.10")
        True
        >>> is_valid_ipv4("999.1.1.1")
        False
    """
    return bool(IPV4_PATTERN.fullmatch(value))


__all__: list[str] = ["IPV4_PATTERN", "is_valid_ipv4"]
