# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""IP Resolution Mode Enumeration."""

from enum import Enum


class EnumIpResolutionMode(str, Enum):
    """How the shared IP address is obtained at startup.

    Attributes:
        PROMPT: Ask the operator to pick one of the other modes
        MANUAL: Operator-supplied dotted-quad IPv4 literal
        SERVICE: Third-party "what is my IP" HTTP lookup
        LOCAL: First non-loopback IPv4 address of this host
    """

    PROMPT = "prompt"
    MANUAL = "manual"
    SERVICE = "service"
    LOCAL = "local"


__all__ = ["EnumIpResolutionMode"]
