# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Infrastructure Transport Type Enumeration.

Defines the transport types used for error context and log fields.
"""

from enum import Enum


class EnumInfraTransportType(str, Enum):
    """Transport types for nodepulse infrastructure components.

    Attributes:
        HTTP: HTTP/REST transport (gateway and IP lookup calls)
        FILESYSTEM: Local file transport (identity and token stores)
        RUNTIME: Runtime internal transport (kernel, supervisor)
    """

    HTTP = "http"
    FILESYSTEM = "filesystem"
    RUNTIME = "runtime"


__all__ = ["EnumInfraTransportType"]
