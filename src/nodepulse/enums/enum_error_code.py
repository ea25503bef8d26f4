# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Error Code Enumeration.

Classification codes attached to every RuntimeHostError.
"""

from enum import Enum


class EnumErrorCode(str, Enum):
    """Error classification codes for nodepulse errors."""

    OPERATION_FAILED = "operation_failed"
    INVALID_CONFIGURATION = "invalid_configuration"
    INVALID_INPUT = "invalid_input"
    NETWORK_ERROR = "network_error"
    CONNECTION_ERROR = "connection_error"
    TIMEOUT_ERROR = "timeout_error"
    HTTP_STATUS_ERROR = "http_status_error"
    PARSE_ERROR = "parse_error"
    RETRY_EXHAUSTED = "retry_exhausted"


__all__ = ["EnumErrorCode"]
