# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""nodepulse Errors Module.

Exports:
    ModelInfraErrorContext: Configuration model for bundled error context
    RuntimeHostError: Base infrastructure error class
    ProtocolConfigurationError: Configuration and setup input errors
    InfraNetworkError: Connection-level failures (base of the next two)
    InfraConnectionError: Connection refused / DNS failures
    InfraTimeoutError: Request timeouts
    InfraHttpStatusError: Non-2xx HTTP responses
    InfraJsonParseError: Malformed JSON response bodies
    InfraRetryExhaustedError: Bounded retry policy exhausted
    InvalidNodeIdentityError: Identity entry missing nodeId or hardwareId

Error Sanitization Guidelines:
    NEVER include in error messages or context:
        - Bearer tokens or any part of them
        - Full Authorization headers

    SAFE to include:
        - Node ids and hardware ids
        - Gateway URLs and operation names
        - Status codes, retry counts and timeout values
        - Correlation IDs

    Example - BAD (exposes credentials)::

        raise InfraHttpStatusError(
            f"Ping rejected for token={token}",  # NEVER DO THIS
            status_code=401,
        )

    Example - GOOD (sanitized)::

        raise InfraHttpStatusError(
            "HTTP 401 Unauthorized from ping",
            status_code=401,
            status_text="Unauthorized",
            context=context,
        )
"""

from nodepulse.errors.infra_errors import (
    InfraConnectionError,
    InfraHttpStatusError,
    InfraJsonParseError,
    InfraNetworkError,
    InfraRetryExhaustedError,
    InfraTimeoutError,
    InvalidNodeIdentityError,
    ProtocolConfigurationError,
    RuntimeHostError,
)
from nodepulse.errors.model_infra_error_context import ModelInfraErrorContext

__all__: list[str] = [
    # Configuration model
    "ModelInfraErrorContext",
    # Error classes
    "RuntimeHostError",
    "ProtocolConfigurationError",
    "InfraNetworkError",
    "InfraConnectionError",
    "InfraTimeoutError",
    "InfraHttpStatusError",
    "InfraJsonParseError",
    "InfraRetryExhaustedError",
    "InvalidNodeIdentityError",
]
