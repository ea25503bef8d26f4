# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Infrastructure-Specific Error Classes.

Error Hierarchy:
    RuntimeHostError (base infrastructure error)
    ├── ProtocolConfigurationError
    ├── InfraNetworkError
    │   ├── InfraConnectionError
    │   └── InfraTimeoutError
    ├── InfraHttpStatusError
    ├── InfraJsonParseError
    ├── InfraRetryExhaustedError
    └── InvalidNodeIdentityError

All errors:
    - Use EnumErrorCode for error classification
    - Support proper error chaining with `raise ... from e`
    - Include structured context for debugging
    - Accept ModelInfraErrorContext for bundled context parameters
    - Never carry the bearer token in message or context
"""

from typing import Optional
from uuid import UUID

from nodepulse.enums import EnumErrorCode
from nodepulse.errors.model_infra_error_context import ModelInfraErrorContext


class RuntimeHostError(Exception):
    """Base error class for nodepulse infrastructure errors.

    Structured Fields (via ModelInfraErrorContext):
        transport_type: Type of transport (http, filesystem, runtime)
        operation: Operation being performed
        correlation_id: Request correlation ID for tracking
        target_name: Target resource/endpoint name

    Example:
        >>> context = ModelInfraErrorContext(
        ...     transport_type=EnumInfraTransportType.HTTP,
        ...     operation="register",
        ...     target_name="gateway",
        ... )
        >>> raise RuntimeHostError("Operation failed", context=context)
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[EnumErrorCode] = None,
        context: Optional[ModelInfraErrorContext] = None,
        **extra_context: object,
    ) -> None:
        """Initialize RuntimeHostError with structured fields.

        Args:
            message: Human-readable error message
            error_code: Error code (defaults to OPERATION_FAILED)
            context: Bundled infrastructure context (transport_type, operation, etc.)
            **extra_context: Additional context information
        """
        structured_context: dict[str, object] = dict(extra_context)

        correlation_id: Optional[UUID] = None
        if context is not None:
            structured_context.update(context.as_fields())
            correlation_id = context.correlation_id

        super().__init__(message)
        self.message = message
        self.error_code = error_code or EnumErrorCode.OPERATION_FAILED
        self.correlation_id = correlation_id
        self.context = structured_context

    def __str__(self) -> str:
        if self.correlation_id is not None:
            return f"{self.message} (correlation_id={self.correlation_id})"
        return self.message


class ProtocolConfigurationError(RuntimeHostError):
    """Raised when configuration or setup input validation fails.

    Used for unreadable identity/token files, malformed YAML, out-of-range
    settings and exhausted IP prompts. These are fatal setup errors.

    Example:
        >>> raise ProtocolConfigurationError(
        ...     "Auth token file is empty",
        ...     context=context,
        ...     config_path="user.txt",
        ... )
    """

    def __init__(
        self,
        message: str,
        context: Optional[ModelInfraErrorContext] = None,
        **extra_context: object,
    ) -> None:
        super().__init__(
            message=message,
            error_code=EnumErrorCode.INVALID_CONFIGURATION,
            context=context,
            **extra_context,
        )


class InfraNetworkError(RuntimeHostError):
    """Raised when a request fails below the HTTP layer.

    Base class for connection-level failures (refused connection, DNS,
    timeout). Retry policies treat every InfraNetworkError as transient.
    """

    def __init__(
        self,
        message: str,
        context: Optional[ModelInfraErrorContext] = None,
        error_code: Optional[EnumErrorCode] = None,
        **extra_context: object,
    ) -> None:
        super().__init__(
            message=message,
            error_code=error_code or EnumErrorCode.NETWORK_ERROR,
            context=context,
            **extra_context,
        )


class InfraConnectionError(InfraNetworkError):
    """Raised when a connection cannot be established.

    Example:
        >>> raise InfraConnectionError(
        ...     "Failed to connect to https://gateway.example.com/api/v1/nodes/abc",
        ...     context=context,
        ... )
    """

    def __init__(
        self,
        message: str,
        context: Optional[ModelInfraErrorContext] = None,
        **extra_context: object,
    ) -> None:
        super().__init__(
            message=message,
            context=context,
            error_code=EnumErrorCode.CONNECTION_ERROR,
            **extra_context,
        )


class InfraTimeoutError(InfraNetworkError):
    """Raised when a request exceeds the transport timeout.

    Example:
        >>> raise InfraTimeoutError(
        ...     "HTTP POST request timed out after 30.0s",
        ...     context=context,
        ...     timeout_seconds=30.0,
        ... )
    """

    def __init__(
        self,
        message: str,
        context: Optional[ModelInfraErrorContext] = None,
        **extra_context: object,
    ) -> None:
        super().__init__(
            message=message,
            context=context,
            error_code=EnumErrorCode.TIMEOUT_ERROR,
            **extra_context,
        )


class InfraHttpStatusError(RuntimeHostError):
    """Raised when the server answers with a non-2xx status code.

    Attributes:
        status_code: HTTP status code of the response
        status_text: Reason phrase of the response
    """

    def __init__(
        self,
        message: str,
        status_code: int,
        status_text: str = "",
        context: Optional[ModelInfraErrorContext] = None,
        **extra_context: object,
    ) -> None:
        super().__init__(
            message=message,
            error_code=EnumErrorCode.HTTP_STATUS_ERROR,
            context=context,
            status_code=status_code,
            status_text=status_text,
            **extra_context,
        )
        self.status_code = status_code
        self.status_text = status_text


class InfraJsonParseError(RuntimeHostError):
    """Raised when a response body is not valid JSON.

    The raw body (truncated) is kept in ``body_preview`` for logging.
    """

    def __init__(
        self,
        message: str,
        body_preview: str = "",
        context: Optional[ModelInfraErrorContext] = None,
        **extra_context: object,
    ) -> None:
        super().__init__(
            message=message,
            error_code=EnumErrorCode.PARSE_ERROR,
            context=context,
            body_preview=body_preview,
            **extra_context,
        )
        self.body_preview = body_preview


class InfraRetryExhaustedError(RuntimeHostError):
    """Raised when a bounded retry policy runs out of attempts.

    Attributes:
        last_error: The error raised by the final attempt
        attempts: Total number of attempts made
    """

    def __init__(
        self,
        message: str,
        last_error: Exception,
        attempts: int,
        context: Optional[ModelInfraErrorContext] = None,
        **extra_context: object,
    ) -> None:
        super().__init__(
            message=message,
            error_code=EnumErrorCode.RETRY_EXHAUSTED,
            context=context,
            attempts=attempts,
            last_error_type=type(last_error).__name__,
            **extra_context,
        )
        self.last_error = last_error
        self.attempts = attempts


class InvalidNodeIdentityError(RuntimeHostError):
    """Raised when an identity entry lacks a nodeId or a hardwareId.

    Handled per entry by the identity store: the entry is logged and skipped.
    """

    def __init__(
        self,
        message: str,
        context: Optional[ModelInfraErrorContext] = None,
        **extra_context: object,
    ) -> None:
        super().__init__(
            message=message,
            error_code=EnumErrorCode.INVALID_INPUT,
            context=context,
            **extra_context,
        )


__all__ = [
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
