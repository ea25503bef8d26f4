# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""HTTP Transport Handler - httpx async client with a fixed timeout.

Sends a single request per call and maps transport failures onto the
nodepulse error hierarchy. Retry logic lives in RetryingRequestExecutor.
"""

from __future__ import annotations

import logging
from types import TracebackType
from typing import Optional

import httpx

from nodepulse.enums import EnumInfraTransportType
from nodepulse.errors import (
    InfraConnectionError,
    InfraHttpStatusError,
    InfraTimeoutError,
    ModelInfraErrorContext,
    RuntimeHostError,
)
from nodepulse.models import ModelGatewayRequest, ModelGatewayResponse

logger = logging.getLogger(__name__)

_DEFAULT_TIMEOUT_SECONDS: float = 30.0


class HttpTransportHandler:
    """HTTP transport using an httpx async client (GET, POST).

    Error mapping:
        httpx.TimeoutException -> InfraTimeoutError
        httpx.ConnectError (refused, DNS) -> InfraConnectionError
        other httpx.HTTPError -> InfraConnectionError
        non-2xx status -> InfraHttpStatusError(status_code, status_text)
    """

    def __init__(
        self,
        timeout_seconds: float = _DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """Initialize HttpTransportHandler in uninitialized state.

        Args:
            timeout_seconds: Fixed per-request timeout
            transport: Optional httpx transport (tests pass httpx.MockTransport)
        """
        self._client: Optional[httpx.AsyncClient] = None
        self._timeout: float = timeout_seconds
        self._transport = transport
        self._initialized: bool = False

    @property
    def timeout_seconds(self) -> float:
        return self._timeout

    async def initialize(self) -> None:
        """Create the httpx client with the fixed timeout."""
        if self._initialized:
            return
        try:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._timeout),
                follow_redirects=True,
                transport=self._transport,
            )
            self._initialized = True
            logger.info(
                "HttpTransportHandler initialized",
                extra={"timeout_seconds": self._timeout},
            )
        except Exception as e:
            ctx = ModelInfraErrorContext(
                transport_type=EnumInfraTransportType.HTTP,
                operation="initialize",
                target_name="http_transport",
            )
            raise RuntimeHostError(
                "Failed to initialize HTTP transport", context=ctx
            ) from e

    async def shutdown(self) -> None:
        """Close the httpx client and release resources."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
        self._initialized = False
        logger.info("HttpTransportHandler shutdown complete")

    async def __aenter__(self) -> HttpTransportHandler:
        await self.initialize()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.shutdown()

    async def send(self, request: ModelGatewayRequest) -> ModelGatewayResponse:
        """Send one request and return its 2xx response.

        Raises:
            RuntimeHostError: If the handler was not initialized.
            InfraTimeoutError: If the request exceeded the timeout.
            InfraConnectionError: On connection, DNS or other transport failures.
            InfraHttpStatusError: If the response status is not 2xx.
        """
        ctx = ModelInfraErrorContext.http(
            request.operation, request.url, request.correlation_id
        )

        if not self._initialized or self._client is None:
            raise RuntimeHostError(
                "HttpTransportHandler not initialized. Call initialize() first.",
                context=ctx,
            )

        try:
            response = await self._client.request(
                request.method,
                request.url,
                headers=request.headers,
                json=request.json_body,
            )
        except httpx.TimeoutException as e:
            raise InfraTimeoutError(
                f"HTTP {request.method} request timed out after {self._timeout}s",
                context=ctx,
                timeout_seconds=self._timeout,
            ) from e
        except httpx.ConnectError as e:
            raise InfraConnectionError(
                f"Failed to connect to {request.url}", context=ctx
            ) from e
        except httpx.HTTPError as e:
            raise InfraConnectionError(
                f"HTTP error during {request.method} request: {type(e).__name__}",
                context=ctx,
            ) from e

        if not response.is_success:
            raise InfraHttpStatusError(
                f"HTTP {response.status_code} {response.reason_phrase} "
                f"from {request.operation}",
                status_code=response.status_code,
                status_text=response.reason_phrase,
                context=ctx,
            )

        return ModelGatewayResponse(
            status_code=response.status_code,
            headers=dict(response.headers),
            text=response.text,
            url=request.url,
            operation=request.operation,
            correlation_id=request.correlation_id,
        )


__all__: list[str] = ["HttpTransportHandler"]
