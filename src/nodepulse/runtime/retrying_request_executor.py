# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Retrying Request Executor.

Wraps a single-attempt transport with a fixed-delay retry policy.

Retry Policy:
    - Retried errors: InfraNetworkError (timeout, connection, DNS) and
      InfraHttpStatusError (any non-2xx). Every such failure is treated as
      transient; there is no retryable/non-retryable split.
    - infinite_retry=True: wait base_delay and retry forever.
    - infinite_retry=False: after max_retries retries (max_retries + 1 total
      attempts) raise InfraRetryExhaustedError with the last error.
    - Delays are fixed. An optional jitter ratio spreads delays by
      +/- ratio * base_delay; it defaults to 0.
    - Any other exception (for example InfraJsonParseError) propagates
      immediately, as does asyncio.CancelledError.

Every retry is logged at WARNING with the triggering error.
"""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable

from nodepulse.errors import (
    InfraHttpStatusError,
    InfraNetworkError,
    InfraRetryExhaustedError,
    ModelInfraErrorContext,
)
from nodepulse.models import ModelGatewayRequest, ModelGatewayResponse
from nodepulse.models.model_nodepulse_config import (
    DEFAULT_RETRY_BASE_DELAY_SECONDS,
    DEFAULT_RETRY_MAX_RETRIES,
)
from nodepulse.protocols import ProtocolRequestTransport

logger = logging.getLogger(__name__)

_RETRIED_ERRORS: tuple[type[Exception], ...] = (InfraNetworkError, InfraHttpStatusError)


class RetryingRequestExecutor:
    """Fixed-delay retry wrapper around a request transport.

    Example:
        ```python
        executor = RetryingRequestExecutor(transport)

        # Onboarding calls: retry until they succeed
        response = await executor.execute(request, infinite_retry=True)

        # Bounded: 3 retries, 4 attempts in total
        response = await executor.execute(request, infinite_retry=False)
        ```
    """

    def __init__(
        self,
        transport: ProtocolRequestTransport,
        max_retries: int = DEFAULT_RETRY_MAX_RETRIES,
        base_delay: float = DEFAULT_RETRY_BASE_DELAY_SECONDS,
        jitter_ratio: float = 0.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Initialize the executor.

        Args:
            transport: Single-attempt transport to wrap
            max_retries: Default retry budget for bounded calls
            base_delay: Default fixed delay between attempts in seconds
            jitter_ratio: Relative jitter in [0, 1]; 0 keeps delays fixed
            sleep: Awaitable delay function (injectable for tests)

        Raises:
            ValueError: If max_retries < 0, base_delay < 0 or jitter_ratio
                is outside [0, 1]
        """
        if max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {max_retries}")
        if base_delay < 0:
            raise ValueError(f"base_delay must be >= 0, got {base_delay}")
        if not 0.0 <= jitter_ratio <= 1.0:
            raise ValueError(f"jitter_ratio must be within [0, 1], got {jitter_ratio}")

        self._transport = transport
        self._max_retries = max_retries
        self._base_delay = base_delay
        self._jitter_ratio = jitter_ratio
        self._sleep = sleep

    async def execute(
        self,
        request: ModelGatewayRequest,
        infinite_retry: bool,
        max_retries: int | None = None,
        base_delay: float | None = None,
        node_id: str | None = None,
    ) -> ModelGatewayResponse:
        """Send ``request``, retrying transient failures per the policy.

        Args:
            request: Request to send
            infinite_retry: Retry forever when True
            max_retries: Retry budget when bounded (default from constructor)
            base_delay: Delay between attempts (default from constructor)
            node_id: Node id included in retry log entries

        Returns:
            The first successful response.

        Raises:
            InfraRetryExhaustedError: Bounded budget exhausted; ``last_error``
                holds the final failure.
        """
        retries_allowed = self._max_retries if max_retries is None else max_retries
        delay_base = self._base_delay if base_delay is None else base_delay
        if retries_allowed < 0:
            raise ValueError(f"max_retries must be >= 0, got {retries_allowed}")

        attempt = 0
        while True:
            attempt += 1
            try:
                return await self._transport.send(request)
            except _RETRIED_ERRORS as e:
                if not infinite_retry and attempt > retries_allowed:
                    logger.error(
                        "Retries exhausted for %s after %d attempts (node_id=%s)",
                        request.operation,
                        attempt,
                        node_id,
                        extra={
                            "node_id": node_id,
                            "operation": request.operation,
                            "attempts": attempt,
                            "error_type": type(e).__name__,
                            "error_message": str(e),
                            "correlation_id": str(request.correlation_id),
                        },
                    )
                    ctx = ModelInfraErrorContext.http(
                        request.operation, request.url, request.correlation_id
                    )
                    raise InfraRetryExhaustedError(
                        f"{request.operation} failed after {attempt} attempts: {e}",
                        last_error=e,
                        attempts=attempt,
                        context=ctx,
                    ) from e

                delay = self._compute_delay(delay_base)
                logger.warning(
                    "Retrying %s (attempt %d failed: %s), next attempt in %.2fs "
                    "(node_id=%s)",
                    request.operation,
                    attempt,
                    e,
                    delay,
                    node_id,
                    extra={
                        "node_id": node_id,
                        "operation": request.operation,
                        "attempt": attempt,
                        "infinite_retry": infinite_retry,
                        "delay_seconds": delay,
                        "error_type": type(e).__name__,
                        "error_message": str(e),
                        "correlation_id": str(request.correlation_id),
                    },
                )
                await self._sleep(delay)

    def _compute_delay(self, base_delay: float) -> float:
        if self._jitter_ratio == 0.0 or base_delay == 0.0:
            return base_delay
        spread = base_delay * self._jitter_ratio
        return max(0.0, base_delay + random.uniform(-spread, spread))


__all__: list[str] = ["RetryingRequestExecutor"]
