# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Service Supervisor - process-level restart boundary around setup-and-run.

Lifecycles recover from their own failures. The supervisor catches what
escapes them (setup errors, unexpected bugs in the kernel) and re-runs the
whole setup-and-run sequence from scratch a bounded number of times.
Restarts never prompt the operator: the first run may create the id and
token files interactively, later runs only read them.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from nodepulse.errors import RuntimeHostError
from nodepulse.models.model_nodepulse_config import DEFAULT_MAX_PROCESS_RESTARTS

logger = logging.getLogger(__name__)

# Receives allow_interactive: True only for the first run
ServiceRunFactory = Callable[[bool], Awaitable[None]]


class ServiceSupervisor:
    """Runs a setup-and-run coroutine, restarting it after unexpected errors.

    Exit codes:
        0: The run finished normally (graceful shutdown)
        1: The run failed and every restart failed as well
    """

    def __init__(
        self,
        run_service: ServiceRunFactory,
        max_restarts: int = DEFAULT_MAX_PROCESS_RESTARTS,
    ) -> None:
        if max_restarts < 0:
            raise ValueError(f"max_restarts must be >= 0, got {max_restarts}")
        self._run_service = run_service
        self._max_restarts = max_restarts
        self._restarts = 0

    @property
    def restarts(self) -> int:
        return self._restarts

    async def run(self) -> int:
        """Run the service until it finishes or restarts are exhausted."""
        allow_interactive = True
        while True:
            try:
                await self._run_service(allow_interactive)
                return 0
            except (asyncio.CancelledError, KeyboardInterrupt):
                raise
            except Exception as e:
                extra = {
                    "error_type": type(e).__name__,
                    "error_message": str(e),
                    "restarts": self._restarts,
                    "max_restarts": self._max_restarts,
                }
                if isinstance(e, RuntimeHostError):
                    extra["error_code"] = e.error_code.name
                    extra["correlation_id"] = str(e.correlation_id)

                if self._restarts >= self._max_restarts:
                    logger.error(  # noqa: G201
                        "Service failed and %d restart(s) are exhausted: %s",
                        self._max_restarts,
                        e,
                        extra=extra,
                        exc_info=True,
                    )
                    return 1

                self._restarts += 1
                logger.error(  # noqa: G201
                    "Service failed, restarting (%d/%d): %s",
                    self._restarts,
                    self._max_restarts,
                    e,
                    extra=extra,
                    exc_info=True,
                )
                allow_interactive = False


__all__: list[str] = ["ServiceRunFactory", "ServiceSupervisor"]
