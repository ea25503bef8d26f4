# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Node Session Orchestrator - one independent lifecycle task per node.

The orchestrator only launches and stops lifecycles. It keeps no per-node
session state of its own: restart-on-failure lives inside each
NodeLifecycle, and nodes never communicate with each other. A slow or
failing node therefore never blocks the others.

Concurrency Safety:
    All lifecycles share one event loop. The shared credentials model is
    frozen, so it is passed to every lifecycle without locking.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence

from nodepulse.enums import EnumNodeSessionState
from nodepulse.models import (
    ModelNodeIdentity,
    ModelNodepulseConfig,
    ModelSessionCredentials,
)
from nodepulse.runtime.node_lifecycle import NodeLifecycle
from nodepulse.services.service_gateway_client import GatewayClient

logger = logging.getLogger(__name__)


class NodeSessionOrchestrator:
    """Launches a NodeLifecycle per configured node and supervises shutdown.

    Example:
        ```python
        orchestrator = NodeSessionOrchestrator(gateway, config)
        orchestrator.launch(identities, credentials)
        print(orchestrator.get_status())
        await orchestrator.stop()
        ```
    """

    def __init__(
        self,
        gateway: GatewayClient,
        config: ModelNodepulseConfig | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._gateway = gateway
        self._config = config or ModelNodepulseConfig()
        self._sleep = sleep
        self._lifecycles: list[NodeLifecycle] = []
        # Strong references so running tasks are not garbage collected
        self._tasks: set[asyncio.Task[None]] = set()
        self._stop_event = asyncio.Event()
        # Shared by stop() and run() so both wait for the same teardown
        self._teardown: asyncio.Task[None] | None = None

    @property
    def lifecycles(self) -> list[NodeLifecycle]:
        return list(self._lifecycles)

    def launch(
        self,
        nodes: Sequence[ModelNodeIdentity],
        credentials: ModelSessionCredentials,
    ) -> list[NodeLifecycle]:
        """Start one lifecycle task per node and return immediately.

        Duplicate node ids are not rejected; each entry gets its own
        lifecycle.
        """
        launched: list[NodeLifecycle] = []
        for identity in nodes:
            lifecycle = NodeLifecycle(
                identity=identity,
                credentials=credentials,
                gateway=self._gateway,
                heartbeat_interval=self._config.heartbeat_interval_seconds,
                escalation_threshold=self._config.heartbeat_escalation_threshold,
                recovery_delay=self._config.recovery_delay_seconds,
                sleep=self._sleep,
            )
            task = lifecycle.start()
            self._tasks.add(task)
            task.add_done_callback(self._on_lifecycle_done)
            self._lifecycles.append(lifecycle)
            launched.append(lifecycle)

        logger.info(
            "Launched %d node lifecycle(s) with IP %s",
            len(launched),
            credentials.ip_address,
            extra={"node_count": len(launched)},
        )
        return launched

    async def run(
        self,
        nodes: Sequence[ModelNodeIdentity],
        credentials: ModelSessionCredentials,
    ) -> None:
        """Launch every node and wait until stop() is called."""
        self.launch(nodes, credentials)
        try:
            await self._stop_event.wait()
        finally:
            await self._stop_lifecycles()

    async def stop(self) -> None:
        """Cancel every lifecycle task and wait for their teardown."""
        self._stop_event.set()
        await self._stop_lifecycles()

    def get_status(self) -> dict[str, EnumNodeSessionState]:
        """Return a snapshot of {node_id: state}.

        With duplicate node ids the later entry wins.
        """
        return {lifecycle.node_id: lifecycle.state for lifecycle in self._lifecycles}

    async def _stop_lifecycles(self) -> None:
        if self._teardown is None:
            self._teardown = asyncio.create_task(
                self._teardown_lifecycles(), name="nodepulse-teardown"
            )
        await asyncio.shield(self._teardown)

    async def _teardown_lifecycles(self) -> None:
        if not self._lifecycles:
            return
        await asyncio.gather(
            *(lifecycle.stop() for lifecycle in self._lifecycles),
        )
        logger.info(
            "Stopped %d node lifecycle(s)",
            len(self._lifecycles),
            extra={"node_count": len(self._lifecycles)},
        )

    def _on_lifecycle_done(self, task: asyncio.Task[None]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is None:
            logger.warning("Lifecycle task %s exited", task.get_name())
            return
        logger.error(
            "Lifecycle task %s died unexpectedly: %s",
            task.get_name(),
            exc,
            extra={
                "task_name": task.get_name(),
                "error_type": type(exc).__name__,
                "error_message": str(exc),
            },
            exc_info=exc,
        )


__all__: list[str] = ["NodeSessionOrchestrator"]
