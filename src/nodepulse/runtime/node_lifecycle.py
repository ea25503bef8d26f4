# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Node Lifecycle - per-node session state machine with self-recovery.

State machine::

    UNREGISTERED --register--> REGISTERED --start-session--> SESSION_ACTIVE
        ^                                                          |
        |                                                    initial ping
        |                                                          v
        +---- recovery delay <---- FAILED <---- (any error) -- HEARTBEATING

Registration and session start retry forever inside the executor, so in
practice only the initial ping (single attempt) or an escalated heartbeat
drives the lifecycle into FAILED. A failed lifecycle tears down its
heartbeat schedule, waits the recovery delay, discards its session context
and starts over at UNREGISTERED for the same identity.

Cancellation (stop() or cancelling the task running run()) always
propagates; the heartbeat schedule is torn down on the way out.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from nodepulse.enums import EnumErrorCode, EnumInfraTransportType, EnumNodeSessionState
from nodepulse.errors import ModelInfraErrorContext, RuntimeHostError
from nodepulse.models import (
    ModelNodeIdentity,
    ModelSessionContext,
    ModelSessionCredentials,
)
from nodepulse.models.model_nodepulse_config import (
    DEFAULT_HEARTBEAT_INTERVAL_SECONDS,
    DEFAULT_RECOVERY_DELAY_SECONDS,
)
from nodepulse.runtime.heartbeat_scheduler import HeartbeatScheduler
from nodepulse.services.service_gateway_client import GatewayClient

logger = logging.getLogger(__name__)


class NodeLifecycle:
    """Drives one node from registration to steady heartbeating, forever.

    Example:
        ```python
        lifecycle = NodeLifecycle(identity, credentials, gateway)
        task = lifecycle.start()
        ...
        await lifecycle.stop()
        ```
    """

    def __init__(
        self,
        identity: ModelNodeIdentity,
        credentials: ModelSessionCredentials,
        gateway: GatewayClient,
        heartbeat_interval: float = DEFAULT_HEARTBEAT_INTERVAL_SECONDS,
        escalation_threshold: int = 0,
        recovery_delay: float = DEFAULT_RECOVERY_DELAY_SECONDS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Initialize the lifecycle in UNREGISTERED state.

        Args:
            identity: The node this lifecycle drives
            credentials: Shared read-only token and IP address
            gateway: Gateway client used for all calls
            heartbeat_interval: Seconds between scheduled pings
            escalation_threshold: Consecutive failed pings that restart the
                lifecycle (0 disables escalation)
            recovery_delay: Seconds to wait in FAILED before restarting
            sleep: Awaitable delay function (injectable for tests)
        """
        if recovery_delay < 0:
            raise ValueError(f"recovery_delay must be >= 0, got {recovery_delay}")

        self.identity = identity
        self._credentials = credentials
        self._gateway = gateway
        self._heartbeat_interval = heartbeat_interval
        self._escalation_threshold = escalation_threshold
        self._recovery_delay = recovery_delay
        self._sleep = sleep

        self._context = ModelSessionContext.from_credentials(credentials)
        self._scheduler: HeartbeatScheduler | None = None
        self._task: asyncio.Task[None] | None = None
        self._restart_count = 0
        self._heartbeating = asyncio.Event()

    @property
    def node_id(self) -> str:
        return self.identity.node_id

    @property
    def state(self) -> EnumNodeSessionState:
        return self._context.current_state

    @property
    def context(self) -> ModelSessionContext:
        return self._context

    @property
    def restart_count(self) -> int:
        """Number of times the lifecycle has restarted after FAILED."""
        return self._restart_count

    @property
    def scheduler(self) -> HeartbeatScheduler | None:
        """The active heartbeat schedule, present only while HEARTBEATING."""
        return self._scheduler

    @property
    def task(self) -> asyncio.Task[None] | None:
        return self._task

    async def wait_until_heartbeating(self) -> None:
        """Wait until the current generation reaches HEARTBEATING."""
        await self._heartbeating.wait()

    def start(self) -> asyncio.Task[None]:
        """Run the lifecycle in a background task named ``node-{node_id}``."""
        if self._task is not None and not self._task.done():
            return self._task
        self._task = asyncio.create_task(self.run(), name=f"node-{self.node_id}")
        return self._task

    async def stop(self) -> None:
        """Cancel the lifecycle task and tear down its heartbeat schedule."""
        task = self._task
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        await self._teardown_heartbeat()

    async def run(self) -> None:
        """Run onboarding and heartbeating, restarting after every failure.

        Never returns normally; ends only through cancellation.
        """
        while True:
            self._context = ModelSessionContext.from_credentials(
                self._credentials, attempt=self._restart_count + 1
            )
            try:
                await self._onboard()
                await self._sustain()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                # No schedule may outlive HEARTBEATING
                self._heartbeating.clear()
                await self._teardown_heartbeat()
                self._transition(EnumNodeSessionState.FAILED)
                logger.error(  # noqa: G201
                    "Node %s failed: %s",
                    self.node_id,
                    e,
                    extra={
                        "node_id": self.node_id,
                        "state": EnumNodeSessionState.FAILED.value,
                        "attempt": self._context.attempt,
                        "error_type": type(e).__name__,
                        "error_message": str(e),
                    },
                    exc_info=True,
                )
            finally:
                self._heartbeating.clear()
                await self._teardown_heartbeat()

            self._restart_count += 1
            logger.info(
                "Restarting node %s in %ss (restart %d)",
                self.node_id,
                self._recovery_delay,
                self._restart_count,
                extra={
                    "node_id": self.node_id,
                    "attempt": self._restart_count + 1,
                    "recovery_delay_seconds": self._recovery_delay,
                },
            )
            await self._sleep(self._recovery_delay)

    async def _onboard(self) -> None:
        context = self._context

        await self._gateway.register(self.identity, context)
        self._transition(EnumNodeSessionState.REGISTERED)

        await self._gateway.start_session(self.identity, context)
        self._transition(EnumNodeSessionState.SESSION_ACTIVE)

        # Initial ping is a single attempt; any error fails the generation
        await self._gateway.ping(self.identity, context)
        self._transition(EnumNodeSessionState.HEARTBEATING)

        self._scheduler = HeartbeatScheduler(
            node_id=self.node_id,
            fire=lambda: self._gateway.ping(self.identity, context),
            interval=self._heartbeat_interval,
            escalation_threshold=self._escalation_threshold,
        )
        self._scheduler.start()
        self._heartbeating.set()

    async def _sustain(self) -> None:
        scheduler = self._scheduler
        if scheduler is None:
            return
        await scheduler.escalated.wait()

        ctx = ModelInfraErrorContext(
            transport_type=EnumInfraTransportType.HTTP,
            operation="heartbeat",
            node_id=self.node_id,
        )
        raise RuntimeHostError(
            f"Heartbeat for node {self.node_id} failed "
            f"{scheduler.consecutive_failures} consecutive times",
            error_code=EnumErrorCode.OPERATION_FAILED,
            context=ctx,
            consecutive_failures=scheduler.consecutive_failures,
        )

    async def _teardown_heartbeat(self) -> None:
        scheduler = self._scheduler
        if scheduler is None:
            return
        self._scheduler = None
        await scheduler.stop()

    def _transition(self, state: EnumNodeSessionState) -> None:
        previous = self._context.enter(state)
        logger.info(
            "Node %s: %s -> %s",
            self.node_id,
            previous.value,
            state.value,
            extra={
                "node_id": self.node_id,
                "previous_state": previous.value,
                "state": state.value,
                "attempt": self._context.attempt,
            },
        )


__all__: list[str] = ["NodeLifecycle"]
