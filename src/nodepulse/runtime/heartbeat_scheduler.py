# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Heartbeat Scheduler - cancellable periodic ping for one node.

Runs a background loop that fires the node's ping every ``interval``
seconds. Each firing runs as its own task so that a slow ping does not
shift the schedule.

Features:
    - Fixed period; the first scheduled firing happens one interval after
      start() (the lifecycle performs the initial ping itself)
    - Skip-if-in-flight: a firing is skipped while the previous one is
      still running, so one node never has two pings in flight
    - Firing errors are logged and never leave the loop
    - Optional escalation: ``escalation_threshold`` consecutive failures set
      the ``escalated`` event (0 disables escalation)
    - stop() cancels the loop and any in-flight firing; safe to call twice

Concurrency Safety:
    Coroutine-safe on a single event loop. Not thread-safe.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from nodepulse.models import ModelHeartbeatResult

logger = logging.getLogger(__name__)


class HeartbeatScheduler:
    """Periodic heartbeat task for a single node.

    Example:
        ```python
        scheduler = HeartbeatScheduler(
            node_id=identity.node_id,
            fire=lambda: gateway.ping(identity, context),
            interval=60.0,
        )
        scheduler.start()
        ...
        await scheduler.stop()
        ```
    """

    def __init__(
        self,
        node_id: str,
        fire: Callable[[], Awaitable[ModelHeartbeatResult]],
        interval: float,
        escalation_threshold: int = 0,
    ) -> None:
        """Initialize the scheduler without starting it.

        Args:
            node_id: Node id used for the task name and log fields
            fire: Coroutine factory performing one ping
            interval: Seconds between firings
            escalation_threshold: Consecutive failures that set ``escalated``
                (0 disables escalation)

        Raises:
            ValueError: If interval <= 0 or escalation_threshold < 0
        """
        if interval <= 0:
            raise ValueError(f"Heartbeat interval must be > 0, got {interval}")
        if escalation_threshold < 0:
            raise ValueError(
                f"escalation_threshold must be >= 0, got {escalation_threshold}"
            )

        self.node_id = node_id
        self.interval = interval
        self.escalation_threshold = escalation_threshold
        self._fire = fire

        self._loop_task: asyncio.Task[None] | None = None
        self._firing_task: asyncio.Task[None] | None = None
        self._stop_event = asyncio.Event()
        self.escalated = asyncio.Event()

        self.consecutive_failures = 0
        self.firings_started = 0
        self.firings_succeeded = 0
        self.firings_failed = 0
        self.firings_skipped = 0

    @property
    def is_running(self) -> bool:
        return self._loop_task is not None and not self._loop_task.done()

    def start(self) -> None:
        """Start the background loop. A second call while running is a no-op."""
        if self.is_running:
            return
        self._stop_event.clear()
        self._loop_task = asyncio.create_task(
            self._heartbeat_loop(),
            name=f"heartbeat-{self.node_id}",
        )
        logger.debug(
            "Started heartbeat task for %s",
            self.node_id,
            extra={"node_id": self.node_id, "interval_seconds": self.interval},
        )

    async def stop(self) -> None:
        """Stop the loop and cancel any in-flight firing."""
        self._stop_event.set()

        for task in (self._loop_task, self._firing_task):
            if task is None or task.done():
                continue
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._loop_task = None
        self._firing_task = None

        logger.info(
            "Heartbeat schedule stopped for %s",
            self.node_id,
            extra={"node_id": self.node_id},
        )

    async def _heartbeat_loop(self) -> None:
        logger.info(
            "Starting heartbeat loop for %s every %ss",
            self.node_id,
            self.interval,
            extra={"node_id": self.node_id, "interval_seconds": self.interval},
        )

        while not self._stop_event.is_set():
            # Wait for next interval or stop event
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self.interval)
                break
            except TimeoutError:
                pass

            if self._firing_task is not None and not self._firing_task.done():
                self.firings_skipped += 1
                logger.warning(
                    "Skipping heartbeat for %s, previous ping still in flight",
                    self.node_id,
                    extra={
                        "node_id": self.node_id,
                        "firings_skipped": self.firings_skipped,
                    },
                )
                continue

            self.firings_started += 1
            self._firing_task = asyncio.create_task(
                self._fire_once(),
                name=f"heartbeat-fire-{self.node_id}",
            )

    async def _fire_once(self) -> None:
        logger.info(
            "Sending ping for nodeId: %s",
            self.node_id,
            extra={"node_id": self.node_id},
        )
        try:
            result = await self._fire()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self.firings_failed += 1
            self.consecutive_failures += 1
            logger.error(  # noqa: G201
                "Error during ping for %s: %s",
                self.node_id,
                e,
                extra={
                    "node_id": self.node_id,
                    "error_type": type(e).__name__,
                    "error_message": str(e),
                    "consecutive_failures": self.consecutive_failures,
                },
                exc_info=True,
            )
            if (
                self.escalation_threshold > 0
                and self.consecutive_failures >= self.escalation_threshold
                and not self.escalated.is_set()
            ):
                logger.error(
                    "Heartbeat for %s failed %d times in a row, escalating",
                    self.node_id,
                    self.consecutive_failures,
                    extra={
                        "node_id": self.node_id,
                        "consecutive_failures": self.consecutive_failures,
                        "escalation_threshold": self.escalation_threshold,
                    },
                )
                self.escalated.set()
            return

        self.firings_succeeded += 1
        self.consecutive_failures = 0
        logger.debug(
            "Heartbeat for %s connected=%s",
            self.node_id,
            result.connected,
            extra={
                "node_id": self.node_id,
                "status": result.status,
                "connected": result.connected,
            },
        )


__all__: list[str] = ["HeartbeatScheduler"]
