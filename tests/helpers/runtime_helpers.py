# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Shared runtime helpers for lifecycle and orchestrator tests.

Provides ``wait_until`` for polling asynchronous state changes and
``make_test_config`` for configs with tiny intervals.

Usage::

    from tests.helpers.runtime_helpers import make_test_config, wait_until

    config = make_test_config(heartbeat_escalation_threshold=2)
    await wait_until(lambda: lifecycle.restart_count >= 1)
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable

from nodepulse.models import ModelNodepulseConfig

TEST_HEARTBEAT_INTERVAL = 0.02


def make_test_config(**overrides: object) -> ModelNodepulseConfig:
    """Create a config with test-sized delays and optional overrides."""
    values: dict[str, object] = {
        "gateway_base_url": "https://gateway.test/api/v1",
        "heartbeat_interval_seconds": TEST_HEARTBEAT_INTERVAL,
        "retry_base_delay_seconds": 0.0,
        "recovery_delay_seconds": 0.0,
    }
    values.update(overrides)
    return ModelNodepulseConfig.model_validate(values)


async def wait_until(
    predicate: Callable[[], bool],
    timeout: float = 2.0,
    poll_interval: float = 0.005,
) -> None:
    """Poll ``predicate`` until it returns True.

    Raises:
        AssertionError: If the predicate is still False after ``timeout``.
    """
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            raise AssertionError(f"Condition not met within {timeout}s")
        await asyncio.sleep(poll_interval)
