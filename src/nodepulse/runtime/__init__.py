# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""nodepulse Runtime Module.

Exports:
    RetryingRequestExecutor: Fixed-delay retry wrapper around the transport
    HeartbeatScheduler: Cancellable periodic ping for one node
    NodeLifecycle: Per-node session state machine with self-recovery
    NodeSessionOrchestrator: One independent lifecycle task per node
    ServiceSupervisor: Process-level restart boundary around setup-and-run

The kernel (``nodepulse.runtime.kernel``) is imported on demand by the CLI.
"""

from nodepulse.runtime.retrying_request_executor import RetryingRequestExecutor
from nodepulse.runtime.heartbeat_scheduler import HeartbeatScheduler
from nodepulse.runtime.node_lifecycle import NodeLifecycle
from nodepulse.runtime.node_session_orchestrator import NodeSessionOrchestrator
from nodepulse.runtime.service_supervisor import ServiceSupervisor

__all__: list[str] = [
    "HeartbeatScheduler",
    "NodeLifecycle",
    "NodeSessionOrchestrator",
    "RetryingRequestExecutor",
    "ServiceSupervisor",
]
