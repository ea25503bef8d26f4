# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""nodepulse - Node session orchestration against a remote gateway.

This package keeps a set of independently identified nodes registered and
alive against a remote coordination gateway. Each node runs its own
onboarding handshake (register -> start session -> ping) and then sustains
periodic heartbeats, recovering from transient failures on its own.

Key Components:
    - HttpTransportHandler: httpx-based transport with a fixed timeout
    - RetryingRequestExecutor: fixed-delay retry policy around the transport
    - NodeLifecycle: per-node state machine with restart-on-failure
    - HeartbeatScheduler: cancellable periodic ping per node
    - NodeSessionOrchestrator: launches one lifecycle task per node
    - Kernel and ServiceSupervisor: process bootstrap and restart boundary
"""

__all__: list[str] = []
