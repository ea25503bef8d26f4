# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Node Session State Enumeration.

Defines the states of the per-node lifecycle state machine.
"""

from enum import Enum


class EnumNodeSessionState(str, Enum):
    """Lifecycle states of a single node session.

    States:
        UNREGISTERED: Initial state, nothing sent to the gateway yet
        REGISTERED: Registration call accepted
        SESSION_ACTIVE: start-session call accepted
        HEARTBEATING: Initial ping succeeded, periodic heartbeats scheduled
        FAILED: An onboarding step failed, waiting to restart

    State Transitions:
        UNREGISTERED -> REGISTERED -> SESSION_ACTIVE -> HEARTBEATING
        any state -> FAILED
        FAILED -> UNREGISTERED (after the recovery delay)

    There is no terminal state: a FAILED lifecycle always loops back.
    """

    UNREGISTERED = "unregistered"
    REGISTERED = "registered"
    SESSION_ACTIVE = "session_active"
    HEARTBEATING = "heartbeating"
    FAILED = "failed"


__all__ = ["EnumNodeSessionState"]
