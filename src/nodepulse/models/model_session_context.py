# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Session Context Model.

Per-node mutable state owned by exactly one NodeLifecycle.
"""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field

from nodepulse.enums import EnumNodeSessionState
from nodepulse.models.model_session_credentials import ModelSessionCredentials


def _utc_now() -> datetime:
    return datetime.now(UTC)


class ModelSessionContext(BaseModel):
    """Mutable session state of one node lifecycle generation.

    A fresh context is created (state UNREGISTERED) every time the lifecycle
    restarts; the previous one is discarded.

    Attributes:
        ip_address: Shared IP address (copied from the credentials)
        auth_token: Shared bearer token (copied from the credentials)
        current_state: Current lifecycle state
        attempt: Lifecycle generation, 1 for the first run
        entered_at: When current_state was entered
    """

    model_config = ConfigDict(
        extra="forbid",
        validate_assignment=True,
    )

    ip_address: str = Field(..., min_length=1)
    auth_token: str = Field(..., min_length=1, repr=False)
    current_state: EnumNodeSessionState = Field(
        default=EnumNodeSessionState.UNREGISTERED,
    )
    attempt: int = Field(default=1, ge=1)
    entered_at: datetime = Field(default_factory=_utc_now)

    @classmethod
    def from_credentials(
        cls, credentials: ModelSessionCredentials, attempt: int = 1
    ) -> ModelSessionContext:
        """Create an UNREGISTERED context from the shared credentials."""
        return cls(
            ip_address=credentials.ip_address,
            auth_token=credentials.auth_token,
            attempt=attempt,
        )

    def enter(self, state: EnumNodeSessionState) -> EnumNodeSessionState:
        """Move to ``state`` and return the previous state."""
        previous = self.current_state
        self.current_state = state
        self.entered_at = _utc_now()
        return previous


__all__ = ["ModelSessionContext"]
