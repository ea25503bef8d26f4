# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Heartbeat Result Model."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ModelHeartbeatResult(BaseModel):
    """Transient outcome of one ping call; logged, never retained.

    Attributes:
        status: Status string reported by the gateway ("unknown" if absent)
        connected: Value of the wire field ``isB7SConnected`` (False if absent)
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    status: str = Field(default="unknown")
    connected: bool = Field(default=False)

    @classmethod
    def from_payload(cls, payload: object) -> ModelHeartbeatResult:
        """Build a result from a decoded ping response body."""
        if not isinstance(payload, dict):
            return cls()
        status = payload.get("status")
        connected = payload.get("isB7SConnected")
        return cls(
            status=str(status) if status is not None else "unknown",
            connected=connected is True,
        )


__all__ = ["ModelHeartbeatResult"]
