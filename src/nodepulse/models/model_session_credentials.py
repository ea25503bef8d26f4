# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Shared Session Credentials Model.

The single auth token and IP address shared read-only by every node.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ModelSessionCredentials(BaseModel):
    """Process-wide credentials passed into the orchestrator at startup.

    Frozen so that no lifecycle can mutate the shared values. The token is
    excluded from ``repr`` to keep it out of logs.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        str_strip_whitespace=True,
    )

    ip_address: str = Field(
        ...,
        min_length=1,
        description="IP address reported to the gateway during registration",
    )
    auth_token: str = Field(
        ...,
        min_length=1,
        repr=False,
        description="Opaque bearer credential for every gateway call",
    )


__all__ = ["ModelSessionCredentials"]
