# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Node Identity Model.

One immutable (node_id, hardware_id) pair per configured node.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ModelNodeIdentity(BaseModel):
    """Identity of a single node registered against the gateway.

    Both values are opaque strings; surrounding whitespace is stripped and
    neither may be empty. Uniqueness of node_id is assumed, not enforced.

    Example:
        >>> identity = ModelNodeIdentity(node_id="12D3KooW...", hardware_id="a1b2c3")
        >>> identity.node_id
        '12D3KooW...'
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        str_strip_whitespace=True,
    )

    node_id: str = Field(
        ...,
        min_length=1,
        description="Opaque node identifier used in gateway URLs",
    )
    hardware_id: str = Field(
        ...,
        min_length=1,
        description="Opaque hardware identifier sent during registration",
    )


__all__ = ["ModelNodeIdentity"]
