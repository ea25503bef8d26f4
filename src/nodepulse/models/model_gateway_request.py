# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Gateway Request Model.

Transport-level description of a single HTTP call.
"""

from __future__ import annotations

from typing import Literal
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field


class ModelGatewayRequest(BaseModel):
    """An HTTP request handed to the transport handler.

    Attributes:
        method: HTTP method (GET or POST)
        url: Absolute request URL
        headers: Request headers (may contain Authorization; never logged)
        json_body: Optional JSON body; None sends no body
        operation: Logical operation name used in logs and error context
        correlation_id: Correlation ID for tracing this request
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    method: Literal["GET", "POST"] = Field(default="POST")
    url: str = Field(..., min_length=1)
    headers: dict[str, str] = Field(default_factory=dict, repr=False)
    json_body: dict[str, object] | None = Field(default=None)
    operation: str = Field(default="http.request")
    correlation_id: UUID = Field(default_factory=uuid4)


__all__ = ["ModelGatewayRequest"]
