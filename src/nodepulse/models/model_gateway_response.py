# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Gateway Response Model."""

from __future__ import annotations

import json
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from nodepulse.enums import EnumInfraTransportType
from nodepulse.errors import InfraJsonParseError, ModelInfraErrorContext

# Characters of a malformed body kept in logs and errors
_BODY_PREVIEW_LIMIT = 200


class ModelGatewayResponse(BaseModel):
    """A successful (2xx) HTTP response returned by the transport handler.

    The body is kept as raw text; ``json_body()`` decodes it on demand so that
    callers that accept any body never fail on malformed JSON.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    status_code: int = Field(..., ge=100, le=599)
    headers: dict[str, str] = Field(default_factory=dict)
    text: str = Field(default="")
    url: str = Field(default="")
    operation: str = Field(default="http.request")
    correlation_id: UUID | None = Field(default=None)

    def json_body(self) -> object:
        """Decode the body as JSON.

        Raises:
            InfraJsonParseError: If the body is empty or not valid JSON.
        """
        try:
            return json.loads(self.text)
        except json.JSONDecodeError as e:
            ctx = ModelInfraErrorContext(
                transport_type=EnumInfraTransportType.HTTP,
                operation=self.operation,
                target_name=self.url,
                correlation_id=self.correlation_id,
            )
            raise InfraJsonParseError(
                f"Failed to parse JSON response from {self.operation}: {e.msg}",
                body_preview=self.body_preview(),
                context=ctx,
            ) from e

    def body_preview(self) -> str:
        """Return the body truncated for logging."""
        if len(self.text) <= _BODY_PREVIEW_LIMIT:
            return self.text
        return self.text[:_BODY_PREVIEW_LIMIT] + "..."


__all__ = ["ModelGatewayResponse"]
