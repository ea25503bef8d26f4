# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Where an error happened: transport, operation, target and node.

Every nodepulse error can carry one of these. RuntimeHostError flattens it
into its ``context`` dict, and the correlation id of the failed request ends
up in the error message.
"""

from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from nodepulse.enums import EnumInfraTransportType


class ModelInfraErrorContext(BaseModel):
    """Structured location of a failure.

    Example:
        >>> ctx = ModelInfraErrorContext.http("ping", url, node_id="abc")
        >>> raise InfraConnectionError("Failed to connect", context=ctx)
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    transport_type: EnumInfraTransportType | None = None
    operation: str | None = Field(
        default=None, description="register, ping, load_config, ..."
    )
    target_name: str | None = Field(default=None, description="URL or file path")
    node_id: str | None = None
    correlation_id: UUID | None = None

    @classmethod
    def http(
        cls,
        operation: str,
        url: str,
        correlation_id: UUID | None = None,
        node_id: str | None = None,
    ) -> ModelInfraErrorContext:
        """Context for a failed gateway or IP-service request."""
        return cls(
            transport_type=EnumInfraTransportType.HTTP,
            operation=operation,
            target_name=url,
            correlation_id=correlation_id,
            node_id=node_id,
        )

    def as_fields(self) -> dict[str, object]:
        """Set fields other than the correlation id, for error context dicts."""
        return {
            name: value
            for name, value in self.model_dump(exclude={"correlation_id"}).items()
            if value is not None
        }


__all__ = ["ModelInfraErrorContext"]
