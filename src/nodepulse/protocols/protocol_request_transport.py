# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Request Transport Protocol.

Structural interface for anything that can send a ModelGatewayRequest.
HttpTransportHandler is the production implementation; tests supply fakes.

Note:
    Method bodies in this Protocol use ``...`` (Ellipsis) per PEP 544.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from nodepulse.models import ModelGatewayRequest, ModelGatewayResponse


@runtime_checkable
class ProtocolRequestTransport(Protocol):
    """Protocol for single-attempt request transports.

    Implementations perform exactly one attempt per call and raise
    InfraNetworkError or InfraHttpStatusError on failure.
    """

    async def send(self, request: ModelGatewayRequest) -> ModelGatewayResponse:
        """Send one request and return its 2xx response."""
        ...


__all__: list[str] = ["ProtocolRequestTransport"]
