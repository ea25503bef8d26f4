# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""nodepulse Models Module.

Exports:
    ModelGatewayRequest: HTTP request handed to the transport
    ModelGatewayResponse: 2xx HTTP response with lazy JSON decoding
    ModelHeartbeatResult: Transient outcome of a ping
    ModelNodeIdentity: Immutable (node_id, hardware_id) pair
    ModelNodepulseConfig: Immutable runtime configuration
    ModelRunOptions: Command-line choices for one run
    ModelSessionContext: Per-node mutable lifecycle state
    ModelSessionCredentials: Shared read-only token and IP address
"""

from nodepulse.models.model_gateway_request import ModelGatewayRequest
from nodepulse.models.model_gateway_response import ModelGatewayResponse
from nodepulse.models.model_heartbeat_result import ModelHeartbeatResult
from nodepulse.models.model_node_identity import ModelNodeIdentity
from nodepulse.models.model_nodepulse_config import ModelNodepulseConfig
from nodepulse.models.model_run_options import ModelRunOptions
from nodepulse.models.model_session_context import ModelSessionContext
from nodepulse.models.model_session_credentials import ModelSessionCredentials

__all__: list[str] = [
    "ModelGatewayRequest",
    "ModelGatewayResponse",
    "ModelHeartbeatResult",
    "ModelNodeIdentity",
    "ModelNodepulseConfig",
    "ModelRunOptions",
    "ModelSessionContext",
    "ModelSessionCredentials",
]
