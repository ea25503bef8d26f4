# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""nodepulse Enumerations Module.

Exports:
    EnumErrorCode: Error classification codes for RuntimeHostError
    EnumInfraTransportType: Transport type enumeration for error context
    EnumIpResolutionMode: How the shared IP address is resolved
    EnumNodeSessionState: Node lifecycle state machine states
"""

from nodepulse.enums.enum_error_code import EnumErrorCode
from nodepulse.enums.enum_infra_transport_type import EnumInfraTransportType
from nodepulse.enums.enum_ip_resolution_mode import EnumIpResolutionMode
from nodepulse.enums.enum_node_session_state import EnumNodeSessionState

__all__: list[str] = [
    "EnumErrorCode",
    "EnumInfraTransportType",
    "EnumIpResolutionMode",
    "EnumNodeSessionState",
]
