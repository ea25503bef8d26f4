# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""nodepulse Services Module.

Exports:
    GatewayClient: Register, start-session and ping calls against the gateway
    IpResolver: Resolves the shared IP address (manual, service or local)
"""

from nodepulse.services.service_gateway_client import GatewayClient
from nodepulse.services.service_ip_resolver import IpResolver

__all__: list[str] = ["GatewayClient", "IpResolver"]
