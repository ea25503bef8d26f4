# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""nodepulse Protocols Module.

Exports:
    ProtocolRequestTransport: Single-attempt request transport interface
"""

from nodepulse.protocols.protocol_request_transport import ProtocolRequestTransport

__all__: list[str] = ["ProtocolRequestTransport"]
