# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""nodepulse Stores Module.

File-backed setup inputs read once at startup.

Exports:
    load_node_identities: Load ``nodeId:hardwareId`` entries from id.txt
    parse_identity_lines: Parse entries, skipping invalid ones
    write_node_identities: Write entries collected interactively
    prompt_node_identities: Collect entries from the operator
    load_auth_token: Load the bearer token from user.txt
    write_auth_token: Write the bearer token file
    prompt_auth_token: Ask the operator for the bearer token
"""

from nodepulse.stores.store_auth_token import (
    load_auth_token,
    prompt_auth_token,
    write_auth_token,
)
from nodepulse.stores.store_node_identity import (
    load_node_identities,
    parse_identity_line,
    parse_identity_lines,
    prompt_node_identities,
    write_node_identities,
)

__all__: list[str] = [
    "load_auth_token",
    "load_node_identities",
    "parse_identity_line",
    "parse_identity_lines",
    "prompt_auth_token",
    "prompt_node_identities",
    "write_auth_token",
    "write_node_identities",
]
