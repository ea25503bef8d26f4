# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Test helpers for nodepulse unit tests.

Available Utilities:
    Fake Transport:
        - ScriptedTransport: Scripted per-URL outcomes, records every request
        - make_response: Build a 2xx ModelGatewayResponse from a body
        - connection_error: InfraConnectionError for scripting failures
        - http_status_error: InfraHttpStatusError for scripting failures

    Log Helpers:
        - filter_module_records: Records at or above a level from one module
        - filter_node_records: Same, restricted to one node_id
        - get_messages: Formatted messages of log records

    Runtime Helpers:
        - make_test_config: ModelNodepulseConfig with tiny intervals
        - wait_until: Poll a predicate until it holds
"""

from tests.helpers.fake_transport import (
    ScriptedTransport,
    connection_error,
    http_status_error,
    make_response,
)
from tests.helpers.log_helpers import (
    filter_module_records,
    filter_node_records,
    get_messages,
)
from tests.helpers.runtime_helpers import make_test_config, wait_until

__all__: list[str] = [
    "ScriptedTransport",
    "connection_error",
    "filter_module_records",
    "filter_node_records",
    "get_messages",
    "http_status_error",
    "make_response",
    "make_test_config",
    "wait_until",
]
