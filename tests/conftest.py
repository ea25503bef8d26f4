"""Pytest configuration and shared fixtures for nodepulse tests."""

from __future__ import annotations

import pytest

from nodepulse.models import ModelNodeIdentity, ModelSessionCredentials
from nodepulse.runtime.retrying_request_executor import RetryingRequestExecutor
from nodepulse.services.service_gateway_client import GatewayClient
from tests.helpers import ScriptedTransport

TEST_BASE_URL = "https://gateway.test/api/v1"
TEST_TOKEN = "test-bearer-token-123"
TEST_IP = "203.0.113.7"


@pytest.fixture
def credentials() -> ModelSessionCredentials:
    """Shared credentials used by every lifecycle in a test."""
    return ModelSessionCredentials(ip_address=TEST_IP, auth_token=TEST_TOKEN)


@pytest.fixture
def identity_a() -> ModelNodeIdentity:
    return ModelNodeIdentity(node_id="node-a", hardware_id="hw-a")


@pytest.fixture
def identity_b() -> ModelNodeIdentity:
    return ModelNodeIdentity(node_id="node-b", hardware_id="hw-b")


@pytest.fixture
def scripted_transport() -> ScriptedTransport:
    return ScriptedTransport()


@pytest.fixture
def executor(scripted_transport: ScriptedTransport) -> RetryingRequestExecutor:
    """Executor with zero retry delay so retries never slow tests down."""
    return RetryingRequestExecutor(scripted_transport, max_retries=3, base_delay=0.0)


@pytest.fixture
def gateway(
    scripted_transport: ScriptedTransport, executor: RetryingRequestExecutor
) -> GatewayClient:
    return GatewayClient(TEST_BASE_URL, scripted_transport, executor)
