# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Unit tests for GatewayClient request building and call semantics."""

from __future__ import annotations

import logging

import pytest

from nodepulse.errors import InfraHttpStatusError, InfraJsonParseError
from nodepulse.models import (
    ModelNodeIdentity,
    ModelSessionContext,
    ModelSessionCredentials,
)
from nodepulse.services.service_gateway_client import (
    OPERATION_PING,
    OPERATION_REGISTER,
    OPERATION_START_SESSION,
    GatewayClient,
)
from tests.conftest import TEST_BASE_URL, TEST_TOKEN
from tests.helpers import (
    ScriptedTransport,
    connection_error,
    http_status_error,
    make_response,
)


@pytest.fixture
def context(credentials: ModelSessionCredentials) -> ModelSessionContext:
    return ModelSessionContext.from_credentials(credentials)


class TestGatewayClientRequests:
    """Tests for request construction."""

    def test_base_url_trailing_slash_stripped(
        self, scripted_transport: ScriptedTransport, gateway: GatewayClient
    ) -> None:
        client = GatewayClient(
            f"{TEST_BASE_URL}/", scripted_transport, gateway._executor
        )
        assert client.node_url("node-a") == f"{TEST_BASE_URL}/nodes/node-a"

    def test_node_id_is_url_quoted(self, gateway: GatewayClient) -> None:
        assert gateway.node_url("a/b c", "/ping") == (
            f"{TEST_BASE_URL}/nodes/a%2Fb%20c/ping"
        )

    def test_register_request(
        self,
        gateway: GatewayClient,
        identity_a: ModelNodeIdentity,
        context: ModelSessionContext,
    ) -> None:
        request = gateway.build_register_request(identity_a, context)

        assert request.method == "POST"
        assert request.url == f"{TEST_BASE_URL}/nodes/node-a"
        assert request.headers == {
            "Authorization": f"Bearer {TEST_TOKEN}",
            "Content-Type": "application/json",
        }
        assert request.json_body == {
            "ipAddress": context.ip_address,
            "hardwareId": "hw-a",
        }
        assert request.operation == OPERATION_REGISTER

    @pytest.mark.parametrize(
        ("builder", "suffix", "operation"),
        [
            ("build_start_session_request", "/start-session", OPERATION_START_SESSION),
            ("build_ping_request", "/ping", OPERATION_PING),
        ],
    )
    def test_bodyless_requests(
        self,
        gateway: GatewayClient,
        identity_a: ModelNodeIdentity,
        context: ModelSessionContext,
        builder: str,
        suffix: str,
        operation: str,
    ) -> None:
        request = getattr(gateway, builder)(identity_a, context)

        assert request.url == f"{TEST_BASE_URL}/nodes/node-a{suffix}"
        assert request.headers == {"Authorization": f"Bearer {TEST_TOKEN}"}
        assert request.json_body is None
        assert request.operation == operation


class TestGatewayClientCalls:
    """Tests for retry and parsing behavior of each call."""

    @pytest.mark.asyncio
    async def test_register_retries_until_success(
        self,
        gateway: GatewayClient,
        scripted_transport: ScriptedTransport,
        identity_a: ModelNodeIdentity,
        context: ModelSessionContext,
    ) -> None:
        """Test registration outlasts the bounded retry budget."""
        failures = [connection_error() for _ in range(6)]
        scripted_transport.script("/nodes/node-a", *failures, make_response())

        response = await gateway.register(identity_a, context)

        assert response.status_code == 200
        assert scripted_transport.calls("/nodes/node-a") == 7

    @pytest.mark.asyncio
    async def test_start_session_accepts_non_json_body(
        self,
        gateway: GatewayClient,
        scripted_transport: ScriptedTransport,
        identity_a: ModelNodeIdentity,
        context: ModelSessionContext,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        scripted_transport.script(
            "/nodes/node-a/start-session", make_response("session started")
        )

        with caplog.at_level(logging.WARNING):
            response = await gateway.start_session(identity_a, context)

        assert response.text == "session started"
        assert "Start session response for node node-a is not JSON" in caplog.text

    @pytest.mark.asyncio
    async def test_ping_parses_result(
        self,
        gateway: GatewayClient,
        scripted_transport: ScriptedTransport,
        identity_a: ModelNodeIdentity,
        context: ModelSessionContext,
    ) -> None:
        scripted_transport.script(
            "/nodes/node-a/ping",
            make_response({"status": "active", "isB7SConnected": True}),
        )

        result = await gateway.ping(identity_a, context)

        assert result.status == "active"
        assert result.connected is True

    @pytest.mark.asyncio
    async def test_ping_is_single_attempt(
        self,
        gateway: GatewayClient,
        scripted_transport: ScriptedTransport,
        identity_a: ModelNodeIdentity,
        context: ModelSessionContext,
    ) -> None:
        scripted_transport.script(
            "/nodes/node-a/ping", http_status_error(500), make_response()
        )

        with pytest.raises(InfraHttpStatusError):
            await gateway.ping(identity_a, context)

        assert scripted_transport.calls("/nodes/node-a/ping") == 1

    @pytest.mark.asyncio
    async def test_ping_with_malformed_json_raises(
        self,
        gateway: GatewayClient,
        scripted_transport: ScriptedTransport,
        identity_a: ModelNodeIdentity,
        context: ModelSessionContext,
    ) -> None:
        scripted_transport.script("/nodes/node-a/ping", make_response("pong"))

        with pytest.raises(InfraJsonParseError):
            await gateway.ping(identity_a, context)

    @pytest.mark.asyncio
    async def test_token_never_logged(
        self,
        gateway: GatewayClient,
        identity_a: ModelNodeIdentity,
        context: ModelSessionContext,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        with caplog.at_level(logging.DEBUG):
            await gateway.register(identity_a, context)
            await gateway.start_session(identity_a, context)
            await gateway.ping(identity_a, context)

        assert TEST_TOKEN not in caplog.text
