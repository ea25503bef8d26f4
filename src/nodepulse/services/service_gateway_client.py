# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Gateway Client - builds and sends the three node session calls.

Endpoints (relative to the configured base URL):
    POST /nodes/{nodeId}                body {ipAddress, hardwareId}
    POST /nodes/{nodeId}/start-session  no body
    POST /nodes/{nodeId}/ping           no body -> {status, isB7SConnected, ...}

Every request carries ``Authorization: Bearer {token}``; registration also
sends ``Content-Type: application/json``. The token never appears in logs.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from urllib.parse import quote

from nodepulse.errors import InfraJsonParseError
from nodepulse.models import (
    ModelGatewayRequest,
    ModelGatewayResponse,
    ModelHeartbeatResult,
    ModelNodeIdentity,
    ModelSessionContext,
)
from nodepulse.protocols import ProtocolRequestTransport

if TYPE_CHECKING:
    from nodepulse.runtime.retrying_request_executor import RetryingRequestExecutor

logger = logging.getLogger(__name__)

OPERATION_REGISTER = "gateway.register"
OPERATION_START_SESSION = "gateway.start_session"
OPERATION_PING = "gateway.ping"


class GatewayClient:
    """Client for the gateway's node session endpoints.

    Registration and session start go through the retrying executor with
    infinite retry. Ping is always a single attempt on the raw transport.
    """

    def __init__(
        self,
        base_url: str,
        transport: ProtocolRequestTransport,
        executor: RetryingRequestExecutor,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._transport = transport
        self._executor = executor

    @property
    def base_url(self) -> str:
        return self._base_url

    def node_url(self, node_id: str, suffix: str = "") -> str:
        """Return the URL of a node resource, quoting the node id."""
        return f"{self._base_url}/nodes/{quote(node_id, safe='')}{suffix}"

    @staticmethod
    def _auth_headers(auth_token: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {auth_token}"}

    def build_register_request(
        self, identity: ModelNodeIdentity, context: ModelSessionContext
    ) -> ModelGatewayRequest:
        headers = self._auth_headers(context.auth_token)
        headers["Content-Type"] = "application/json"
        return ModelGatewayRequest(
            method="POST",
            url=self.node_url(identity.node_id),
            headers=headers,
            json_body={
                "ipAddress": context.ip_address,
                "hardwareId": identity.hardware_id,
            },
            operation=OPERATION_REGISTER,
        )

    def build_start_session_request(
        self, identity: ModelNodeIdentity, context: ModelSessionContext
    ) -> ModelGatewayRequest:
        return ModelGatewayRequest(
            method="POST",
            url=self.node_url(identity.node_id, "/start-session"),
            headers=self._auth_headers(context.auth_token),
            operation=OPERATION_START_SESSION,
        )

    def build_ping_request(
        self, identity: ModelNodeIdentity, context: ModelSessionContext
    ) -> ModelGatewayRequest:
        return ModelGatewayRequest(
            method="POST",
            url=self.node_url(identity.node_id, "/ping"),
            headers=self._auth_headers(context.auth_token),
            operation=OPERATION_PING,
        )

    async def register(
        self, identity: ModelNodeIdentity, context: ModelSessionContext
    ) -> ModelGatewayResponse:
        """Register the node, retrying until the gateway accepts it."""
        logger.info(
            "Registering node %s with IP %s, hardware ID %s",
            identity.node_id,
            context.ip_address,
            identity.hardware_id,
            extra={"node_id": identity.node_id, "operation": OPERATION_REGISTER},
        )
        response = await self._executor.execute(
            self.build_register_request(identity, context),
            infinite_retry=True,
            node_id=identity.node_id,
        )
        self._log_response(identity, response, "Registration response")
        return response

    async def start_session(
        self, identity: ModelNodeIdentity, context: ModelSessionContext
    ) -> ModelGatewayResponse:
        """Start the node session, retrying until the gateway accepts it."""
        logger.info(
            "Starting session for node %s, it might take a while...",
            identity.node_id,
            extra={"node_id": identity.node_id, "operation": OPERATION_START_SESSION},
        )
        response = await self._executor.execute(
            self.build_start_session_request(identity, context),
            infinite_retry=True,
            node_id=identity.node_id,
        )
        self._log_response(identity, response, "Start session response")
        return response

    async def ping(
        self, identity: ModelNodeIdentity, context: ModelSessionContext
    ) -> ModelHeartbeatResult:
        """Send a single ping and decode its result.

        Raises:
            InfraNetworkError: On transport failure.
            InfraHttpStatusError: On a non-2xx response.
            InfraJsonParseError: If the body is not valid JSON.
        """
        logger.debug(
            "Pinging node %s with IP %s",
            identity.node_id,
            context.ip_address,
            extra={"node_id": identity.node_id, "operation": OPERATION_PING},
        )
        response = await self._transport.send(
            self.build_ping_request(identity, context)
        )
        result = ModelHeartbeatResult.from_payload(response.json_body())
        logger.info(
            "Ping response, NodeID: %s, Status: %s, Connected: %s, IP: %s",
            identity.node_id,
            result.status,
            result.connected,
            context.ip_address,
            extra={
                "node_id": identity.node_id,
                "operation": OPERATION_PING,
                "status": result.status,
                "connected": result.connected,
            },
        )
        return result

    @staticmethod
    def _log_response(
        identity: ModelNodeIdentity, response: ModelGatewayResponse, label: str
    ) -> None:
        # Any 2xx body is accepted; malformed JSON is only reported.
        try:
            body = response.json_body()
        except InfraJsonParseError:
            logger.warning(
                "%s for node %s is not JSON, accepting raw text: %s",
                label,
                identity.node_id,
                response.body_preview(),
                extra={
                    "node_id": identity.node_id,
                    "operation": response.operation,
                    "status_code": response.status_code,
                },
            )
            return
        logger.info(
            "%s for node %s: %s",
            label,
            identity.node_id,
            body,
            extra={
                "node_id": identity.node_id,
                "operation": response.operation,
                "status_code": response.status_code,
            },
        )


__all__: list[str] = [
    "GatewayClient",
    "OPERATION_PING",
    "OPERATION_REGISTER",
    "OPERATION_START_SESSION",
]
