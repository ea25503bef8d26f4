# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""IP Resolver - obtains the shared IP address reported at registration.

Modes:
    PROMPT: Ask the operator to choose (1) manual, (2) service or (3) local.
        Any other answer falls back to the service lookup.
    MANUAL: A dotted-quad IPv4 literal, either passed in or prompted for.
        Invalid input is re-prompted up to ``max_manual_attempts`` times.
    SERVICE: GET the configured lookup URL and read the ``ip`` JSON field.
    LOCAL: First non-loopback IPv4 address of this host, or 127.0.0.1.

Prompts run before any lifecycle starts, so blocking on stdin is fine here.
"""

from __future__ import annotations

import logging
import socket
from collections.abc import Callable

import click

from nodepulse.enums import EnumInfraTransportType, EnumIpResolutionMode
from nodepulse.errors import (
    InfraJsonParseError,
    ModelInfraErrorContext,
    ProtocolConfigurationError,
)
from nodepulse.models import ModelGatewayRequest
from nodepulse.models.model_nodepulse_config import DEFAULT_IP_SERVICE_URL
from nodepulse.protocols import ProtocolRequestTransport
from nodepulse.utils.util_ip_validation import is_valid_ipv4

logger = logging.getLogger(__name__)

OPERATION_IP_LOOKUP = "ip_service.lookup"
LOCALHOST_FALLBACK = "127.0.0.1"
DEFAULT_MAX_MANUAL_ATTEMPTS = 5

# UDP connect sends no packets; it only selects the outbound interface
_PROBE_ADDRESS = ("192.0.2.1", 80)

_MODE_CHOICES: dict[str, EnumIpResolutionMode] = {
    "1": EnumIpResolutionMode.MANUAL,
    "2": EnumIpResolutionMode.SERVICE,
    "3": EnumIpResolutionMode.LOCAL,
}


def probe_local_ipv4() -> str | None:
    """Return the IPv4 address of the default outbound interface, if any."""
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
            sock.connect(_PROBE_ADDRESS)
            address = sock.getsockname()[0]
    except OSError as e:
        logger.debug("Local IPv4 probe failed: %s", e)
        return None
    if not address or address.startswith("127.") or address == "0.0.0.0":
        return None
    return str(address)


class IpResolver:
    """Resolves the IP address shared by every node lifecycle."""

    def __init__(
        self,
        transport: ProtocolRequestTransport,
        ip_service_url: str = DEFAULT_IP_SERVICE_URL,
        prompt: Callable[[str], str] | None = None,
        echo: Callable[[str], None] = click.echo,
        max_manual_attempts: int = DEFAULT_MAX_MANUAL_ATTEMPTS,
        local_probe: Callable[[], str | None] = probe_local_ipv4,
    ) -> None:
        if max_manual_attempts < 1:
            raise ValueError(
                f"max_manual_attempts must be >= 1, got {max_manual_attempts}"
            )
        self._transport = transport
        self._ip_service_url = ip_service_url
        self._prompt = prompt or (lambda text: click.prompt(text, prompt_suffix=": "))
        self._echo = echo
        self._max_manual_attempts = max_manual_attempts
        self._local_probe = local_probe

    async def resolve(
        self,
        mode: EnumIpResolutionMode,
        manual_ip: str | None = None,
    ) -> str:
        """Resolve the IP address using ``mode``.

        Raises:
            ProtocolConfigurationError: Invalid literal or prompts exhausted.
            InfraNetworkError: Service lookup failed at the transport level.
            InfraHttpStatusError: Service lookup returned non-2xx.
            InfraJsonParseError: Service lookup body has no usable ``ip``.
        """
        if mode is EnumIpResolutionMode.PROMPT:
            mode = self.choose_mode()

        if mode is EnumIpResolutionMode.MANUAL:
            address = self.resolve_manual(manual_ip)
        elif mode is EnumIpResolutionMode.LOCAL:
            address = self.resolve_local()
        else:
            address = await self.fetch_from_service()

        logger.info(
            "Resolved IP address %s using %s mode",
            address,
            mode.value,
            extra={"ip_address": address, "ip_mode": mode.value},
        )
        return address

    def choose_mode(self) -> EnumIpResolutionMode:
        answer = self._prompt(
            "Would you like to (1) Enter your IP address manually, "
            "(2) Fetch IP from service, or (3) Use local network IP? (1/2/3)"
        ).strip()
        mode = _MODE_CHOICES.get(answer)
        if mode is None:
            self._echo(
                "Invalid option. Defaulting to fetching IP from the external service."
            )
            return EnumIpResolutionMode.SERVICE
        return mode

    def resolve_manual(self, manual_ip: str | None = None) -> str:
        """Validate a given literal, or prompt until a valid one is entered."""
        context = ModelInfraErrorContext(
            transport_type=EnumInfraTransportType.RUNTIME,
            operation="resolve_manual_ip",
        )
        if manual_ip is not None:
            candidate = manual_ip.strip()
            if not is_valid_ipv4(candidate):
                raise ProtocolConfigurationError(
                    f"Invalid IPv4 address: {manual_ip!r}",
                    context=context,
                )
            return candidate

        for attempt in range(1, self._max_manual_attempts + 1):
            candidate = self._prompt("Please enter your IP address").strip()
            if is_valid_ipv4(candidate):
                return candidate
            self._echo(
                "Invalid IP address format. Please enter a valid IPv4 address."
            )
            logger.warning(
                "Rejected manual IP entry %r (attempt %d/%d)",
                candidate,
                attempt,
                self._max_manual_attempts,
                extra={"attempt": attempt},
            )

        raise ProtocolConfigurationError(
            f"No valid IPv4 address entered after {self._max_manual_attempts} attempts",
            context=context,
            attempts=self._max_manual_attempts,
        )

    def resolve_local(self) -> str:
        address = self._local_probe()
        if address is None:
            logger.warning(
                "No non-loopback IPv4 address found, using %s", LOCALHOST_FALLBACK
            )
            return LOCALHOST_FALLBACK
        logger.info("Local network IP: %s", address)
        return address

    async def fetch_from_service(self) -> str:
        request = ModelGatewayRequest(
            method="GET",
            url=self._ip_service_url,
            operation=OPERATION_IP_LOOKUP,
        )
        response = await self._transport.send(request)
        payload = response.json_body()
        logger.info(
            "IP fetch response: %s",
            payload,
            extra={"operation": OPERATION_IP_LOOKUP, "url": self._ip_service_url},
        )

        address = payload.get("ip") if isinstance(payload, dict) else None
        if not isinstance(address, str) or not address.strip():
            raise InfraJsonParseError(
                "IP service response has no 'ip' field",
                body_preview=response.body_preview(),
                context=ModelInfraErrorContext.http(
                    OPERATION_IP_LOOKUP, self._ip_service_url, request.correlation_id
                ),
            )
        return address.strip()


__all__: list[str] = [
    "DEFAULT_MAX_MANUAL_ATTEMPTS",
    "IpResolver",
    "LOCALHOST_FALLBACK",
    "OPERATION_IP_LOOKUP",
    "probe_local_ipv4",
]
