# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Runtime Configuration Model.

Immutable configuration passed into the kernel, orchestrator and lifecycles
at startup. Loaded from YAML or environment variables by
``nodepulse.runtime.kernel.load_runtime_config``.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_GATEWAY_BASE_URL = "https://gateway-run.bls.dev/api/v1"
DEFAULT_IP_SERVICE_URL = "https://tight-block-2413.txlabs.workers.dev"
DEFAULT_REQUEST_TIMEOUT_SECONDS = 30.0
DEFAULT_RETRY_MAX_RETRIES = 3
DEFAULT_RETRY_BASE_DELAY_SECONDS = 1.0
DEFAULT_HEARTBEAT_INTERVAL_SECONDS = 60.0
DEFAULT_RECOVERY_DELAY_SECONDS = 5.0
DEFAULT_MAX_PROCESS_RESTARTS = 1
DEFAULT_IDS_FILE = "id.txt"
DEFAULT_TOKEN_FILE = "user.txt"


class ModelNodepulseConfig(BaseModel):
    """Configuration for a nodepulse run.

    Attributes:
        gateway_base_url: Base URL of the gateway API (no trailing slash)
        ip_service_url: "What is my IP" lookup endpoint
        request_timeout_seconds: Fixed per-request transport timeout
        retry_max_retries: Retries for bounded executor calls
        retry_base_delay_seconds: Fixed delay between retries
        retry_jitter_ratio: Relative jitter applied to retry delays (0 = none)
        heartbeat_interval_seconds: Period of scheduled pings
        heartbeat_escalation_threshold: Consecutive failed pings that restart
            the lifecycle (0 disables escalation)
        recovery_delay_seconds: Wait before a failed lifecycle restarts
        max_process_restarts: Process-level restarts after unexpected errors
        ids_file: Path of the nodeId:hardwareId file
        token_file: Path of the bearer token file

    Example:
        >>> config = ModelNodepulseConfig(heartbeat_interval_seconds=30.0)
        >>> config.request_timeout_seconds
        30.0
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )

    gateway_base_url: str = Field(default=DEFAULT_GATEWAY_BASE_URL, min_length=1)
    ip_service_url: str = Field(default=DEFAULT_IP_SERVICE_URL, min_length=1)
    request_timeout_seconds: float = Field(
        default=DEFAULT_REQUEST_TIMEOUT_SECONDS, ge=0.1, le=3600.0
    )
    retry_max_retries: int = Field(default=DEFAULT_RETRY_MAX_RETRIES, ge=0)
    retry_base_delay_seconds: float = Field(
        default=DEFAULT_RETRY_BASE_DELAY_SECONDS, ge=0.0
    )
    retry_jitter_ratio: float = Field(default=0.0, ge=0.0, le=1.0)
    heartbeat_interval_seconds: float = Field(
        default=DEFAULT_HEARTBEAT_INTERVAL_SECONDS, gt=0.0
    )
    heartbeat_escalation_threshold: int = Field(default=0, ge=0)
    recovery_delay_seconds: float = Field(
        default=DEFAULT_RECOVERY_DELAY_SECONDS, ge=0.0
    )
    max_process_restarts: int = Field(default=DEFAULT_MAX_PROCESS_RESTARTS, ge=0)
    ids_file: Path = Field(default=Path(DEFAULT_IDS_FILE))
    token_file: Path = Field(default=Path(DEFAULT_TOKEN_FILE))

    @field_validator("gateway_base_url", "ip_service_url")
    @classmethod
    def _validate_http_url(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError(f"URL must start with http:// or https://, got {value!r}")
        return value.rstrip("/")


__all__ = [
    "DEFAULT_GATEWAY_BASE_URL",
    "DEFAULT_HEARTBEAT_INTERVAL_SECONDS",
    "DEFAULT_IDS_FILE",
    "DEFAULT_IP_SERVICE_URL",
    "DEFAULT_MAX_PROCESS_RESTARTS",
    "DEFAULT_RECOVERY_DELAY_SECONDS",
    "DEFAULT_REQUEST_TIMEOUT_SECONDS",
    "DEFAULT_RETRY_BASE_DELAY_SECONDS",
    "DEFAULT_RETRY_MAX_RETRIES",
    "DEFAULT_TOKEN_FILE",
    "ModelNodepulseConfig",
]
