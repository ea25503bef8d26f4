# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""nodepulse Kernel - bootstrap for the node session service.

The kernel is responsible for:
    1. Loading runtime configuration from YAML or environment
    2. Optionally creating the id and token files interactively
    3. Loading node identities and the bearer token, resolving the IP
    4. Wiring transport, retry executor, gateway client and orchestrator
    5. Setting up graceful shutdown signal handlers
    6. Running under the ServiceSupervisor restart boundary until shutdown

Usage:
    # Via the installed entrypoint
    nodepulse run --ip-mode service

    # Direct module execution (service IP lookup, no prompts)
    python -m nodepulse.runtime.kernel

Environment Variables:
    NODEPULSE_CONFIG: Path to the YAML config file (default: ./nodepulse.yaml)
    NODEPULSE_LOG_LEVEL: Logging level (default: INFO)
    NODEPULSE_*: Individual settings when no config file exists (see
        load_runtime_config)
"""

from __future__ import annotations

import asyncio
import logging
import os
import signal
import sys
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as get_package_version
from pathlib import Path
from uuid import uuid4

import httpx
import yaml
from pydantic import ValidationError

from nodepulse.enums import EnumInfraTransportType, EnumIpResolutionMode
from nodepulse.errors import (
    ModelInfraErrorContext,
    ProtocolConfigurationError,
)
from nodepulse.handlers import HttpTransportHandler
from nodepulse.models import (
    ModelNodeIdentity,
    ModelNodepulseConfig,
    ModelRunOptions,
    ModelSessionCredentials,
)
from nodepulse.models.model_nodepulse_config import (
    DEFAULT_GATEWAY_BASE_URL,
    DEFAULT_HEARTBEAT_INTERVAL_SECONDS,
    DEFAULT_IDS_FILE,
    DEFAULT_IP_SERVICE_URL,
    DEFAULT_MAX_PROCESS_RESTARTS,
    DEFAULT_RECOVERY_DELAY_SECONDS,
    DEFAULT_REQUEST_TIMEOUT_SECONDS,
    DEFAULT_RETRY_BASE_DELAY_SECONDS,
    DEFAULT_RETRY_MAX_RETRIES,
    DEFAULT_TOKEN_FILE,
)
from nodepulse.protocols import ProtocolRequestTransport
from nodepulse.runtime.node_session_orchestrator import NodeSessionOrchestrator
from nodepulse.runtime.retrying_request_executor import RetryingRequestExecutor
from nodepulse.runtime.service_supervisor import ServiceSupervisor
from nodepulse.services import GatewayClient, IpResolver
from nodepulse.stores import (
    load_auth_token,
    load_node_identities,
    prompt_auth_token,
    prompt_node_identities,
    write_auth_token,
    write_node_identities,
)
from nodepulse.utils import parse_env_float, parse_env_int

logger = logging.getLogger(__name__)

try:
    KERNEL_VERSION = get_package_version("nodepulse")
except PackageNotFoundError:
    KERNEL_VERSION = "unknown"

DEFAULT_CONFIG_PATH = "nodepulse.yaml"
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def configure_logging(level: str | None = None) -> None:
    """Configure root logging with the kernel's structured format.

    The level comes from ``level`` (CLI) or NODEPULSE_LOG_LEVEL, default
    INFO. An invalid level falls back to INFO with a warning on stderr.

    Log Format Example:
        2025-01-15 10:30:45 [INFO] nodepulse.runtime.node_lifecycle: Node abc: unregistered -> registered
    """
    log_level = (level or os.getenv("NODEPULSE_LOG_LEVEL", "INFO")).upper()

    if log_level not in VALID_LOG_LEVELS:
        print(
            f"Warning: Invalid log level '{log_level}', using INFO. "
            f"Valid levels: {', '.join(sorted(VALID_LOG_LEVELS))}",
            file=sys.stderr,
        )
        log_level = "INFO"

    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _config_from_env() -> ModelNodepulseConfig:
    return ModelNodepulseConfig(
        gateway_base_url=os.getenv(
            "NODEPULSE_GATEWAY_BASE_URL", DEFAULT_GATEWAY_BASE_URL
        ),
        ip_service_url=os.getenv("NODEPULSE_IP_SERVICE_URL", DEFAULT_IP_SERVICE_URL),
        request_timeout_seconds=parse_env_float(
            "NODEPULSE_HTTP_TIMEOUT",
            DEFAULT_REQUEST_TIMEOUT_SECONDS,
            min_value=0.1,
            max_value=3600.0,
            transport_type=EnumInfraTransportType.HTTP,
            service_name="http_transport",
        ),
        retry_max_retries=parse_env_int(
            "NODEPULSE_RETRY_MAX_RETRIES",
            DEFAULT_RETRY_MAX_RETRIES,
            min_value=0,
            service_name="retry_executor",
        ),
        retry_base_delay_seconds=parse_env_float(
            "NODEPULSE_RETRY_BASE_DELAY",
            DEFAULT_RETRY_BASE_DELAY_SECONDS,
            min_value=0.0,
            service_name="retry_executor",
        ),
        retry_jitter_ratio=parse_env_float(
            "NODEPULSE_RETRY_JITTER",
            0.0,
            min_value=0.0,
            max_value=1.0,
            service_name="retry_executor",
        ),
        heartbeat_interval_seconds=parse_env_float(
            "NODEPULSE_HEARTBEAT_INTERVAL",
            DEFAULT_HEARTBEAT_INTERVAL_SECONDS,
            min_value=0.1,
            service_name="heartbeat_scheduler",
        ),
        heartbeat_escalation_threshold=parse_env_int(
            "NODEPULSE_HEARTBEAT_ESCALATION",
            0,
            min_value=0,
            service_name="heartbeat_scheduler",
        ),
        recovery_delay_seconds=parse_env_float(
            "NODEPULSE_RECOVERY_DELAY",
            DEFAULT_RECOVERY_DELAY_SECONDS,
            min_value=0.0,
            service_name="node_lifecycle",
        ),
        max_process_restarts=parse_env_int(
            "NODEPULSE_MAX_RESTARTS",
            DEFAULT_MAX_PROCESS_RESTARTS,
            min_value=0,
            service_name="supervisor",
        ),
        ids_file=Path(os.getenv("NODEPULSE_IDS_FILE", DEFAULT_IDS_FILE)),
        token_file=Path(os.getenv("NODEPULSE_TOKEN_FILE", DEFAULT_TOKEN_FILE)),
    )


def load_runtime_config(config_path: Path | None = None) -> ModelNodepulseConfig:
    """Load runtime configuration from a YAML file or the environment.

    Configuration Loading Process:
        1. Use ``config_path``, else NODEPULSE_CONFIG, else ./nodepulse.yaml
        2. If the file exists, parse it with yaml.safe_load and validate it
           against ModelNodepulseConfig (unknown keys are rejected)
        3. Otherwise build the config from NODEPULSE_* environment variables
           and defaults

    Raises:
        ProtocolConfigurationError: If the file exists but cannot be read,
            parsed or validated, or if environment values are invalid.

    Example:
        >>> config = load_runtime_config(Path("./nodepulse.yaml"))
        >>> config.heartbeat_interval_seconds
        60.0
    """
    path = config_path or Path(os.getenv("NODEPULSE_CONFIG", DEFAULT_CONFIG_PATH))
    correlation_id = uuid4()
    context = ModelInfraErrorContext(
        transport_type=EnumInfraTransportType.RUNTIME,
        operation="load_config",
        target_name=str(path),
        correlation_id=correlation_id,
    )

    if path.exists():
        logger.info(
            "Loading runtime config from %s (correlation_id=%s)",
            path,
            correlation_id,
        )
        try:
            with open(path, encoding="utf-8") as f:
                raw_config = yaml.safe_load(f) or {}
            if not isinstance(raw_config, dict):
                raise ProtocolConfigurationError(
                    f"Runtime config at {path} must be a mapping, "
                    f"got {type(raw_config).__name__}",
                    context=context,
                    config_path=str(path),
                )
            config = ModelNodepulseConfig.model_validate(raw_config)
            logger.debug(
                "Runtime config loaded successfully (correlation_id=%s)",
                correlation_id,
                extra={"config": config.model_dump(mode="json")},
            )
            return config
        except yaml.YAMLError as e:
            raise ProtocolConfigurationError(
                f"Failed to parse runtime config YAML at {path}: {e}",
                context=context,
                config_path=str(path),
                error_details=str(e),
            ) from e
        except ValidationError as e:
            error_count = e.error_count()
            pydantic_errors = [
                f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}"
                for err in e.errors()
            ]
            error_summary = "; ".join(pydantic_errors[:3])
            raise ProtocolConfigurationError(
                f"Runtime config validation failed at {path}: {error_count} error(s). "
                f"First errors: {error_summary}",
                context=context,
                config_path=str(path),
                validation_errors=pydantic_errors,
                error_count=error_count,
            ) from e
        except UnicodeDecodeError as e:
            raise ProtocolConfigurationError(
                f"Runtime config file contains binary or non-UTF-8 content: {path}",
                context=context,
                config_path=str(path),
                error_details=f"Encoding error at position {e.start}-{e.end}: {e.reason}",
            ) from e
        except OSError as e:
            raise ProtocolConfigurationError(
                f"Failed to read runtime config at {path}: {e}",
                context=context,
                config_path=str(path),
                error_details=str(e),
            ) from e

    logger.info(
        "No runtime config found at %s, using environment/defaults (correlation_id=%s)",
        path,
        correlation_id,
    )
    try:
        return _config_from_env()
    except ValidationError as e:
        raise ProtocolConfigurationError(
            f"Invalid runtime configuration from environment: {e.error_count()} error(s)",
            context=context,
            error_details=str(e),
        ) from e


def apply_run_options(
    config: ModelNodepulseConfig, options: ModelRunOptions
) -> ModelNodepulseConfig:
    """Return ``config`` with the file overrides from ``options`` applied."""
    updates: dict[str, Path] = {}
    if options.ids_file is not None:
        updates["ids_file"] = options.ids_file
    if options.token_file is not None:
        updates["token_file"] = options.token_file
    if not updates:
        return config
    return config.model_copy(update=updates)


def run_interactive_setup(config: ModelNodepulseConfig) -> None:
    """Create the id and token files from operator input."""
    entries = prompt_node_identities()
    write_node_identities(config.ids_file, entries)
    write_auth_token(config.token_file, prompt_auth_token())


async def prepare_session(
    config: ModelNodepulseConfig,
    transport: ProtocolRequestTransport,
    ip_mode: EnumIpResolutionMode,
    manual_ip: str | None = None,
    resolver: IpResolver | None = None,
) -> tuple[list[ModelNodeIdentity], ModelSessionCredentials]:
    """Load identities and token and resolve the shared IP address.

    Raises:
        ProtocolConfigurationError: Missing files, no valid identities, or an
            invalid IP literal.
    """
    identities = load_node_identities(config.ids_file)
    if not identities:
        raise ProtocolConfigurationError(
            f"No valid node identities found in {config.ids_file}",
            context=ModelInfraErrorContext(
                transport_type=EnumInfraTransportType.FILESYSTEM,
                operation="load_node_identities",
                target_name=str(config.ids_file),
            ),
        )
    auth_token = load_auth_token(config.token_file)

    if manual_ip is not None:
        ip_mode = EnumIpResolutionMode.MANUAL
    resolver = resolver or IpResolver(transport, ip_service_url=config.ip_service_url)
    ip_address = await resolver.resolve(ip_mode, manual_ip=manual_ip)

    return identities, ModelSessionCredentials(
        ip_address=ip_address, auth_token=auth_token
    )


async def run_service(
    config: ModelNodepulseConfig,
    options: ModelRunOptions,
    allow_interactive: bool,
    shutdown_event: asyncio.Event,
    http_transport: httpx.AsyncBaseTransport | None = None,
) -> None:
    """Set up and run all node lifecycles until ``shutdown_event`` is set.

    ``allow_interactive`` is False on supervisor restarts, so the id and
    token files are only ever created on the first run.
    """
    if allow_interactive and options.interactive_setup:
        run_interactive_setup(config)

    async with HttpTransportHandler(
        timeout_seconds=config.request_timeout_seconds,
        transport=http_transport,
    ) as handler:
        identities, credentials = await prepare_session(
            config, handler, options.ip_mode, options.manual_ip
        )

        executor = RetryingRequestExecutor(
            handler,
            max_retries=config.retry_max_retries,
            base_delay=config.retry_base_delay_seconds,
            jitter_ratio=config.retry_jitter_ratio,
        )
        gateway = GatewayClient(config.gateway_base_url, handler, executor)
        orchestrator = NodeSessionOrchestrator(gateway, config)
        orchestrator.launch(identities, credentials)
        try:
            await shutdown_event.wait()
        finally:
            await orchestrator.stop()
            logger.info(
                "Final node states: %s",
                {node_id: state.value for node_id, state in orchestrator.get_status().items()},
            )


def _install_signal_handlers(shutdown_event: asyncio.Event) -> None:
    loop = asyncio.get_running_loop()

    def handle_shutdown(sig: signal.Signals) -> None:
        logger.info("Received %s, initiating graceful shutdown...", sig.name)
        shutdown_event.set()

    if sys.platform != "win32":
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, handle_shutdown, sig)
    else:
        # signal.signal handlers run outside the loop thread on Windows
        def windows_handler(signum: int, frame: object) -> None:
            sig = signal.Signals(signum)
            logger.info("Received %s, initiating graceful shutdown...", sig.name)
            loop.call_soon_threadsafe(shutdown_event.set)

        signal.signal(signal.SIGINT, windows_handler)


def _remove_signal_handlers() -> None:
    if sys.platform == "win32":
        return
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.remove_signal_handler(sig)


async def bootstrap(
    options: ModelRunOptions | None = None,
    shutdown_event: asyncio.Event | None = None,
    install_signal_handlers: bool = True,
    http_transport: httpx.AsyncBaseTransport | None = None,
) -> int:
    """Bootstrap the node session service.

    Returns:
        Exit code (0 for clean shutdown, 1 for configuration errors or
        exhausted restarts).

    Example Startup Log:
        ============================================================
        nodepulse Kernel v0.1.0
        Gateway: https://gateway-run.bls.dev/api/v1
        Nodes file: id.txt
        Heartbeat interval: 60.0s
        ============================================================
    """
    options = options or ModelRunOptions()
    shutdown_event = shutdown_event or asyncio.Event()

    try:
        config = apply_run_options(load_runtime_config(options.config_path), options)
    except ProtocolConfigurationError as e:
        logger.exception(
            "nodepulse configuration failed",
            extra={"error_type": type(e).__name__, "error_code": e.error_code.name},
        )
        return 1

    banner_lines = [
        "=" * 60,
        f"nodepulse Kernel v{KERNEL_VERSION}",
        f"Gateway: {config.gateway_base_url}",
        f"Nodes file: {config.ids_file}",
        f"Heartbeat interval: {config.heartbeat_interval_seconds}s",
        "=" * 60,
    ]
    logger.info("\n%s", "\n".join(banner_lines))

    if install_signal_handlers:
        _install_signal_handlers(shutdown_event)

    async def _run(allow_interactive: bool) -> None:
        await run_service(
            config,
            options,
            allow_interactive,
            shutdown_event,
            http_transport=http_transport,
        )

    supervisor = ServiceSupervisor(_run, max_restarts=config.max_process_restarts)
    try:
        exit_code = await supervisor.run()
    finally:
        if install_signal_handlers:
            _remove_signal_handlers()

    logger.info("nodepulse stopped with exit code %d", exit_code)
    return exit_code


def main() -> None:
    """Entry point for ``python -m nodepulse.runtime.kernel``.

    Uses the service IP lookup and never prompts.
    """
    configure_logging()
    logger.info("nodepulse Kernel v%s initializing...", KERNEL_VERSION)
    exit_code = asyncio.run(
        bootstrap(ModelRunOptions(ip_mode=EnumIpResolutionMode.SERVICE))
    )
    sys.exit(exit_code)


if __name__ == "__main__":
    main()


__all__: list[str] = [
    "apply_run_options",
    "bootstrap",
    "configure_logging",
    "load_runtime_config",
    "main",
    "prepare_session",
    "run_interactive_setup",
    "run_service",
]
