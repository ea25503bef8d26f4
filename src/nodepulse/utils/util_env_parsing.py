# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Type-safe environment variable parsing with range validation.

Parsing Rules:
    - Unset variable: the default is returned
    - Non-numeric (or empty) value: ProtocolConfigurationError
    - Value outside [min_value, max_value]: the default is returned and a
      warning is logged
"""

from __future__ import annotations

import logging
import os
from typing import Optional

from nodepulse.enums import EnumInfraTransportType
from nodepulse.errors import ModelInfraErrorContext, ProtocolConfigurationError

logger = logging.getLogger(__name__)


def _error_context(
    env_var: str,
    transport_type: EnumInfraTransportType,
    service_name: str,
) -> ModelInfraErrorContext:
    return ModelInfraErrorContext(
        transport_type=transport_type,
        operation="parse_env",
        target_name=f"{service_name}.{env_var}",
    )


def _check_range(
    env_var: str,
    value: float,
    default: float,
    min_value: Optional[float],
    max_value: Optional[float],
    service_name: str,
) -> bool:
    if min_value is not None and value < min_value:
        logger.warning(
            "%s=%s is below minimum %s, using default %s",
            env_var,
            value,
            min_value,
            default,
            extra={"env_var": env_var, "service_name": service_name},
        )
        return False
    if max_value is not None and value > max_value:
        logger.warning(
            "%s=%s is above maximum %s, using default %s",
            env_var,
            value,
            max_value,
            default,
            extra={"env_var": env_var, "service_name": service_name},
        )
        return False
    return True


def parse_env_float(
    env_var: str,
    default: float,
    *,
    min_value: Optional[float] = None,
    max_value: Optional[float] = None,
    transport_type: EnumInfraTransportType = EnumInfraTransportType.RUNTIME,
    service_name: str = "nodepulse",
) -> float:
    """Parse a float environment variable.

    Args:
        env_var: Environment variable name
        default: Value used when unset or out of range
        min_value: Inclusive lower bound
        max_value: Inclusive upper bound
        transport_type: Transport type recorded in error context
        service_name: Component name recorded in error context and logs

    Returns:
        The parsed value, or ``default``.

    Raises:
        ProtocolConfigurationError: If the value is not numeric.

    Example:
        >>> parse_env_float("NODEPULSE_HTTP_TIMEOUT", 30.0, min_value=0.1)
        30.0
    """
    raw = os.environ.get(env_var)
    if raw is None:
        return default
    try:
        value = float(raw.strip())
    except ValueError as e:
        raise ProtocolConfigurationError(
            f"Invalid value for {env_var}: expected numeric value, got {raw!r}",
            context=_error_context(env_var, transport_type, service_name),
            env_var=env_var,
        ) from e

    if not _check_range(env_var, value, default, min_value, max_value, service_name):
        return default
    return value


def parse_env_int(
    env_var: str,
    default: int,
    *,
    min_value: Optional[int] = None,
    max_value: Optional[int] = None,
    transport_type: EnumInfraTransportType = EnumInfraTransportType.RUNTIME,
    service_name: str = "nodepulse",
) -> int:
    """Parse an integer environment variable.

    Same rules as parse_env_float; values such as ``"1.5"`` are rejected.

    Raises:
        ProtocolConfigurationError: If the value is not an integer.
    """
    raw = os.environ.get(env_var)
    if raw is None:
        return default
    try:
        value = int(raw.strip())
    except ValueError as e:
        raise ProtocolConfigurationError(
            f"Invalid value for {env_var}: expected integer value, got {raw!r}",
            context=_error_context(env_var, transport_type, service_name),
            env_var=env_var,
        ) from e

    if not _check_range(env_var, value, default, min_value, max_value, service_name):
        return default
    return value


__all__: list[str] = ["parse_env_float", "parse_env_int"]
