# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Auth Token Store - the bearer token file.

The token is never logged; only the file path and token length are.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

import click

from nodepulse.enums import EnumInfraTransportType
from nodepulse.errors import ModelInfraErrorContext, ProtocolConfigurationError

logger = logging.getLogger(__name__)


def load_auth_token(path: Path) -> str:
    """Read and strip the bearer token stored in ``path``.

    Raises:
        ProtocolConfigurationError: If the file is missing, unreadable or empty.
    """
    context = ModelInfraErrorContext(
        transport_type=EnumInfraTransportType.FILESYSTEM,
        operation="load_auth_token",
        target_name=str(path),
    )
    try:
        token = path.read_text(encoding="utf-8").strip()
    except FileNotFoundError as e:
        raise ProtocolConfigurationError(
            f"Auth token file not found: {path}",
            context=context,
            config_path=str(path),
        ) from e
    except (OSError, UnicodeDecodeError) as e:
        raise ProtocolConfigurationError(
            f"Failed to read auth token file {path}: {e}",
            context=context,
            config_path=str(path),
            error_details=str(e),
        ) from e

    if not token:
        raise ProtocolConfigurationError(
            f"Auth token file is empty: {path}",
            context=context,
            config_path=str(path),
        )
    logger.debug(
        "Loaded auth token from %s",
        path,
        extra={"path": str(path), "token_length": len(token)},
    )
    return token


def write_auth_token(path: Path, token: str) -> None:
    path.write_text(token.strip(), encoding="utf-8")
    logger.info("%s has been created", path, extra={"path": str(path)})


def prompt_auth_token(prompt: Callable[[str], str] | None = None) -> str:
    """Ask for the bearer token with hidden input."""
    ask = prompt or (lambda text: click.prompt(text, hide_input=True))
    return ask("Enter your user auth bearer token").strip()


__all__: list[str] = ["load_auth_token", "prompt_auth_token", "write_auth_token"]
