# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Node Identity Store - reads and writes the ``nodeId:hardwareId`` file.

File Format:
    One ``nodeId:hardwareId`` entry per line. Blank lines are ignored and
    surrounding whitespace is stripped. The first ``:`` separates the two
    parts, so a hardware id may itself contain ``:``: ``a:b:c`` yields
    hardware id ``b:c``, not ``b``. Hex hardware ids never contain ``:``,
    so this only matters for hand-written entries.

Entries missing either part are logged with their line number and skipped;
the remaining entries are still loaded.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from pathlib import Path

import click

from nodepulse.enums import EnumInfraTransportType
from nodepulse.errors import (
    InvalidNodeIdentityError,
    ModelInfraErrorContext,
    ProtocolConfigurationError,
)
from nodepulse.models import ModelNodeIdentity

logger = logging.getLogger(__name__)

IDENTITY_SEPARATOR = ":"
DONE_KEYWORD = "done"


def parse_identity_line(line: str, line_number: int = 0) -> ModelNodeIdentity:
    """Parse one stripped ``nodeId:hardwareId`` entry.

    Raises:
        InvalidNodeIdentityError: If the separator or either part is missing.
    """
    node_id, separator, hardware_id = line.partition(IDENTITY_SEPARATOR)
    node_id = node_id.strip()
    hardware_id = hardware_id.strip()
    if not separator or not node_id or not hardware_id:
        missing = "nodeId" if not node_id else "hardwareId"
        raise InvalidNodeIdentityError(
            f"Identity entry on line {line_number} is missing its {missing}",
            line_number=line_number,
            missing_field=missing,
        )
    return ModelNodeIdentity(node_id=node_id, hardware_id=hardware_id)


def parse_identity_lines(lines: Iterable[str]) -> list[ModelNodeIdentity]:
    """Parse identity entries in order, skipping invalid ones."""
    identities: list[ModelNodeIdentity] = []
    for line_number, raw in enumerate(lines, start=1):
        line = raw.strip()
        if not line:
            continue
        try:
            identities.append(parse_identity_line(line, line_number))
        except InvalidNodeIdentityError as e:
            logger.warning(
                "Skipping invalid identity entry: %s",
                e.message,
                extra={
                    "line_number": line_number,
                    "error_type": type(e).__name__,
                },
            )
    return identities


def load_node_identities(path: Path) -> list[ModelNodeIdentity]:
    """Load identities from ``path``.

    Raises:
        ProtocolConfigurationError: If the file is missing or unreadable.
    """
    context = ModelInfraErrorContext(
        transport_type=EnumInfraTransportType.FILESYSTEM,
        operation="load_node_identities",
        target_name=str(path),
    )
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise ProtocolConfigurationError(
            f"Node identity file not found: {path}",
            context=context,
            config_path=str(path),
        ) from e
    except (OSError, UnicodeDecodeError) as e:
        raise ProtocolConfigurationError(
            f"Failed to read node identity file {path}: {e}",
            context=context,
            config_path=str(path),
            error_details=str(e),
        ) from e

    identities = parse_identity_lines(text.splitlines())
    logger.info(
        "Loaded %d node identities from %s",
        len(identities),
        path,
        extra={"node_count": len(identities), "path": str(path)},
    )
    return identities


def write_node_identities(path: Path, entries: Sequence[str]) -> None:
    """Write raw ``nodeId:hardwareId`` entries, one per line."""
    path.write_text("\n".join(entries), encoding="utf-8")
    logger.info(
        "%s has been created with %d entries",
        path,
        len(entries),
        extra={"path": str(path), "entry_count": len(entries)},
    )


def prompt_node_identities(
    prompt: Callable[[str], str] | None = None,
    echo: Callable[[str], None] = click.echo,
) -> list[str]:
    """Interactively collect ``nodeId:hardwareId`` entries until ``done``.

    Entries without a separator are rejected and asked for again.
    """
    ask = prompt or (lambda text: click.prompt(text, prompt_suffix=": "))
    echo(
        "Enter node IDs and hardware IDs in the format nodeId:hardwareId. "
        f"Type '{DONE_KEYWORD}' to finish."
    )
    entries: list[str] = []
    while True:
        value = ask("Node ID and Hardware ID").strip()
        if value.lower() == DONE_KEYWORD:
            break
        if IDENTITY_SEPARATOR in value:
            entries.append(value)
        else:
            echo("Invalid format. Please use nodeId:hardwareId.")
    return entries


__all__: list[str] = [
    "DONE_KEYWORD",
    "IDENTITY_SEPARATOR",
    "load_node_identities",
    "parse_identity_line",
    "parse_identity_lines",
    "prompt_node_identities",
    "write_node_identities",
]
