# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Run Options Model.

Command-line choices for one ``nodepulse run`` invocation. Values left as
None fall back to the runtime configuration.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from nodepulse.enums import EnumIpResolutionMode


class ModelRunOptions(BaseModel):
    """Operator choices that override or complement ModelNodepulseConfig."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )

    config_path: Path | None = Field(
        default=None,
        description="YAML config file; None uses NODEPULSE_CONFIG or nodepulse.yaml",
    )
    ids_file: Path | None = Field(default=None, description="Overrides config.ids_file")
    token_file: Path | None = Field(
        default=None, description="Overrides config.token_file"
    )
    ip_mode: EnumIpResolutionMode = Field(default=EnumIpResolutionMode.PROMPT)
    manual_ip: str | None = Field(
        default=None,
        description="IPv4 literal; implies MANUAL mode when given",
    )
    interactive_setup: bool = Field(
        default=False,
        description="Create the id and token files interactively before the first run",
    )


__all__ = ["ModelRunOptions"]
