# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Unit tests for the node identity store."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from nodepulse.errors import InvalidNodeIdentityError, ProtocolConfigurationError
from nodepulse.models import ModelNodeIdentity
from nodepulse.stores import (
    load_node_identities,
    parse_identity_line,
    parse_identity_lines,
    prompt_node_identities,
    write_node_identities,
)


class TestParseIdentityLine:
    """Tests for single-entry parsing."""

    def test_valid_entry(self) -> None:
        assert parse_identity_line("node-a:hw-a") == ModelNodeIdentity(
            node_id="node-a", hardware_id="hw-a"
        )

    def test_only_first_separator_splits(self) -> None:
        identity = parse_identity_line("node-a:hw:with:colons")
        assert identity.hardware_id == "hw:with:colons"

    @pytest.mark.parametrize(
        ("line", "missing"),
        [("node-a", "hardwareId"), ("node-a:", "hardwareId"), (":hw-a", "nodeId")],
    )
    def test_missing_part_raises(self, line: str, missing: str) -> None:
        with pytest.raises(InvalidNodeIdentityError) as exc_info:
            parse_identity_line(line, line_number=4)

        assert exc_info.value.message == (
            f"Identity entry on line 4 is missing its {missing}"
        )
        assert exc_info.value.context["line_number"] == 4


class TestParseIdentityLines:
    """Tests for multi-line parsing."""

    def test_blank_lines_and_whitespace_ignored(self) -> None:
        identities = parse_identity_lines(["  node-a:hw-a  ", "", "   ", "node-b:hw-b"])
        assert [identity.node_id for identity in identities] == ["node-a", "node-b"]

    def test_invalid_entries_skipped_with_warning(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Test an invalid line is logged with its line number and skipped."""
        with caplog.at_level(logging.WARNING):
            identities = parse_identity_lines(["node-a:hw-a", "broken", "node-b:hw-b"])

        assert [identity.node_id for identity in identities] == ["node-a", "node-b"]
        (record,) = caplog.records
        assert record.line_number == 2
        assert "Skipping invalid identity entry" in record.getMessage()

    def test_duplicates_preserved_in_order(self) -> None:
        identities = parse_identity_lines(["node-a:hw-1", "node-a:hw-2"])
        assert [identity.hardware_id for identity in identities] == ["hw-1", "hw-2"]


class TestLoadAndWriteNodeIdentities:
    """Tests for file round trips."""

    def test_load_from_file(self, tmp_path: Path) -> None:
        path = tmp_path / "id.txt"
        path.write_text("node-a:hw-a\r\nnode-b:hw-b\n", encoding="utf-8")

        identities = load_node_identities(path)

        assert [identity.node_id for identity in identities] == ["node-a", "node-b"]
        assert identities[0].hardware_id == "hw-a"

    def test_missing_file_raises_configuration_error(self, tmp_path: Path) -> None:
        path = tmp_path / "missing.txt"
        with pytest.raises(ProtocolConfigurationError, match="not found") as exc_info:
            load_node_identities(path)

        assert exc_info.value.context["config_path"] == str(path)
        assert isinstance(exc_info.value.__cause__, FileNotFoundError)

    def test_directory_path_raises_configuration_error(self, tmp_path: Path) -> None:
        with pytest.raises(ProtocolConfigurationError, match="Failed to read"):
            load_node_identities(tmp_path)

    def test_write_joins_entries_with_newlines(self, tmp_path: Path) -> None:
        path = tmp_path / "id.txt"

        write_node_identities(path, ["node-a:hw-a", "node-b:hw-b"])

        assert path.read_text(encoding="utf-8") == "node-a:hw-a\nnode-b:hw-b"
        assert len(load_node_identities(path)) == 2


class TestPromptNodeIdentities:
    """Tests for interactive entry collection."""

    def test_collects_until_done_and_rejects_bad_format(self) -> None:
        answers = iter(["node-a:hw-a", "no-separator", "node-b:hw-b", "DONE"])
        echoed: list[str] = []

        entries = prompt_node_identities(
            prompt=lambda text: next(answers), echo=echoed.append
        )

        assert entries == ["node-a:hw-a", "node-b:hw-b"]
        assert "Invalid format. Please use nodeId:hardwareId." in echoed

    def test_immediate_done_returns_empty_list(self) -> None:
        entries = prompt_node_identities(prompt=lambda text: "done", echo=lambda m: None)
        assert entries == []
