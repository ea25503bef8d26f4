# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Unit tests for the nodepulse kernel.

Covers config loading, logging setup, session preparation and the full
bootstrap path against an httpx.MockTransport gateway.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
from pathlib import Path
from unittest.mock import patch

import httpx
import pytest

from nodepulse.enums import EnumIpResolutionMode
from nodepulse.errors import ProtocolConfigurationError
from nodepulse.models import ModelNodepulseConfig, ModelRunOptions
from nodepulse.runtime.kernel import (
    apply_run_options,
    bootstrap,
    configure_logging,
    load_runtime_config,
    prepare_session,
)
from nodepulse.services import IpResolver
from tests.helpers import ScriptedTransport, make_response, wait_until

TEST_IP = "203.0.113.7"


def _write_config(tmp_path: Path, **values: object) -> Path:
    raw: dict[str, object] = {
        "gateway_base_url": "https://gateway.test/api/v1",
        "heartbeat_interval_seconds": 0.02,
        "retry_base_delay_seconds": 0.0,
        "recovery_delay_seconds": 0.0,
        "ids_file": str(tmp_path / "id.txt"),
        "token_file": str(tmp_path / "user.txt"),
    }
    raw.update(values)
    path = tmp_path / "nodepulse.yaml"
    path.write_text(
        "\n".join(f"{key}: {json.dumps(value)}" for key, value in raw.items()),
        encoding="utf-8",
    )
    return path


def _write_session_files(tmp_path: Path) -> None:
    (tmp_path / "id.txt").write_text("node-a:hw-a\nnode-b:hw-b\n", encoding="utf-8")
    (tmp_path / "user.txt").write_text("kernel-token\n", encoding="utf-8")


class TestLoadRuntimeConfig:
    """Tests for load_runtime_config."""

    def test_loads_yaml_file(self, tmp_path: Path) -> None:
        path = _write_config(tmp_path, heartbeat_escalation_threshold=3)

        config = load_runtime_config(path)

        assert config.gateway_base_url == "https://gateway.test/api/v1"
        assert config.heartbeat_interval_seconds == 0.02
        assert config.heartbeat_escalation_threshold == 3
        assert config.ids_file == tmp_path / "id.txt"

    def test_config_path_from_environment(self, tmp_path: Path) -> None:
        path = _write_config(tmp_path)

        with patch.dict(os.environ, {"NODEPULSE_CONFIG": str(path)}, clear=True):
            config = load_runtime_config()

        assert config.heartbeat_interval_seconds == 0.02

    def test_missing_file_uses_environment(self, tmp_path: Path) -> None:
        env = {
            "NODEPULSE_GATEWAY_BASE_URL": "https://env.test/api",
            "NODEPULSE_HEARTBEAT_INTERVAL": "15",
            "NODEPULSE_RETRY_MAX_RETRIES": "5",
            "NODEPULSE_IDS_FILE": "nodes.txt",
        }
        with patch.dict(os.environ, env, clear=True):
            config = load_runtime_config(tmp_path / "absent.yaml")

        assert config.gateway_base_url == "https://env.test/api"
        assert config.heartbeat_interval_seconds == 15.0
        assert config.retry_max_retries == 5
        assert config.ids_file == Path("nodes.txt")

    def test_missing_file_and_empty_environment_uses_defaults(
        self, tmp_path: Path
    ) -> None:
        with patch.dict(os.environ, {}, clear=True):
            config = load_runtime_config(tmp_path / "absent.yaml")

        assert config == ModelNodepulseConfig()

    def test_empty_file_uses_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "nodepulse.yaml"
        path.write_text("", encoding="utf-8")

        assert load_runtime_config(path) == ModelNodepulseConfig()

    def test_invalid_yaml_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "nodepulse.yaml"
        path.write_text("gateway_base_url: [unclosed", encoding="utf-8")

        with pytest.raises(ProtocolConfigurationError, match="Failed to parse"):
            load_runtime_config(path)

    def test_non_mapping_yaml_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "nodepulse.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")

        with pytest.raises(ProtocolConfigurationError, match="must be a mapping"):
            load_runtime_config(path)

    def test_unknown_key_raises_with_summary(self, tmp_path: Path) -> None:
        path = _write_config(tmp_path, heartbeat=5)

        with pytest.raises(ProtocolConfigurationError) as exc_info:
            load_runtime_config(path)

        assert "validation failed" in exc_info.value.message
        assert "heartbeat" in exc_info.value.message
        assert exc_info.value.context["error_count"] == 1

    def test_binary_file_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "nodepulse.yaml"
        path.write_bytes(b"\xff\xfe\x00\x80")

        with pytest.raises(ProtocolConfigurationError, match="non-UTF-8"):
            load_runtime_config(path)

    def test_invalid_environment_value_raises(self, tmp_path: Path) -> None:
        with patch.dict(
            os.environ, {"NODEPULSE_HEARTBEAT_INTERVAL": "soon"}, clear=True
        ):
            with pytest.raises(ProtocolConfigurationError, match="expected numeric"):
                load_runtime_config(tmp_path / "absent.yaml")

    def test_invalid_environment_url_raises(self, tmp_path: Path) -> None:
        with patch.dict(
            os.environ, {"NODEPULSE_GATEWAY_BASE_URL": "gateway.test"}, clear=True
        ):
            with pytest.raises(ProtocolConfigurationError, match="from environment"):
                load_runtime_config(tmp_path / "absent.yaml")


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_invalid_level_falls_back_to_info(
        self, capsys: pytest.CaptureFixture[str]
    ) -> None:
        with patch("nodepulse.runtime.kernel.logging.basicConfig") as basic_config:
            configure_logging("LOUD")

        assert basic_config.call_args.kwargs["level"] == logging.INFO
        assert "Invalid log level 'LOUD'" in capsys.readouterr().err

    def test_level_from_environment(self) -> None:
        with patch.dict(os.environ, {"NODEPULSE_LOG_LEVEL": "debug"}, clear=True):
            with patch("nodepulse.runtime.kernel.logging.basicConfig") as basic_config:
                configure_logging()

        assert basic_config.call_args.kwargs["level"] == logging.DEBUG
        assert "%(name)s" in basic_config.call_args.kwargs["format"]


class TestApplyRunOptions:
    """Tests for apply_run_options."""

    def test_overrides_file_paths(self) -> None:
        config = ModelNodepulseConfig()
        options = ModelRunOptions(ids_file=Path("a.txt"), token_file=Path("b.txt"))

        updated = apply_run_options(config, options)

        assert updated.ids_file == Path("a.txt")
        assert updated.token_file == Path("b.txt")
        assert config.ids_file == Path("id.txt")

    def test_no_overrides_returns_same_config(self) -> None:
        config = ModelNodepulseConfig()
        assert apply_run_options(config, ModelRunOptions()) is config


class TestPrepareSession:
    """Tests for prepare_session."""

    @pytest.mark.asyncio
    async def test_loads_files_and_resolves_manual_ip(self, tmp_path: Path) -> None:
        _write_session_files(tmp_path)
        config = load_runtime_config(_write_config(tmp_path))

        identities, credentials = await prepare_session(
            config,
            ScriptedTransport(),
            EnumIpResolutionMode.PROMPT,
            manual_ip=TEST_IP,
        )

        assert [identity.node_id for identity in identities] == ["node-a", "node-b"]
        assert credentials.ip_address == TEST_IP
        assert credentials.auth_token == "kernel-token"

    @pytest.mark.asyncio
    async def test_service_mode_uses_configured_lookup_url(
        self, tmp_path: Path
    ) -> None:
        _write_session_files(tmp_path)
        config = load_runtime_config(
            _write_config(tmp_path, ip_service_url="https://ip.test/lookup")
        )
        transport = ScriptedTransport()
        transport.script("/lookup", make_response({"ip": "198.51.100.4"}))

        _, credentials = await prepare_session(
            config, transport, EnumIpResolutionMode.SERVICE
        )

        assert credentials.ip_address == "198.51.100.4"
        assert transport.requests[0].url == "https://ip.test/lookup"

    @pytest.mark.asyncio
    async def test_custom_resolver_is_used(self, tmp_path: Path) -> None:
        _write_session_files(tmp_path)
        config = load_runtime_config(_write_config(tmp_path))
        transport = ScriptedTransport()
        resolver = IpResolver(transport, local_probe=lambda: "10.1.1.1")

        _, credentials = await prepare_session(
            config, transport, EnumIpResolutionMode.LOCAL, resolver=resolver
        )

        assert credentials.ip_address == "10.1.1.1"

    @pytest.mark.asyncio
    async def test_file_without_valid_identities_raises(self, tmp_path: Path) -> None:
        _write_session_files(tmp_path)
        (tmp_path / "id.txt").write_text("broken\n", encoding="utf-8")
        config = load_runtime_config(_write_config(tmp_path))

        with pytest.raises(ProtocolConfigurationError, match="No valid node identities"):
            await prepare_session(
                config, ScriptedTransport(), EnumIpResolutionMode.MANUAL, TEST_IP
            )

    @pytest.mark.asyncio
    async def test_missing_token_file_raises(self, tmp_path: Path) -> None:
        _write_session_files(tmp_path)
        (tmp_path / "user.txt").unlink()
        config = load_runtime_config(_write_config(tmp_path))

        with pytest.raises(ProtocolConfigurationError, match="Auth token file"):
            await prepare_session(
                config, ScriptedTransport(), EnumIpResolutionMode.MANUAL, TEST_IP
            )


class GatewayStub:
    """httpx handler recording requests and answering like the gateway."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path.endswith("/ping"):
            return httpx.Response(200, json={"status": "ok", "isB7SConnected": True})
        return httpx.Response(200, json={"ok": True})

    def pings(self, node_id: str) -> int:
        return sum(
            1
            for request in self.requests
            if request.url.path.endswith(f"/nodes/{node_id}/ping")
        )


class TestBootstrap:
    """End-to-end tests for bootstrap."""

    @pytest.mark.asyncio
    async def test_runs_until_shutdown_and_exits_zero(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        _write_session_files(tmp_path)
        stub = GatewayStub()
        shutdown = asyncio.Event()
        options = ModelRunOptions(
            config_path=_write_config(tmp_path), manual_ip=TEST_IP
        )

        with caplog.at_level(logging.INFO):
            task = asyncio.create_task(
                bootstrap(
                    options,
                    shutdown_event=shutdown,
                    install_signal_handlers=False,
                    http_transport=httpx.MockTransport(stub),
                )
            )
            await wait_until(
                lambda: stub.pings("node-a") >= 2 and stub.pings("node-b") >= 2
            )
            shutdown.set()
            exit_code = await asyncio.wait_for(task, timeout=2.0)

        assert exit_code == 0
        register = next(
            request
            for request in stub.requests
            if request.url.path.endswith("/nodes/node-a")
        )
        assert register.headers["Authorization"] == "Bearer kernel-token"
        assert json.loads(register.content) == {
            "ipAddress": TEST_IP,
            "hardwareId": "hw-a",
        }
        assert "Final node states" in caplog.text
        assert "kernel-token" not in caplog.text

    @pytest.mark.asyncio
    async def test_missing_ids_file_exits_one(self, tmp_path: Path) -> None:
        """Test a setup error survives the restart and ends with exit code 1."""
        (tmp_path / "user.txt").write_text("kernel-token", encoding="utf-8")
        options = ModelRunOptions(
            config_path=_write_config(tmp_path), manual_ip=TEST_IP
        )

        exit_code = await bootstrap(
            options,
            install_signal_handlers=False,
            http_transport=httpx.MockTransport(GatewayStub()),
        )

        assert exit_code == 1

    @pytest.mark.asyncio
    async def test_invalid_config_exits_one(self, tmp_path: Path) -> None:
        path = tmp_path / "nodepulse.yaml"
        path.write_text("heartbeat_interval_seconds: -1\n", encoding="utf-8")

        exit_code = await bootstrap(
            ModelRunOptions(config_path=path), install_signal_handlers=False
        )

        assert exit_code == 1

    @pytest.mark.asyncio
    async def test_interactive_setup_creates_files(self, tmp_path: Path) -> None:
        stub = GatewayStub()
        shutdown = asyncio.Event()
        options = ModelRunOptions(
            config_path=_write_config(tmp_path),
            manual_ip=TEST_IP,
            interactive_setup=True,
        )

        with (
            patch(
                "nodepulse.runtime.kernel.prompt_node_identities",
                return_value=["node-a:hw-a"],
            ),
            patch(
                "nodepulse.runtime.kernel.prompt_auth_token",
                return_value="typed-token",
            ),
        ):
            task = asyncio.create_task(
                bootstrap(
                    options,
                    shutdown_event=shutdown,
                    install_signal_handlers=False,
                    http_transport=httpx.MockTransport(stub),
                )
            )
            await wait_until(lambda: stub.pings("node-a") >= 1)
            shutdown.set()
            exit_code = await asyncio.wait_for(task, timeout=2.0)

        assert exit_code == 0
        assert (tmp_path / "id.txt").read_text(encoding="utf-8") == "node-a:hw-a"
        assert (tmp_path / "user.txt").read_text(encoding="utf-8") == "typed-token"
