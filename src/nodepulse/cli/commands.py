"""
nodepulse CLI Commands.

Provides CLI interface for running node sessions, creating the id and
token files, and checking IP literals.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from nodepulse.enums import EnumIpResolutionMode

console = Console()


@click.group()
def cli() -> None:
    """nodepulse node session CLI."""


@cli.command("run")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="YAML config file (default: NODEPULSE_CONFIG or ./nodepulse.yaml)",
)
@click.option(
    "--ids-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="nodeId:hardwareId file (default: config ids_file)",
)
@click.option(
    "--token-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Bearer token file (default: config token_file)",
)
@click.option(
    "--ip-mode",
    type=click.Choice([mode.value for mode in EnumIpResolutionMode]),
    default=EnumIpResolutionMode.PROMPT.value,
    show_default=True,
    help="How to obtain the IP address reported to the gateway",
)
@click.option("--ip", "manual_ip", default=None, help="IPv4 literal (implies manual)")
@click.option(
    "--setup/--no-setup",
    default=False,
    show_default=True,
    help="Create the id and token files interactively before running",
)
@click.option(
    "--log-level",
    default=None,
    help="Logging level (default: NODEPULSE_LOG_LEVEL or INFO)",
)
def run_cmd(
    config_path: Path | None,
    ids_file: Path | None,
    token_file: Path | None,
    ip_mode: str,
    manual_ip: str | None,
    setup: bool,
    log_level: str | None,
) -> None:
    """Register every node and keep its session alive until interrupted."""
    from nodepulse.models import ModelRunOptions
    from nodepulse.runtime.kernel import KERNEL_VERSION, bootstrap, configure_logging

    configure_logging(log_level)
    _print_banner(KERNEL_VERSION)

    options = ModelRunOptions(
        config_path=config_path,
        ids_file=ids_file,
        token_file=token_file,
        ip_mode=EnumIpResolutionMode(ip_mode),
        manual_ip=manual_ip,
        interactive_setup=setup,
    )
    raise SystemExit(asyncio.run(bootstrap(options)))


@cli.command("setup")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="YAML config file (default: NODEPULSE_CONFIG or ./nodepulse.yaml)",
)
def setup_cmd(config_path: Path | None) -> None:
    """Create the id and token files interactively."""
    from nodepulse.errors import ProtocolConfigurationError
    from nodepulse.runtime.kernel import load_runtime_config, run_interactive_setup

    try:
        config = load_runtime_config(config_path)
    except ProtocolConfigurationError as e:
        console.print(f"[bold red]Configuration error:[/bold red] {e.message}")
        raise SystemExit(1) from e

    run_interactive_setup(config)
    console.print(
        f"[bold green]{config.ids_file} and {config.token_file} have been created.[/bold green]"
    )


@cli.command("check-ip")
@click.argument("address")
def check_ip_cmd(address: str) -> None:
    """Validate a dotted-quad IPv4 ADDRESS."""
    from nodepulse.utils import is_valid_ipv4

    if is_valid_ipv4(address.strip()):
        console.print(f"[bold green]{address}: valid IPv4 address[/bold green]")
        raise SystemExit(0)
    console.print(f"[bold red]{address}: invalid IPv4 address[/bold red]")
    raise SystemExit(1)


def _print_banner(version: str) -> None:
    """Print the startup banner with rich formatting."""
    table = Table.grid(padding=(0, 2))
    table.add_row("Version", version)
    table.add_row("Stop", "Ctrl+C")
    console.print(Panel(table, title="[bold blue]nodepulse[/bold blue]", expand=False))


if __name__ == "__main__":
    cli()
