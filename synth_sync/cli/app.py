"""
Defines the command-line interface for the application using Typer.
"""

import asyncio
import logging
import os
import shutil
import time
from pathlib import Path
from typing import Callable, Optional, Sequence

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from synth_sync import __version__
from synth_sync.api.client import CatalogClient
from synth_sync.core.sync_manager import SyncManager
from synth_sync.device.adb import AdbBridge
from synth_sync.exceptions import DeviceError, SynthSyncError
from synth_sync.media import close_connection_pool
from synth_sync.models.config import SyncConfig
from synth_sync.models.device import Device
from synth_sync.models.stats import SyncStats
from synth_sync.storage.config_manager import ConfigManager

from .formatters import (
    print_config,
    print_devices,
    print_summary_panel,
    print_validation_table,
)
from .progress_manager import ProgressManager

console = Console()

logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[
        RichHandler(
            console=console,
            rich_tracebacks=True,
            show_path=False,
            show_level=False,
            markup=True,
        )
    ],
)
log = logging.getLogger("synth_sync")

app = typer.Typer(
    name="synth-sync",
    help=(
        "Sync SynthRiders custom songs from synthriderz.com to a connected"
        " device over adb. Run without a command to start an interactive sync."
    ),
    rich_markup_mode="rich",
    pretty_exceptions_show_locals=False,
    add_completion=False,
)


def get_config_dir() -> Path:
    if os.name == "nt":
        base_dir = Path(os.getenv("APPDATA", "~\\AppData\\Roaming"))
    else:
        base_dir = Path(os.getenv("XDG_CONFIG_HOME", "~/.config"))
    return base_dir.expanduser() / "synth-sync"


CONFIG_DIR = get_config_dir()
CONFIG_FILE = CONFIG_DIR / "config.ini"


def _prompt_choice() -> str:
    return console.input("Enter the number of the device you want to select: ")


def select_device(
    devices: Sequence[Device], read_choice: Optional[Callable[[], str]] = None
) -> Device:
    """
    Prints the numbered device list and returns the device the user picks.

    There is no re-prompt: an empty list or an invalid answer raises DeviceError.
    """
    if not devices:
        raise DeviceError("no devices found")

    print_devices(console, devices)
    try:
        answer = (read_choice or _prompt_choice)().strip()
    except EOFError:
        raise DeviceError("invalid choice: no input") from None
    try:
        choice = int(answer)
    except ValueError:
        raise DeviceError(f"invalid choice: {answer!r}") from None
    if choice < 1 or choice > len(devices):
        raise DeviceError(f"invalid choice: {choice} (expected 1-{len(devices)})")
    return devices[choice - 1]


def resolve_device(bridge: AdbBridge, serial: Optional[str]) -> Device:
    """Finds the device to sync, by serial when given, otherwise interactively."""
    devices = bridge.list_devices()
    if serial:
        for device in devices:
            if device.serial == serial:
                return device
        raise DeviceError(f"device '{serial}' is not connected or not authorized")
    return select_device(devices)


async def _sync_async(config: SyncConfig, bridge: AdbBridge) -> SyncStats:
    async with ProgressManager(console=console, dry_run=config.dry_run) as progress:
        try:
            async with CatalogClient(
                config.api_endpoint,
                request_timeout=config.request_timeout,
                max_connections=config.max_concurrent_pages,
            ) as client:
                manager = SyncManager(
                    config, client, bridge, progress_manager=progress, console=console
                )
                return await manager.execute_sync()
        finally:
            await close_connection_pool()


def run_sync(
    device: Optional[str] = None,
    dry_run: bool = False,
    dedupe: Optional[bool] = None,
    workers: Optional[int] = None,
) -> None:
    """Runs one interactive sync session."""
    cli_options = {
        key: value
        for key, value in {
            "dry_run": dry_run,
            "dedupe_missing": dedupe,
            "max_concurrent_pages": workers,
        }.items()
        if value is not None
    }
    config = ConfigManager(CONFIG_FILE).load_config(cli_options)

    bridge = AdbBridge(adb_path=config.adb_path, port=config.adb_port)
    bridge.ensure_server()

    selected = resolve_device(bridge, device)
    console.print(
        f"You selected device with Serial: [bold]{escape(selected.serial)}[/bold]"
        f" [dim]({escape(selected.model)})[/dim]"
    )

    if config.dry_run:
        console.print("[bold cyan]🔍 Starting dry run...[/bold cyan]")
    else:
        console.print("[bold cyan]🎵 Starting sync session...[/bold cyan]")

    Path(config.resolved_temp_dir).mkdir(parents=True, exist_ok=True)
    start_time = time.monotonic()
    stats = asyncio.run(_sync_async(config, bridge.for_device(selected.serial)))
    print_summary_panel(console, stats, time.monotonic() - start_time)


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase logging verbosity (show debug output).",
    ),
    version: bool = typer.Option(
        False, "--version", help="Show version and exit.", is_eager=True
    ),
    show_config: bool = typer.Option(
        False, "--show-config", help="Display the current configuration."
    ),
):
    """SynthRiders custom song sync"""
    if version:
        console.print(f"[bold]synth-sync[/bold] version [cyan]{__version__}[/cyan]")
        raise typer.Exit()

    log_level = "DEBUG" if verbose >= 1 else "INFO"
    logging.getLogger("synth_sync").setLevel(log_level)

    if show_config:
        config_manager = ConfigManager(CONFIG_FILE)
        if not CONFIG_FILE.is_file():
            console.print(
                "[yellow]No config file found; showing defaults.[/yellow] Run"
                " [cyan]synth-sync init[/cyan] to create one."
            )
        print_config(console, CONFIG_FILE, config_manager.get_config_as_dict())
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        run_sync()


@app.command(name="sync")
def sync_command(
    device: Optional[str] = typer.Option(
        None,
        "--device",
        "-d",
        help="Serial of the device to sync. Skips the selection prompt.",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Show what would be synced without downloading or pushing anything.",
    ),
    dedupe: Optional[bool] = typer.Option(
        None,
        "--dedupe/--no-dedupe",
        help="Sync a beatmap listed several times in the catalog only once.",
    ),
    workers: Optional[int] = typer.Option(
        None,
        "-w",
        "--workers",
        help="Number of catalog pages fetched concurrently (overrides config).",
    ),
):
    """Download and push every catalog beatmap missing from the device."""
    run_sync(device=device, dry_run=dry_run, dedupe=dedupe, workers=workers)


@app.command()
def devices():
    """List connected devices."""
    config = ConfigManager(CONFIG_FILE).load_config()
    bridge = AdbBridge(adb_path=config.adb_path, port=config.adb_port)
    bridge.ensure_server()
    found = bridge.list_devices()
    if not found:
        console.print("[yellow]No devices found.[/yellow]")
        raise typer.Exit(code=1)
    print_devices(console, found)


@app.command()
def init(
    force: bool = typer.Option(
        False, "--force", "-f", help="Overwrite an existing configuration file."
    ),
):
    """Write a configuration file with the default settings."""
    if (
        CONFIG_FILE.exists()
        and not force
        and not typer.confirm("Configuration file already exists. Overwrite it?")
    ):
        raise typer.Abort()

    ConfigManager(CONFIG_FILE).save_new_config()
    console.print(f"[bold green]✓ Configuration saved to '{CONFIG_FILE}'[/bold green]")


@app.command()
def validate():
    """Validate the current configuration."""
    try:
        config = ConfigManager(CONFIG_FILE).load_config()
    except SynthSyncError as e:
        console.print(f"[red]✗ Configuration is invalid: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e
    print_validation_table(console, config)


@app.command()
def diagnose():
    """Diagnose common configuration, adb and connectivity issues."""
    console.print("\n[bold cyan]Running diagnostics...[/bold cyan]\n")
    issues_found = False

    try:
        config = ConfigManager(CONFIG_FILE).load_config()
        console.print("[green]✓[/] Configuration is valid.")
    except SynthSyncError as e:
        console.print(f"[red]✗ Configuration validation failed: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e

    if shutil.which(config.adb_path):
        console.print(f"[green]✓[/] adb found at [dim]{shutil.which(config.adb_path)}[/dim]")
    else:
        console.print(f"[red]✗ '{escape(config.adb_path)}' not found on PATH.[/red]")
        issues_found = True

    bridge = AdbBridge(adb_path=config.adb_path, port=config.adb_port)
    if bridge.is_server_running():
        console.print(f"[green]✓[/] ADB server is listening on port {config.adb_port}.")
    else:
        console.print(
            f"[yellow]○ ADB server is not running on port {config.adb_port}"
            " (it is started automatically by sync).[/yellow]"
        )

    console.print("\n[dim]Testing connectivity to the beatmap catalog...[/dim]")

    async def test_connection() -> bool:
        async with CatalogClient(
            config.api_endpoint, request_timeout=config.request_timeout
        ) as client:
            try:
                page = await client.fetch_page(1)
            except SynthSyncError as e:
                console.print(f"[red]✗ Catalog check failed: {escape(str(e))}[/red]")
                return False
        console.print(
            f"[green]✓[/] Catalog reachable: {page.total_count} beatmaps in"
            f" {page.page_count} pages."
        )
        return True

    if not asyncio.run(test_connection()):
        issues_found = True

    console.print()
    if not issues_found:
        console.print(
            "[bold green]✓ All checks passed! Your setup looks good.[/bold green]\n"
        )
    else:
        console.print(
            "[bold red]✗ Some issues were found. "
            "Please review the messages above.[/bold red]\n"
        )
        raise typer.Exit(code=1)
