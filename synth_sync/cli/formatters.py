"""
Functions for formatting and displaying data in the console using Rich.
"""

from pathlib import Path
from typing import Any, Sequence

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from synth_sync.models.catalog import CatalogEntry
from synth_sync.models.config import SyncConfig
from synth_sync.models.device import Device
from synth_sync.models.stats import SyncStats
from synth_sync.utils.formatting import format_duration, format_size, truncate_middle

MISSING_PREVIEW_LIMIT = 25


def format_error_with_suggestions(
    error: Exception, context: dict | None = None
) -> Panel:
    """Formats an error with actionable suggestions into a Rich Panel."""
    error_type = type(error).__name__
    error_msg = str(error)

    suggestions_map = {
        "NetworkError": [
            "• Check your internet connection.",
            "• synthriderz.com might be temporarily unavailable.",
            "• Raise `request_timeout` in the configuration for slow links.",
        ],
        "DecodeError": [
            "• The catalog API returned an unexpected response.",
            "• Verify `api_endpoint` in the configuration.",
        ],
        "DeviceError": [
            "• Make sure the headset is connected and USB debugging is allowed.",
            "• Run `adb devices` to check that the device is listed as 'device'.",
            "• Install Android platform-tools or set `adb_path`.",
        ],
        "ConfigurationError": [
            "• Run `synth-sync validate` to inspect your settings.",
            "• Run `synth-sync init --force` to restore the defaults.",
        ],
    }

    suggestions = suggestions_map.get(
        error_type, ["• Run the command with -v for detailed logs."]
    )

    error_text = Text()
    error_text.append(f"{error_type}: ", style="bold red")
    error_text.append(error_msg)

    suggestion_text = Text("\n".join(suggestions))

    content = Table.grid(padding=(1, 0))
    content.add_row(error_text)
    content.add_row()
    content.add_row(Text("Suggestions", style="bold yellow"))
    content.add_row(suggestion_text)

    if context:
        content.add_row()
        content.add_row(Text(f"Context: {context}", style="dim"))

    return Panel(
        content,
        title="[bold red]An Error Occurred[/bold red]",
        border_style="red",
        expand=False,
    )


def print_devices(console: Console, devices: Sequence[Device]) -> None:
    """Prints the numbered device list used by the selection prompt."""
    table = Table(title="Available devices", box=box.SIMPLE_HEAD)
    table.add_column("#", justify="right", style="bold cyan")
    table.add_column("Serial")
    table.add_column("Model", style="green")
    for i, device in enumerate(devices, 1):
        table.add_row(str(i), escape(device.serial), escape(device.model))
    console.print(table)


def print_missing_table(console: Console, missing: Sequence[CatalogEntry]) -> None:
    """Lists the beatmaps about to be synced, capped for very long lists."""
    if not missing:
        return
    table = Table(
        title=f"Missing {len(missing)} beatmaps on device", box=box.SIMPLE_HEAD
    )
    table.add_column("Filename", style="cyan")
    table.add_column("Download URL", style="dim")
    for entry in missing[:MISSING_PREVIEW_LIMIT]:
        table.add_row(
            escape(truncate_middle(entry.name, 60)),
            escape(truncate_middle(entry.download_locator, 50)),
        )
    console.print(table)
    if len(missing) > MISSING_PREVIEW_LIMIT:
        console.print(
            f"[dim]... and {len(missing) - MISSING_PREVIEW_LIMIT} more "
            "(use -v to list all).[/dim]"
        )


def print_config(console: Console, config_path: Path, config_data: dict[str, Any]):
    """Displays the current configuration."""
    content = ""
    for key, value in config_data.items():
        content += f"{key} = {value}\n"

    console.print(
        Panel(
            escape(content.strip()),
            title=f"Configuration ([dim]{escape(str(config_path))}[/dim])",
            border_style="cyan",
        )
    )


def print_validation_table(console: Console, config: SyncConfig):
    """Displays a summary of the current settings."""
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold cyan")
    table.add_column()

    table.add_row("Catalog:", escape(config.api_endpoint))
    table.add_row("Download Host:", escape(config.download_host))
    table.add_row("Request Timeout:", f"{config.request_timeout:g}s")
    table.add_row("Page Concurrency:", str(config.max_concurrent_pages))
    table.add_row("Device Folder:", escape(config.remote_dir))
    table.add_row("Temp Folder:", f"[dim]{escape(config.resolved_temp_dir)}[/dim]")
    table.add_row("adb:", f"{escape(config.adb_path)} (port {config.adb_port})")
    table.add_row(
        "Dedupe Missing:", "✓ Enabled" if config.dedupe_missing else "✗ Disabled"
    )

    console.print(
        Panel(
            table,
            title="[bold green]✓ Validated Settings[/bold green]",
            border_style="green",
        )
    )


def print_summary_panel(console: Console, stats: SyncStats, duration_s: float):
    """Displays the final summary of the sync session."""
    stats_table = Table(show_header=False, box=None, padding=(0, 2))
    stats_table.add_column(style="bold cyan", justify="right", width=20)
    stats_table.add_column(style="white", justify="left")

    stats_table.add_row("On Device:", str(stats.device_files))
    stats_table.add_row(
        "Catalog:",
        f"{stats.catalog_entries} beatmaps in {stats.catalog_pages} pages "
        f"[dim]({stats.catalog_fetch_seconds:.2f}s)[/dim]",
    )
    stats_table.add_row("Missing:", f"[yellow]{stats.missing}[/yellow]")
    stats_table.add_row("", "")

    if stats.dry_run:
        stats_table.add_row("Would Sync:", f"[cyan]{stats.missing}[/cyan]")
    else:
        stats_table.add_row("✓ Synced:", f"[bold green]{stats.synced}[/bold green]")
        if stats.failed > 0:
            stats_table.add_row("✗ Failed:", f"[bold red]{stats.failed}[/bold red]")
        if stats.cleanup_warnings:
            stats_table.add_row(
                "⚠ Temp Files Left:",
                f"[yellow]{len(stats.cleanup_warnings)}[/yellow]",
            )
        stats_table.add_row(
            "Total Size:", f"[cyan]{format_size(stats.bytes_downloaded)}[/cyan]"
        )

    stats_table.add_row("Time Elapsed:", f"[blue]{format_duration(duration_s)}[/blue]")

    if stats.dry_run:
        title = "🔍 [bold]Dry Run Summary[/bold]"
        border_color = "yellow"
    elif stats.failed:
        title = "⚠ [bold]Sync Finished With Errors[/bold]"
        border_color = "red"
    else:
        title = "🎵 [bold]Sync Complete![/bold]"
        border_color = "green"

    console.print()
    console.print(
        Panel(
            stats_table,
            title=title,
            border_style=border_color,
            box=box.DOUBLE,
            expand=False,
            padding=(1, 2),
        )
    )
    console.print()
