"""
CLI module - Command line interface for Tree Backup

Entry point for the `tbk` command using Typer.
"""

import logging
import sys
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from . import __version__
from .config import AppConfig, load_config, validate_paths
from .errors import InvalidBackupType
from .models import BackupConfig, BackupReport
from .naming import generate_backup_name, is_valid_backup_name
from .runners import RunnerCallbacks, SequentialRunner
from .scanner import scan_tree

console = Console()
app = typer.Typer(
    name="tbk",
    help="Tree Backup - mirror a directory tree with permissions and a run report.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def version_callback(value: bool):
    if value:
        console.print(f"tbk version {__version__}")
        raise typer.Exit()


ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", "-c", help="Path to config file", exists=True, dir_okay=False),
]


@app.callback()
def main(
    version: Annotated[
        bool, typer.Option("--version", "-v", callback=version_callback, is_eager=True, help="Show version")
    ] = False,
):
    """Tree Backup - mirror a directory tree with permissions and a run report."""
    pass


def _setup_logging(level: str, verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else getattr(logging, level.upper(), logging.INFO),
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )


def _load_config_or_exit(config: Path | None) -> AppConfig:
    try:
        return load_config(config)
    except ValueError as e:
        console.print(f"[red]Config error:[/red] {escape(str(e))}")
        raise typer.Exit(1) from None


def format_size(size: int) -> str:
    """Format a byte count as a human-readable string."""
    if size < 1024:
        return f"{size} B"
    value = size / 1024
    for unit in ("KB", "MB"):
        if value < 1024:
            return f"{value:.1f} {unit}"
        value /= 1024
    return f"{value:.1f} GB"


def print_report(report: BackupReport):
    """Render a finished report as a table."""
    title = "Backup Report (dry run)" if report.dry_run else "Backup Report"
    table = Table(title=title)
    table.add_column("Metric", style="cyan")
    table.add_column("Value")

    status = "[green]Success[/green]" if report.success else "[red]Failed[/red]"
    table.add_row("Status", status)
    table.add_row("Source", str(report.source_path))
    table.add_row("Destination", str(report.destination_path))
    table.add_row("Files Backed Up", str(report.files_backed_up))
    table.add_row("Total Size", f"{report.total_size_bytes} bytes ({format_size(report.total_size_bytes)})")
    table.add_row("Duration", report.duration_display)
    table.add_row("Timestamp", report.timestamp_display)
    if report.error_message:
        table.add_row("Error", f"[red]{report.error_message}[/red]")

    console.print(table)

    if len(report.errors) > 1:
        console.print("\n[yellow]All errors:[/yellow]")
        for err in report.errors:
            console.print(f"  {err}")


@app.command()
def run(
    source: Annotated[Path | None, typer.Argument(help="Directory to back up")] = None,
    destination: Annotated[Path | None, typer.Argument(help="Directory to mirror the tree into")] = None,
    backup_type: Annotated[str | None, typer.Option("--type", "-t", help="Backup type: full or incremental")] = None,
    dry_run: Annotated[bool, typer.Option("--dry-run", help="Show what would be copied without writing")] = False,
    atomic: Annotated[bool, typer.Option("--atomic", help="Write to a temp name, rename on success")] = False,
    verbose: Annotated[bool, typer.Option("--verbose", help="Log every file")] = False,
    config: ConfigOption = None,
):
    """
    Back up SOURCE into DEST, preserving relative paths and permission bits.

    SOURCE and DEST fall back to the config file or TBK_SOURCE / TBK_DESTINATION.
    The copy stops at the first file that fails; the report says which.

    [bold]Examples:[/bold]

        tbk run ~/projects /mnt/backup/projects

        tbk run ./data ./data_backup --dry-run
    """
    cfg = _load_config_or_exit(config)
    _setup_logging(cfg.logging.level, verbose)

    try:
        backup_config: BackupConfig = cfg.to_backup_config(
            source=source,
            destination=destination,
            backup_type=backup_type,
            dry_run=dry_run,
            atomic_writes=True if atomic else None,
        )
    except (ValueError, InvalidBackupType) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from None

    def on_run_start(bc: BackupConfig):
        console.print(f"\n[bold]Backing up:[/bold] {bc.source_path}")
        console.print(f"  Into:     {bc.destination_path}")
        console.print(f"  Type:     {bc.backup_type.value}")
        console.print()

    def on_scan_complete(files: int, skipped: int):
        skipped_str = f" ({skipped} entries skipped)" if skipped else ""
        console.print(f"  Found {files} files{skipped_str}")

    progress_interval = 1

    def on_file_start(path: Path, idx: int, total: int):
        nonlocal progress_interval
        if idx == 1:
            progress_interval = max(1, total // 20)  # Report every 5%

    def on_file_complete(path: Path, size: int, idx: int, total: int):
        if idx % progress_interval == 0 or idx == total:
            pct = idx / total * 100
            console.print(f"    [{idx}/{total}] {pct:.0f}% copied...")

    def on_error(stage, message: str):
        console.print(f"  [red]✗[/red] {message}")

    callbacks = RunnerCallbacks(
        on_run_start=on_run_start,
        on_scan_complete=on_scan_complete,
        on_file_start=on_file_start,
        on_file_complete=on_file_complete,
        on_error=on_error,
    )

    report = SequentialRunner().run(backup_config, callbacks)

    console.print()
    print_report(report)

    if not report.success:
        raise typer.Exit(1)


@app.command()
def scan(
    source: Annotated[Path, typer.Argument(help="Directory to scan", exists=True, file_okay=False)],
):
    """Show how many files a backup of SOURCE would copy."""
    result = scan_tree(source)

    table = Table(title=f"Scan: {source.name}")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Path", str(result.root))
    table.add_row("Files", str(result.total_files))
    table.add_row("Total Size", format_size(result.total_size_bytes))
    table.add_row("Skipped", str(len(result.skipped)))

    console.print(table)

    for entry in result.skipped:
        console.print(f"  [yellow]SKIP:[/yellow] {entry.path} ({entry.reason})")


@app.command()
def check(config: ConfigOption = None):
    """Show the configured paths and whether a run could start with them."""
    cfg = _load_config_or_exit(config)

    table = Table(title="Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    table.add_row("Source", str(cfg.paths.source) if cfg.paths.source else "[dim]-[/dim]")
    table.add_row("Destination", str(cfg.paths.destination) if cfg.paths.destination else "[dim]-[/dim]")
    table.add_row("Type", cfg.backup.type)
    table.add_row("Atomic Writes", "yes" if cfg.backup.atomic_writes else "no")
    table.add_row("Log Level", cfg.logging.level)

    console.print(table)

    errors = validate_paths(cfg)
    if errors:
        for err in errors:
            console.print(f"[red]✗[/red] {err}")
        raise typer.Exit(1)

    console.print("[green]✓[/green] Ready")


@app.command()
def name(
    backup_type: Annotated[str, typer.Argument(help="Backup type: full or incremental")] = "full",
):
    """Print an archive name for BACKUP_TYPE stamped with the current time."""
    backup_name = generate_backup_name(backup_type)
    if not is_valid_backup_name(backup_name):
        console.print(f"[red]Error:[/red] {backup_name}: {backup_type}")
        raise typer.Exit(1)
    console.print(backup_name)


def main_cli():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main_cli()
