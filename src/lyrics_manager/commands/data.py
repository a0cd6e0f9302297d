"""Data commands for lyrics-manager.

Provides CLI commands for full backups and for inspecting the library.
"""

from pathlib import Path
from typing import Optional

import typer
from rich.panel import Panel

from lyrics_manager.commands.common import console, load_config, logger, open_library
from lyrics_manager.config import get_config_path
from lyrics_manager.services.library import export_backup, import_backup

app = typer.Typer(help="Backup and library operations")

BACKUP_FILE_NAME = "Lyrics Manager.json"


@app.command("export")
def export_data(
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Backup file to write"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to config file"),
) -> None:
    """Export every song, set list and display setting to a backup file.

    Without --output the backup goes to <export_dir>/Lyrics Manager.json.
    """
    config = load_config(config_path)
    path = output or config.export_dir / BACKUP_FILE_NAME

    with open_library(config, save=False) as store:
        document = export_backup(store, path, config.display)

    console.print(
        f"[green]Exported {len(document['songs'])} songs and "
        f"{len(document['setLists'])} set lists to {path}[/green]"
    )


@app.command("import")
def import_data(
    file: Path = typer.Argument(..., help="Backup file to import"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to config file"),
) -> None:
    """Replace the whole library with a backup file.

    All current songs and set lists are discarded. Display settings in the
    backup become the new defaults.
    """
    config = load_config(config_path)

    if not yes:
        typer.confirm("This replaces every song and set list in the library. Continue?", abort=True)

    with open_library(config) as store:
        snapshot, settings = import_backup(store, file)
        if settings is not None:
            config.display = settings

    if settings is not None:
        config.save(config_path or get_config_path())
        logger.info("Display settings restored from backup")

    console.print(
        f"[green]Imported {len(snapshot.songs)} songs and {len(snapshot.set_lists)} set lists[/green]"
    )


@app.command("status")
def status(
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to config file"),
) -> None:
    """Show library status and statistics."""
    config = load_config(config_path)

    with open_library(config, save=False) as store:
        song_count = len(store.get_all_songs())
        set_lists = store.get_all_set_lists()
        exported = len(store.get_all_file_handle_references())

    library_exists = config.library_path.exists()
    console.print(
        Panel.fit(
            f"[cyan]Library:[/cyan] {config.library_path}"
            f"{'' if library_exists else ' [dim](not created yet)[/dim]'}\n"
            f"[cyan]Export Directory:[/cyan] {config.export_dir}\n"
            f"[cyan]Songs:[/cyan] {song_count}\n"
            f"[cyan]Set Lists:[/cyan] {len(set_lists)}\n"
            f"[cyan]Remembered Exports:[/cyan] {exported}",
            title="Library Status",
            border_style="green",
        )
    )
