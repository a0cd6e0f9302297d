"""Set list commands for lyrics-manager.

Provides CLI commands for building and reordering set lists and for
exchanging them as single-set-list files.
"""

from pathlib import Path
from typing import Optional

import typer
from rich.markup import escape
from rich.table import Table

from lyrics_manager.commands.common import console, format_timestamp, load_config, open_library
from lyrics_manager.services.item_files import export_set_list, import_set_list_files

app = typer.Typer(help="Set list operations")


@app.command("create")
def create_set_list(
    name: str = typer.Argument(..., help="Set list name"),
    song_ids: Optional[list[str]] = typer.Argument(None, help="Song IDs in playing order"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to config file"),
) -> None:
    """Create a set list, optionally with its initial songs."""
    config = load_config(config_path)

    with open_library(config) as store:
        known = {song.id for song in store.get_all_songs()}
        unknown = [song_id for song_id in song_ids or [] if song_id not in known]
        set_list_id = store.create_set_list(name.strip(), song_ids or [])

    console.print(f"[green]Created set list {set_list_id}[/green]")
    if unknown:
        console.print(f"[yellow]Unknown song IDs kept but not shown: {', '.join(unknown)}[/yellow]")


@app.command("list")
def list_set_lists(
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to config file"),
) -> None:
    """List set lists sorted by name."""
    config = load_config(config_path)

    with open_library(config, save=False) as store:
        rows = [
            (set_list, store.get_set_list_song_count(set_list.id))
            for set_list in sorted(store.get_all_set_lists(), key=lambda s: s.name.casefold())
        ]

    if not rows:
        console.print("[yellow]No set lists in the library.[/yellow]")
        return

    table = Table(title=f"Set Lists ({len(rows)})")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Songs", style="magenta", justify="right")
    table.add_column("Updated", style="dim")

    for set_list, count in rows:
        table.add_row(set_list.id, escape(set_list.name), str(count), format_timestamp(set_list.updated_at))

    console.print(table)


@app.command("show")
def show_set_list(
    set_list_id: str = typer.Argument(..., help="Set list ID"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to config file"),
) -> None:
    """Show a set list's songs with their positions."""
    config = load_config(config_path)

    with open_library(config, save=False) as store:
        info = store.get_set_list_song_info(set_list_id)
        songs = {song.id: song for song in store.get_songs_in_set_list(set_list_id)}

    table = Table(title=f"{escape(info.set_list.name)} ({len(info.song_positions)} songs)")
    table.add_column("#", style="magenta", justify="right")
    table.add_column("Title", style="cyan")
    table.add_column("Artist", style="green")
    table.add_column("Tempo", justify="right")
    table.add_column("ID", style="dim")

    for entry in info.song_positions:
        song = songs[entry.song_id]
        table.add_row(
            str(entry.position),
            escape(song.title),
            escape(song.artist) or "-",
            str(song.tempo),
            song.id,
        )

    console.print(table)


@app.command("add")
def add_to_set_list(
    set_list_id: str = typer.Argument(..., help="Set list ID"),
    song_id: str = typer.Argument(..., help="Song ID to append"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to config file"),
) -> None:
    """Append a song to a set list."""
    config = load_config(config_path)

    with open_library(config) as store:
        store.get_song(song_id)
        added = store.add_song_to_set_list(set_list_id, song_id)

    if added:
        console.print(f"[green]Added {song_id} to set list {set_list_id}[/green]")
    else:
        console.print(f"[yellow]Song {song_id} is already in set list {set_list_id}[/yellow]")


@app.command("remove")
def remove_from_set_list(
    set_list_id: str = typer.Argument(..., help="Set list ID"),
    song_id: str = typer.Argument(..., help="Song ID to remove"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to config file"),
) -> None:
    """Remove a song from a set list."""
    config = load_config(config_path)

    with open_library(config) as store:
        removed = store.remove_song_from_set_list(set_list_id, song_id)

    if not removed:
        console.print(f"[yellow]Song {song_id} is not in set list {set_list_id}[/yellow]")
        return
    console.print(f"[green]Removed {song_id} from set list {set_list_id}[/green]")


@app.command("move")
def move_in_set_list(
    set_list_id: str = typer.Argument(..., help="Set list ID"),
    song_id: str = typer.Argument(..., help="Song ID to move"),
    position: int = typer.Argument(..., help="New position (1-based)"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to config file"),
) -> None:
    """Move a song to a new position in a set list."""
    config = load_config(config_path)

    with open_library(config) as store:
        store.move_song_in_set_list(set_list_id, song_id, position)

    console.print(f"[green]Moved {song_id} to position {position}[/green]")


@app.command("rename")
def rename_set_list(
    set_list_id: str = typer.Argument(..., help="Set list ID"),
    name: str = typer.Argument(..., help="New name"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to config file"),
) -> None:
    """Rename a set list."""
    config = load_config(config_path)

    with open_library(config) as store:
        store.rename_set_list(set_list_id, name.strip())

    console.print(f"[green]Renamed set list {set_list_id}[/green]")


@app.command("delete")
def delete_set_list(
    set_list_id: str = typer.Argument(..., help="Set list ID"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to config file"),
) -> None:
    """Delete a set list. Its songs stay in the library."""
    config = load_config(config_path)

    with open_library(config) as store:
        set_list = store.get_set_list(set_list_id)
        if not yes:
            typer.confirm(f"Delete set list '{set_list.name}'?", abort=True)
        store.delete_set_list(set_list_id)

    console.print(f"[green]Deleted set list {set_list_id}[/green]")


@app.command("export")
def export_set_list_command(
    set_list_id: str = typer.Argument(..., help="Set list ID"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Destination file"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to config file"),
) -> None:
    """Export a set list to its own JSON file.

    Only song IDs are written; export the songs separately or use
    'data export' for a complete backup.
    """
    config = load_config(config_path)

    with open_library(config) as store:
        path = export_set_list(store, set_list_id, config.export_dir, output)

    console.print(f"[green]Exported to {path}[/green]")


@app.command("import")
def import_set_lists_command(
    files: list[Path] = typer.Argument(..., help="Set list JSON files"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to config file"),
) -> None:
    """Import set lists from set list JSON files."""
    config = load_config(config_path)

    with open_library(config) as store:
        imported = import_set_list_files(store, files)

    count = len(imported)
    console.print(f"[green]{count} set list{'s' if count != 1 else ''} imported[/green]")
