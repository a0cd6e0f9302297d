"""Main entry point for the lyrics-manager CLI.

Provides a Typer-based CLI for managing a library of lyric sheets and the
set lists built from them.
"""

from pathlib import Path
from typing import Optional

import tomllib
import typer
from rich.console import Console
from rich.panel import Panel

from lyrics_manager import __version__
from lyrics_manager.commands import data as data_commands
from lyrics_manager.commands import setlists as setlist_commands
from lyrics_manager.commands import songs as song_commands

console = Console()

# Create the main Typer app
app = typer.Typer(
    name="lyrics-manager",
    help="Lyrics and set list manager",
    rich_markup_mode="rich",
)

# Add subcommand groups
app.add_typer(song_commands.app, name="song", help="Song operations")
app.add_typer(setlist_commands.app, name="setlist", help="Set list operations")
app.add_typer(data_commands.app, name="data", help="Backup and library operations")


def version_callback(value: bool) -> None:
    """Callback for --version flag."""
    if value:
        console.print(f"lyrics-manager version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """lyrics-manager: Lyrics and set lists for live performance.

    Keep songs with their display settings, arrange them into set lists,
    and move everything between machines as JSON files.

    ## Commands

    * [bold cyan]song[/bold cyan] - Song operations (add, edit, list, show, delete, export, import)
    * [bold cyan]setlist[/bold cyan] - Set list operations (create, add, move, show, export, ...)
    * [bold cyan]data[/bold cyan] - Backup and library operations (export, import, status)

    ## Getting Started

    1. Add a song:
       [dim]$ lyrics-manager song add "Amazing Grace" --lyrics-file grace.txt[/dim]

    2. Build a set list:
       [dim]$ lyrics-manager setlist create "Sunday" SONG_ID ...[/dim]

    3. Back up the library:
       [dim]$ lyrics-manager data export[/dim]
    """
    pass


@app.command()
def config(
    action: str = typer.Argument(
        ...,
        help="Action to perform (show, get, set, path)",
    ),
    key: str = typer.Argument(
        None,
        help="Configuration key (for get and set actions)",
    ),
    value: str = typer.Argument(
        None,
        help="Configuration value (for set action)",
    ),
    config_path: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to config file",
    ),
) -> None:
    """Manage configuration.

    Show, read, or set values, or display the path to the configuration file.

    Examples:
        lyrics-manager config show          # Show all configuration
        lyrics-manager config get display.default_tempo
        lyrics-manager config set display.default_tempo 96
        lyrics-manager config path          # Show config file path
    """
    from lyrics_manager.config import DisplaySettings, LibraryConfig, ensure_config_exists, get_config_path

    def load() -> LibraryConfig:
        try:
            return LibraryConfig.load(config_path) if config_path else ensure_config_exists()
        except (FileNotFoundError, tomllib.TOMLDecodeError, ValueError, TypeError) as e:
            console.print(f"[red]Error loading config: {e}[/red]")
            raise typer.Exit(1)

    if action == "show":
        cfg = load()
        display = cfg.display
        panel = Panel.fit(
            f"[cyan]Library Path:[/cyan] {cfg.library_path}\n"
            f"[cyan]Export Directory:[/cyan] {cfg.export_dir}\n"
            f"[cyan]Log Directory:[/cyan] {cfg.log_dir}\n"
            f"[cyan]Log Level:[/cyan] {cfg.log_level}\n"
            f"[cyan]Default Tempo:[/cyan] {display.default_tempo}\n"
            f"[cyan]Default Scroll Speed:[/cyan] {display.default_scroll_speed}\n"
            f"[cyan]Default Lines Per Scroll:[/cyan] {display.default_lines_per_scroll}\n"
            f"[cyan]Default Text Size:[/cyan] {display.default_text_size}\n"
            f"[cyan]Default Colors:[/cyan] {display.default_text_color} on "
            f"{display.default_background_color}\n"
            f"[cyan]Default Bold:[/cyan] {display.default_is_bold}",
            title="Configuration",
            border_style="green",
        )
        console.print(panel)

    elif action == "get":
        if not key:
            console.print("[red]Usage: lyrics-manager config get <key>[/red]")
            raise typer.Exit(1)

        current = load().get(key)
        if current is None or isinstance(current, DisplaySettings):
            console.print(f"[red]Invalid config key: {key}[/red]")
            raise typer.Exit(1)
        console.print(str(current), soft_wrap=True, markup=False)

    elif action == "set":
        if not key or value is None:
            console.print("[red]Usage: lyrics-manager config set <key> <value>[/red]")
            raise typer.Exit(1)

        cfg = load()
        try:
            cfg.set(key, value)
        except ValueError as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(1)
        cfg.save(config_path or get_config_path())
        console.print(f"[green]Set {key} = {value}[/green]")

    elif action == "path":
        console.print(config_path or get_config_path())

    else:
        console.print(f"[red]Unknown action: {action}[/red]")
        console.print("Valid actions: show, get, set, path")
        raise typer.Exit(1)


# Entry point for the CLI
def cli_entry() -> None:
    """Entry point for the CLI application."""
    app()


if __name__ == "__main__":
    cli_entry()
