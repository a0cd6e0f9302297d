"""Song commands for lyrics-manager.

Provides CLI commands for adding, editing, listing, viewing, deleting,
exporting and importing songs.
"""

from pathlib import Path
from typing import Optional

import typer
from rich.color import ColorParseError
from rich.errors import StyleSyntaxError
from rich.markup import escape
from rich.panel import Panel
from rich.style import Style
from rich.table import Table
from rich.text import Text

from lyrics_manager.commands.common import console, format_timestamp, load_config, open_library
from lyrics_manager.services.item_files import export_song, import_song_files
from lyrics_manager.store.catalog import CatalogStore
from lyrics_manager.store.colors import split_segments
from lyrics_manager.store.models import ColorRange, SaveSongResult, Song

app = typer.Typer(help="Song operations")


def parse_color_range(value: str) -> ColorRange:
    """Parse a "START:END:COLOR" option value.

    Raises:
        typer.BadParameter: If the value is not in that form
    """
    parts = value.split(":", 2)
    if len(parts) != 3:
        raise typer.BadParameter(f"Expected START:END:COLOR, got {value!r}", param_hint="--color")
    try:
        start, end = int(parts[0]), int(parts[1])
    except ValueError:
        raise typer.BadParameter(f"START and END must be integers in {value!r}", param_hint="--color")
    return ColorRange(start=start, end=end, color=parts[2])


def _read_lyrics(lyrics: Optional[str], lyrics_file: Optional[Path]) -> Optional[str]:
    if lyrics_file is not None:
        try:
            return lyrics_file.read_text(encoding="utf-8").strip()
        except OSError as e:
            raise typer.BadParameter(f"Cannot read {lyrics_file}: {e}", param_hint="--lyrics-file")
    if lyrics is not None:
        return lyrics.strip()
    return None


def _save_with_conflict_check(
    store: CatalogStore,
    song_id: Optional[str],
    fields: dict,
    replace: bool,
    save_as_new: bool,
) -> SaveSongResult:
    """Check the title index, then save once the caller has chosen a resolution."""
    if replace and save_as_new:
        console.print("[red]Use only one of --replace and --save-as-new[/red]")
        raise typer.Exit(1)

    conflict = store.find_title_conflict(fields["title"], exclude_id=song_id)
    if conflict is not None and not (replace or save_as_new):
        existing = store.get_song(conflict)
        console.print(
            f"[yellow]A song titled '{escape(existing.title)}' already exists ({conflict}).[/yellow]"
        )
        console.print("Use --replace to overwrite it or --save-as-new to keep both.")
        raise typer.Exit(1)

    return store.save_song(song_id, replace_existing=replace, **fields)


def _song_style(color: Optional[str]) -> Optional[Style]:
    if not color:
        return None
    try:
        return Style.parse(color)
    except (StyleSyntaxError, ColorParseError):
        return None


def render_lyrics(song: Song) -> Text:
    """Render lyrics with their color ranges applied."""
    text = Text(style=_song_style(song.text_color) or "")
    for fragment, color in split_segments(song.lyrics, song.color_ranges):
        text.append(fragment, style=_song_style(color))
    if song.is_bold:
        text.stylize("bold")
    return text


@app.command("add")
def add_song(
    title: str = typer.Argument(..., help="Song title"),
    artist: str = typer.Option("", "--artist", "-a", help="Artist name"),
    lyrics: Optional[str] = typer.Option(None, "--lyrics", help="Lyrics text"),
    lyrics_file: Optional[Path] = typer.Option(None, "--lyrics-file", "-l", help="Read lyrics from a text file"),
    tempo: Optional[int] = typer.Option(None, "--tempo", "-t", help="Tempo in BPM"),
    scroll_speed: Optional[int] = typer.Option(None, "--scroll-speed", help="Auto-scroll speed"),
    lines_per_scroll: Optional[int] = typer.Option(None, "--lines-per-scroll", help="Lines per scroll step"),
    text_size: Optional[int] = typer.Option(None, "--text-size", help="Lyric font size"),
    background_color: Optional[str] = typer.Option(None, "--background-color", help="Background color"),
    text_color: Optional[str] = typer.Option(None, "--text-color", help="Lyric color"),
    bold: Optional[bool] = typer.Option(None, "--bold/--no-bold", help="Render lyrics bold"),
    color: Optional[list[str]] = typer.Option(None, "--color", help="Color range as START:END:COLOR (repeatable)"),
    replace: bool = typer.Option(False, "--replace", help="Overwrite the song that already has this title"),
    save_as_new: bool = typer.Option(False, "--save-as-new", help="Keep both songs when the title is taken"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to config file"),
) -> None:
    """Add a song to the library.

    Display attributes not given on the command line come from the
    configured defaults. Color ranges that fall outside the lyrics or
    overlap an earlier range are dropped.
    """
    config = load_config(config_path)
    defaults = config.display
    color_ranges = [parse_color_range(value) for value in color or []]

    fields = {
        "title": title.strip(),
        "artist": artist.strip(),
        "lyrics": _read_lyrics(lyrics, lyrics_file) or "",
        "scroll_speed": scroll_speed if scroll_speed is not None else defaults.default_scroll_speed,
        "tempo": tempo if tempo is not None else defaults.default_tempo,
        "background_color": background_color or defaults.default_background_color,
        "text_color": text_color or defaults.default_text_color,
        "text_size": text_size if text_size is not None else defaults.default_text_size,
        "is_bold": bold if bold is not None else defaults.default_is_bold,
        "lines_per_scroll": (
            lines_per_scroll if lines_per_scroll is not None else defaults.default_lines_per_scroll
        ),
        "color_ranges": color_ranges,
    }
    if not fields["title"]:
        console.print("[red]Title cannot be empty[/red]")
        raise typer.Exit(1)

    with open_library(config) as store:
        result = _save_with_conflict_check(store, None, fields, replace, save_as_new)
        saved = store.get_song(result.song_id)

    dropped = len(color_ranges) - len(saved.color_ranges)
    if result.replaced:
        console.print(f"[green]Replaced song {result.song_id}[/green]")
    else:
        console.print(f"[green]Added song {result.song_id}[/green]")
    if dropped:
        console.print(f"[yellow]Dropped {dropped} invalid or overlapping color range(s)[/yellow]")


@app.command("edit")
def edit_song(
    song_id: str = typer.Argument(..., help="Song ID"),
    title: Optional[str] = typer.Option(None, "--title", help="New title"),
    artist: Optional[str] = typer.Option(None, "--artist", "-a", help="Artist name"),
    lyrics: Optional[str] = typer.Option(None, "--lyrics", help="Lyrics text"),
    lyrics_file: Optional[Path] = typer.Option(None, "--lyrics-file", "-l", help="Read lyrics from a text file"),
    tempo: Optional[int] = typer.Option(None, "--tempo", "-t", help="Tempo in BPM"),
    scroll_speed: Optional[int] = typer.Option(None, "--scroll-speed", help="Auto-scroll speed"),
    lines_per_scroll: Optional[int] = typer.Option(None, "--lines-per-scroll", help="Lines per scroll step"),
    text_size: Optional[int] = typer.Option(None, "--text-size", help="Lyric font size"),
    background_color: Optional[str] = typer.Option(None, "--background-color", help="Background color"),
    text_color: Optional[str] = typer.Option(None, "--text-color", help="Lyric color"),
    bold: Optional[bool] = typer.Option(None, "--bold/--no-bold", help="Render lyrics bold"),
    color: Optional[list[str]] = typer.Option(None, "--color", help="Replace color ranges (START:END:COLOR, repeatable)"),
    clear_colors: bool = typer.Option(False, "--clear-colors", help="Remove all color ranges"),
    replace: bool = typer.Option(False, "--replace", help="Overwrite the song that already has the new title"),
    save_as_new: bool = typer.Option(False, "--save-as-new", help="Keep both songs when the new title is taken"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to config file"),
) -> None:
    """Edit a song.

    Only the given fields change. Existing color ranges are kept (and
    re-checked against the new lyrics) unless --color or --clear-colors
    is passed.
    """
    config = load_config(config_path)

    with open_library(config) as store:
        current = store.get_song(song_id)
        new_lyrics = _read_lyrics(lyrics, lyrics_file)

        if clear_colors:
            color_ranges: list[ColorRange] = []
        elif color:
            color_ranges = [parse_color_range(value) for value in color]
        else:
            color_ranges = current.color_ranges

        fields = {
            "title": title.strip() if title is not None else current.title,
            "artist": artist.strip() if artist is not None else current.artist,
            "lyrics": new_lyrics if new_lyrics is not None else current.lyrics,
            "scroll_speed": scroll_speed if scroll_speed is not None else current.scroll_speed,
            "tempo": tempo if tempo is not None else current.tempo,
            "background_color": background_color or current.background_color,
            "text_color": text_color or current.text_color,
            "text_size": text_size if text_size is not None else current.text_size,
            "is_bold": bold if bold is not None else current.is_bold,
            "lines_per_scroll": lines_per_scroll if lines_per_scroll is not None else current.lines_per_scroll,
            "color_ranges": color_ranges,
            "image": current.image,
        }
        if not fields["title"]:
            console.print("[red]Title cannot be empty[/red]")
            raise typer.Exit(1)

        result = _save_with_conflict_check(store, song_id, fields, replace, save_as_new)

    if result.replaced:
        console.print(f"[green]Replaced song {result.song_id}[/green]")
    else:
        console.print(f"[green]Updated song {result.song_id}[/green]")


@app.command("list")
def list_songs(
    format: str = typer.Option(
        "table",
        "--format",
        "-f",
        help="Output format (table|ids)",
    ),
    search: Optional[str] = typer.Option(
        None,
        "--search",
        "-s",
        help="Only songs whose title or artist contains this text",
    ),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to config file"),
) -> None:
    """List songs sorted by title.

    Use --format ids to output one song ID per line for piping.
    Use --search to match title or artist, ignoring case.
    """
    config = load_config(config_path)

    with open_library(config, save=False) as store:
        songs = sorted(store.get_all_songs(), key=lambda song: song.title.casefold())

    if search:
        query = search.casefold()
        songs = [song for song in songs if query in song.title.casefold() or query in song.artist.casefold()]
        if not songs and format != "ids":
            console.print(f"[yellow]No songs found matching '{escape(search)}'.[/yellow]")
            return

    if format == "ids":
        for song in songs:
            console.print(song.id)
        return

    if not songs:
        console.print("[yellow]No songs in the library.[/yellow]")
        return

    table = Table(title=f"Songs ({len(songs)})")
    table.add_column("ID", style="dim")
    table.add_column("Title", style="cyan")
    table.add_column("Artist", style="green")
    table.add_column("Tempo", style="magenta", justify="right")
    table.add_column("Updated", style="dim")

    for song in songs:
        table.add_row(
            song.id,
            escape(song.title),
            escape(song.artist) or "-",
            str(song.tempo),
            format_timestamp(song.updated_at),
        )

    console.print(table)


@app.command("show")
def show_song(
    song_id: str = typer.Argument(..., help="Song ID"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to config file"),
) -> None:
    """Show a song's details and its lyrics with colors applied."""
    config = load_config(config_path)

    with open_library(config, save=False) as store:
        song = store.get_song(song_id)

    details = Text()
    details.append("Title: ", style="cyan")
    details.append(f"{song.title}\n")
    details.append("Artist: ", style="cyan")
    details.append(f"{song.artist or '-'}\n")
    details.append("Tempo: ", style="cyan")
    details.append(f"{song.tempo} BPM\n")
    details.append("Scroll: ", style="cyan")
    details.append(f"speed {song.scroll_speed}, {song.lines_per_scroll} line(s) per step\n")
    details.append("Text: ", style="cyan")
    details.append(
        f"size {song.text_size}, {song.text_color} on {song.background_color}"
        f"{', bold' if song.is_bold else ''}\n"
    )
    details.append("Color ranges: ", style="cyan")
    details.append(f"{len(song.color_ranges)}\n")
    details.append("Created: ", style="cyan")
    details.append(f"{format_timestamp(song.created_at)}\n")
    details.append("Updated: ", style="cyan")
    details.append(format_timestamp(song.updated_at))

    console.print(Panel.fit(details, title=f"Song {song.id}", border_style="green"))
    if song.lyrics:
        console.print(Panel(render_lyrics(song), title="Lyrics", border_style="blue"))


@app.command("delete")
def delete_song(
    song_id: str = typer.Argument(..., help="Song ID"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to config file"),
) -> None:
    """Delete a song.

    Set lists that contain the song keep their other songs.
    """
    config = load_config(config_path)

    with open_library(config) as store:
        song = store.get_song(song_id)
        if not yes:
            typer.confirm(f"Delete song '{song.title}'?", abort=True)
        store.delete_song(song_id)

    console.print(f"[green]Deleted song {song_id}[/green]")


@app.command("export")
def export_song_command(
    song_id: str = typer.Argument(..., help="Song ID"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Destination file"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to config file"),
) -> None:
    """Export a song to its own JSON file.

    Without --output the song goes to the file it was last exported to,
    or to <export_dir>/<title>_song.json.
    """
    config = load_config(config_path)

    with open_library(config) as store:
        path = export_song(store, song_id, config.export_dir, output)

    console.print(f"[green]Exported to {path}[/green]")


@app.command("import")
def import_songs_command(
    files: list[Path] = typer.Argument(..., help="Song JSON files"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to config file"),
) -> None:
    """Import songs from song JSON files.

    Every file becomes a new song, even when its title is already taken.
    """
    config = load_config(config_path)

    with open_library(config) as store:
        imported = import_song_files(store, files)

    count = len(imported)
    console.print(f"[green]{count} song{'s' if count != 1 else ''} imported[/green]")
