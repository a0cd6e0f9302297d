"""Single-song and single-set-list JSON files.

Each file holds one record in the snapshot wire format plus the export date
and format version. Song files are named "<title>_song.json" and set list
files "<name>_setlist.json", with the name sanitized for the filesystem.
"""

import re
from pathlib import Path
from typing import Any, Iterable, Optional

from lyrics_manager.logging_config import get_logger
from lyrics_manager.services.library import (
    FORMAT_VERSION,
    LibraryFileError,
    export_timestamp,
    read_json_file,
    write_json_file,
)
from lyrics_manager.store.catalog import CatalogStore
from lyrics_manager.store.models import SetList, Song

logger = get_logger(__name__)

MAX_FILE_STEM_LENGTH = 50
_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_\-]")


def sanitize_file_name(name: str) -> str:
    """Replace characters outside [A-Za-z0-9_-] with "_" and cap the length."""
    return _UNSAFE_CHARS.sub("_", name)[:MAX_FILE_STEM_LENGTH]


def song_file_name(song: Song) -> str:
    return f"{sanitize_file_name(song.title)}_song.json"


def set_list_file_name(set_list: SetList) -> str:
    return f"{sanitize_file_name(set_list.name)}_setlist.json"


def build_song_file(song: Song) -> dict[str, Any]:
    """Build the document for a single-song file."""
    document = song.to_dict()
    document.pop("image", None)
    document["exportDate"] = export_timestamp()
    document["version"] = FORMAT_VERSION
    return document


def build_set_list_file(set_list: SetList) -> dict[str, Any]:
    """Build the document for a single-set-list file."""
    document = set_list.to_dict()
    document["exportDate"] = export_timestamp()
    document["version"] = FORMAT_VERSION
    return document


def _resolve_destination(
    store: CatalogStore,
    entity_id: str,
    default_name: str,
    directory: Path,
    output: Optional[Path],
) -> Path:
    """Pick an export path: explicit output, then the remembered path, then a default."""
    if output is not None:
        return output
    reference = store.get_file_handle_reference(entity_id)
    if reference is not None:
        return Path(reference.path)
    return directory / default_name


def export_song(store: CatalogStore, song_id: str, directory: Path, output: Optional[Path] = None) -> Path:
    """Write a song to its own file and remember the destination.

    Args:
        store: Catalog store holding the song
        song_id: The song to export
        directory: Directory for a default-named file
        output: Explicit destination, overriding the remembered one

    Returns:
        Path of the written file

    Raises:
        NotFoundError: If the song does not exist
        LibraryFileError: If the file cannot be written
    """
    song = store.get_song(song_id)
    path = _resolve_destination(store, song_id, song_file_name(song), directory, output)
    write_json_file(path, build_song_file(song))
    store.save_file_handle_reference(song_id, str(path), is_set_list=False)
    logger.info(f"Exported song {song_id} to {path}")
    return path


def export_set_list(store: CatalogStore, set_list_id: str, directory: Path, output: Optional[Path] = None) -> Path:
    """Write a set list to its own file and remember the destination.

    Repeated exports of the same set list overwrite the remembered file.

    Raises:
        NotFoundError: If the set list does not exist
        LibraryFileError: If the file cannot be written
    """
    set_list = store.get_set_list(set_list_id)
    path = _resolve_destination(store, set_list_id, set_list_file_name(set_list), directory, output)
    write_json_file(path, build_set_list_file(set_list))
    store.save_file_handle_reference(set_list_id, str(path), is_set_list=True)
    logger.info(f"Exported set list {set_list_id} to {path}")
    return path


def import_song_files(store: CatalogStore, paths: Iterable[Path]) -> list[str]:
    """Add songs from single-song files.

    Each file becomes a new song saved alongside any same-titled song; the
    file's own ID and timestamps are not reused.

    Args:
        store: Catalog store to add to
        paths: Song files to read

    Returns:
        IDs of the created songs

    Raises:
        LibraryFileError: If a file cannot be read or decoded; songs from
            earlier files stay imported
    """
    imported: list[str] = []
    for path in paths:
        data = read_json_file(path)
        try:
            song = Song.from_dict(
                {
                    **data,
                    "id": data.get("id") or "",
                    "scrollSpeed": data.get("scrollSpeed") or "5",
                    "linesPerScroll": data.get("linesPerScroll") or "1",
                }
            )
        except (KeyError, ValueError, TypeError) as e:
            raise LibraryFileError(f"Invalid song file {path}: {e}", cause=e) from e

        result = store.save_song(
            None,
            title=song.title,
            artist=song.artist,
            lyrics=song.lyrics,
            scroll_speed=song.scroll_speed,
            tempo=song.tempo,
            background_color=song.background_color,
            text_color=song.text_color,
            text_size=song.text_size,
            is_bold=song.is_bold,
            lines_per_scroll=song.lines_per_scroll,
            color_ranges=song.color_ranges,
            replace_existing=False,
        )
        imported.append(result.song_id)
        logger.info(f"Imported song file {path} as {result.song_id}")
    return imported


def import_set_list_files(store: CatalogStore, paths: Iterable[Path]) -> list[str]:
    """Create set lists from single-set-list files.

    Returns:
        IDs of the created set lists

    Raises:
        LibraryFileError: If a file cannot be read or decoded
    """
    imported: list[str] = []
    for path in paths:
        data = read_json_file(path)
        try:
            set_list = SetList.from_dict({**data, "id": data.get("id") or ""})
        except (KeyError, ValueError, TypeError) as e:
            raise LibraryFileError(f"Invalid set list file {path}: {e}", cause=e) from e

        set_list_id = store.create_set_list(set_list.name, set_list.song_ids)
        imported.append(set_list_id)
        logger.info(f"Imported set list file {path} as {set_list_id}")
    return imported
