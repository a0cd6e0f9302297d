"""Library and backup files for the catalog store.

The store itself lives in memory. Between sessions it is kept in a library
file: a JSON backup document (songs, set lists, display settings, export
date and format version) plus the remembered export destinations. A backup
file is the same document without the export destinations, so either can be
imported into the other.
"""

import json
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Optional

from lyrics_manager.config import DisplaySettings
from lyrics_manager.logging_config import get_logger
from lyrics_manager.store.catalog import CatalogStore
from lyrics_manager.store.models import FileHandleReference, Snapshot, Song

logger = get_logger(__name__)

FORMAT_VERSION = "1.0"


class LibraryFileError(Exception):
    """A library, backup or item file could not be read or written."""

    def __init__(self, message: str, cause: Optional[Exception] = None):
        super().__init__(message)
        self.cause = cause


def export_timestamp() -> str:
    """Current UTC time as an ISO 8601 string with millisecond precision."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def read_json_file(path: Path) -> dict[str, Any]:
    """Read a JSON object from a file.

    Raises:
        LibraryFileError: If the file is missing, unreadable or not a JSON object
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise LibraryFileError(f"Failed to read {path}: {e}", cause=e) from e

    if not isinstance(data, dict):
        raise LibraryFileError(f"Failed to read {path}: expected a JSON object")
    return data


def write_json_file(path: Path, data: dict[str, Any]) -> None:
    """Write a JSON object to a file, replacing it atomically.

    Raises:
        LibraryFileError: If the file cannot be written
    """
    tmp_path = path.with_name(f".{path.name}.tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        os.replace(tmp_path, path)
    except OSError as e:
        raise LibraryFileError(f"Failed to write {path}: {e}", cause=e) from e


def collapse_songs(songs: Iterable[Song]) -> list[Song]:
    """Keep one record per song ID, the one with the latest update time.

    Args:
        songs: Songs that may repeat IDs

    Returns:
        Songs in order of first appearance of each ID
    """
    latest: dict[str, Song] = {}
    for song in songs:
        existing = latest.get(song.id)
        if existing is None or song.updated_at > existing.updated_at:
            latest[song.id] = song
    return list(latest.values())


def build_backup(store: CatalogStore, settings: Optional[DisplaySettings] = None) -> dict[str, Any]:
    """Build a backup document from the store.

    Songs are collapsed by ID and sorted by title.

    Args:
        store: Catalog store to read
        settings: Display settings to include (defaults when None)

    Returns:
        Backup document ready for JSON serialization
    """
    snapshot = store.export_data()
    songs = sorted(collapse_songs(snapshot.songs), key=lambda song: song.title.casefold())
    return {
        "songs": [song.to_dict() for song in songs],
        "setLists": [set_list.to_dict() for set_list in snapshot.set_lists],
        "settings": (settings or DisplaySettings()).to_backup_dict(),
        "exportDate": export_timestamp(),
        "version": FORMAT_VERSION,
    }


def decode_backup(data: dict[str, Any], source: Path) -> tuple[Snapshot, Optional[DisplaySettings]]:
    """Decode a backup document into an import-ready snapshot.

    Songs are collapsed by ID and ordered oldest update first, so importing
    them leaves each title with its most recent writer.

    Raises:
        LibraryFileError: If the document does not have the snapshot shape
    """
    try:
        snapshot = Snapshot.from_dict(data)
        settings = data.get("settings")
        display = DisplaySettings.from_backup_dict(settings) if isinstance(settings, dict) else None
    except (KeyError, ValueError, TypeError) as e:
        raise LibraryFileError(f"Invalid data in {source}: {e}", cause=e) from e

    snapshot.songs = sorted(collapse_songs(snapshot.songs), key=lambda song: song.updated_at)
    return snapshot, display


def export_backup(store: CatalogStore, path: Path, settings: Optional[DisplaySettings] = None) -> dict[str, Any]:
    """Write a backup file.

    Returns:
        The written document
    """
    document = build_backup(store, settings)
    write_json_file(path, document)
    logger.info(f"Exported {len(document['songs'])} songs and {len(document['setLists'])} set lists to {path}")
    return document


def import_backup(store: CatalogStore, path: Path) -> tuple[Snapshot, Optional[DisplaySettings]]:
    """Replace the store's contents with a backup file.

    Args:
        store: Catalog store to overwrite
        path: Backup file to read

    Returns:
        The imported snapshot and the backup's display settings, if present

    Raises:
        LibraryFileError: If the file cannot be read or decoded
    """
    snapshot, settings = decode_backup(read_json_file(path), path)
    store.import_data(snapshot)
    logger.info(f"Imported backup {path}")
    return snapshot, settings


class LibraryFile:
    """The on-disk home of a catalog store.

    Attributes:
        path: Path to the library JSON file
    """

    def __init__(self, path: Path):
        """Initialize the library file.

        Args:
            path: Path to the library JSON file
        """
        self.path = path

    def exists(self) -> bool:
        return self.path.exists()

    def load(self, store: Optional[CatalogStore] = None) -> CatalogStore:
        """Load the library into a store.

        A missing library file yields an empty store.

        Args:
            store: Store to fill (a new one when None)

        Returns:
            The filled store

        Raises:
            LibraryFileError: If the file exists but cannot be decoded
        """
        store = store or CatalogStore()
        if not self.path.exists():
            logger.debug(f"No library at {self.path}, starting empty")
            return store

        data = read_json_file(self.path)
        snapshot, _ = decode_backup(data, self.path)

        handles = data.get("fileHandles") or {}
        if not isinstance(handles, dict):
            raise LibraryFileError(f"Invalid data in {self.path}: 'fileHandles' must be an object")
        try:
            references = {
                entity_id: FileHandleReference.from_dict(handle) for entity_id, handle in handles.items()
            }
        except (KeyError, ValueError, TypeError) as e:
            raise LibraryFileError(f"Invalid data in {self.path}: {e}", cause=e) from e

        # Nothing touches the store until the whole file has decoded.
        store.import_data(snapshot)
        for entity_id, reference in references.items():
            store.save_file_handle_reference(entity_id, reference.path, reference.is_set_list)

        logger.debug(f"Loaded library {self.path}")
        return store

    def save(self, store: CatalogStore, settings: Optional[DisplaySettings] = None) -> None:
        """Write the store to the library file.

        Raises:
            LibraryFileError: If the file cannot be written
        """
        document = build_backup(store, settings)
        document["fileHandles"] = {
            entity_id: reference.to_dict()
            for entity_id, reference in store.get_all_file_handle_references().items()
        }
        write_json_file(self.path, document)
        logger.debug(f"Saved library {self.path}")
