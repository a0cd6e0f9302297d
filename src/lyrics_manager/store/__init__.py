"""Catalog store: songs, set lists, title index and color normalization."""

from lyrics_manager.store.catalog import CatalogStore
from lyrics_manager.store.colors import normalize_color_ranges, split_segments
from lyrics_manager.store.errors import CatalogError, NotFoundError, ValidationRejectedError
from lyrics_manager.store.ids import IdGenerator
from lyrics_manager.store.models import (
    ColorRange,
    FileHandleReference,
    SaveSongResult,
    SetList,
    SetListSongInfo,
    SetListSongPosition,
    Snapshot,
    Song,
)
from lyrics_manager.store.titles import TitleIndex, normalize_title

__all__ = [
    "CatalogError",
    "CatalogStore",
    "ColorRange",
    "FileHandleReference",
    "IdGenerator",
    "NotFoundError",
    "SaveSongResult",
    "SetList",
    "SetListSongInfo",
    "SetListSongPosition",
    "Snapshot",
    "Song",
    "TitleIndex",
    "ValidationRejectedError",
    "normalize_color_ranges",
    "normalize_title",
    "split_segments",
]
