"""Data models for catalog store entities.

Provides dataclasses for Song, SetList and their companions with
serialization to/from the snapshot wire format. The wire format uses
camelCase keys, numeric fields as decimal strings and timestamps as integer
nanoseconds since epoch.
"""

from dataclasses import dataclass, field
from typing import Any, Optional


def _to_int(value: Any, name: str) -> int:
    """Parse an integer field given as a number or a decimal string."""
    if isinstance(value, bool):
        raise ValueError(f"Field '{name}' must be an integer, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    raise ValueError(f"Field '{name}' must be an integer, got {value!r}")


def _to_bool(value: Any, name: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ("true", "false"):
        return value.lower() == "true"
    raise ValueError(f"Field '{name}' must be a boolean, got {value!r}")


def _to_str(value: Any, name: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"Field '{name}' must be a string, got {value!r}")
    return value


def _require_object(value: Any, name: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise ValueError(f"Each {name} must be an object, got {value!r}")
    return value


@dataclass(frozen=True)
class ColorRange:
    """A half-open [start, end) span of lyric text with a display color.

    Attributes:
        start: Index of the first colored character
        end: Index one past the last colored character
        color: Display color (e.g., "#ff0000")
    """

    start: int
    end: int
    color: str

    def to_dict(self) -> dict[str, Any]:
        return {"start": str(self.start), "end": str(self.end), "color": self.color}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ColorRange":
        _require_object(data, "color range")
        return cls(
            start=_to_int(data["start"], "start"),
            end=_to_int(data["end"], "end"),
            color=_to_str(data["color"], "color"),
        )


@dataclass
class Song:
    """A performable lyric sheet with its display attributes.

    Attributes:
        id: Unique song ID (e.g., "song_1729340000000000000_9f2c41aa")
        title: Song title
        artist: Artist name
        lyrics: Lyrics body
        scroll_speed: Auto-scroll speed
        tempo: Tempo in beats per minute
        background_color: Background color during playback
        text_color: Default lyric color during playback
        text_size: Lyric font size
        is_bold: Whether lyrics render bold
        lines_per_scroll: Lines advanced per scroll step
        color_ranges: Normalized color annotations over the lyrics
        created_at: Creation time in nanoseconds since epoch
        updated_at: Last update time in nanoseconds since epoch
        image: Optional reference to an attached image asset
    """

    id: str
    title: str
    artist: str = ""
    lyrics: str = ""
    scroll_speed: int = 5
    tempo: int = 120
    background_color: str = "#000000"
    text_color: str = "#ffffff"
    text_size: int = 24
    is_bold: bool = False
    lines_per_scroll: int = 1
    color_ranges: list[ColorRange] = field(default_factory=list)
    created_at: int = 0
    updated_at: int = 0
    image: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        """Convert Song to its wire representation.

        Returns:
            Dictionary with camelCase keys and decimal-string numbers
        """
        data = {
            "id": self.id,
            "title": self.title,
            "artist": self.artist,
            "lyrics": self.lyrics,
            "scrollSpeed": str(self.scroll_speed),
            "tempo": str(self.tempo),
            "backgroundColor": self.background_color,
            "textColor": self.text_color,
            "textSize": str(self.text_size),
            "isBold": self.is_bold,
            "linesPerScroll": str(self.lines_per_scroll),
            "colorRanges": [r.to_dict() for r in self.color_ranges],
            "createdAt": str(self.created_at),
            "updatedAt": str(self.updated_at),
        }
        if self.image is not None:
            data["image"] = self.image
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Song":
        """Create a Song from its wire representation.

        Args:
            data: Dictionary with camelCase keys

        Returns:
            Song instance

        Raises:
            KeyError: If a required field is missing
            ValueError: If a field has the wrong type
        """
        _require_object(data, "song")
        image = data.get("image")
        return cls(
            id=_to_str(data["id"], "id"),
            title=_to_str(data["title"], "title"),
            artist=_to_str(data.get("artist", ""), "artist"),
            lyrics=_to_str(data.get("lyrics", ""), "lyrics"),
            scroll_speed=_to_int(data.get("scrollSpeed", 5), "scrollSpeed"),
            tempo=_to_int(data.get("tempo", 120), "tempo"),
            background_color=_to_str(data.get("backgroundColor", "#000000"), "backgroundColor"),
            text_color=_to_str(data.get("textColor", "#ffffff"), "textColor"),
            text_size=_to_int(data.get("textSize", 24), "textSize"),
            is_bold=_to_bool(data.get("isBold", False), "isBold"),
            lines_per_scroll=_to_int(data.get("linesPerScroll", 1), "linesPerScroll"),
            color_ranges=[ColorRange.from_dict(r) for r in data.get("colorRanges") or []],
            created_at=_to_int(data.get("createdAt", 0), "createdAt"),
            updated_at=_to_int(data.get("updatedAt", 0), "updatedAt"),
            image=_to_str(image, "image") if image is not None else None,
        )


@dataclass
class SetList:
    """An ordered collection of song references.

    Attributes:
        id: Unique set list ID
        name: Display name
        song_ids: Ordered song IDs; duplicates and dangling IDs are allowed
        created_at: Creation time in nanoseconds since epoch
        updated_at: Last update time in nanoseconds since epoch
    """

    id: str
    name: str
    song_ids: list[str] = field(default_factory=list)
    created_at: int = 0
    updated_at: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "songIds": list(self.song_ids),
            "createdAt": str(self.created_at),
            "updatedAt": str(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SetList":
        _require_object(data, "set list")
        song_ids = data.get("songIds") or []
        if not isinstance(song_ids, list):
            raise ValueError(f"Field 'songIds' must be a list, got {song_ids!r}")
        return cls(
            id=_to_str(data["id"], "id"),
            name=_to_str(data["name"], "name"),
            song_ids=[_to_str(song_id, "songIds") for song_id in song_ids],
            created_at=_to_int(data.get("createdAt", 0), "createdAt"),
            updated_at=_to_int(data.get("updatedAt", 0), "updatedAt"),
        )


@dataclass(frozen=True)
class SetListSongPosition:
    """A member song's 1-based position within a set list."""

    song_id: str
    position: int

    def to_dict(self) -> dict[str, Any]:
        return {"songId": self.song_id, "position": str(self.position)}


@dataclass
class SetListSongInfo:
    """A set list together with the positions of its resolvable songs."""

    set_list: SetList
    song_positions: list[SetListSongPosition] = field(default_factory=list)


@dataclass(frozen=True)
class SaveSongResult:
    """Outcome of a song save.

    Attributes:
        song_id: Identity the content was written under
        conflicting_song_id: A different song that owned the title key
            before the write, if any
        replaced: Whether the write overwrote the conflicting song
    """

    song_id: str
    conflicting_song_id: Optional[str] = None
    replaced: bool = False

    @property
    def had_conflict(self) -> bool:
        return self.conflicting_song_id is not None


@dataclass(frozen=True)
class FileHandleReference:
    """Remembered export destination for a song or set list."""

    path: str
    is_set_list: bool

    def to_dict(self) -> dict[str, Any]:
        return {"path": self.path, "isSetList": self.is_set_list}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FileHandleReference":
        _require_object(data, "file handle")
        return cls(
            path=_to_str(data["path"], "path"),
            is_set_list=_to_bool(data.get("isSetList", False), "isSetList"),
        )


@dataclass
class Snapshot:
    """The full set of songs and set lists used for bulk import/export."""

    songs: list[Song] = field(default_factory=list)
    set_lists: list[SetList] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "songs": [song.to_dict() for song in self.songs],
            "setLists": [set_list.to_dict() for set_list in self.set_lists],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Snapshot":
        """Decode a snapshot payload, checking only its type shape.

        Args:
            data: Dictionary with "songs" and "setLists" arrays

        Returns:
            Snapshot instance

        Raises:
            KeyError: If a required field is missing
            ValueError: If the payload has the wrong shape
        """
        if not isinstance(data, dict):
            raise ValueError("Snapshot payload must be an object")
        songs = data.get("songs", [])
        set_lists = data.get("setLists", [])
        if not isinstance(songs, list) or not isinstance(set_lists, list):
            raise ValueError("Snapshot 'songs' and 'setLists' must be arrays")
        return cls(
            songs=[Song.from_dict(song) for song in songs],
            set_lists=[SetList.from_dict(set_list) for set_list in set_lists],
        )
