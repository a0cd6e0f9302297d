"""In-memory catalog store for songs and set lists.

The store owns every Song and SetList record along with the title index.
Each operation runs to completion under the store lock, so callers never
observe a partially applied write. Records handed out are copies; the only
way to change stored state is through the operations below.

Set list positions are not stored. They are computed from the set list's
song ID sequence whenever they are requested, so they can never drift out
of sync with it.
"""

import dataclasses
import threading
import time
from typing import Any, Callable, Iterable, Optional, Union

from lyrics_manager.logging_config import get_logger
from lyrics_manager.store.colors import normalize_color_ranges
from lyrics_manager.store.errors import NotFoundError, ValidationRejectedError
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

logger = get_logger(__name__)


def _copy_song(song: Song) -> Song:
    return dataclasses.replace(song, color_ranges=list(song.color_ranges))


def _copy_set_list(set_list: SetList) -> SetList:
    return dataclasses.replace(set_list, song_ids=list(set_list.song_ids))


class CatalogStore:
    """Keyed stores for songs and set lists plus the title index.

    Attributes:
        song_ids: Identifier generator for new songs
        set_list_ids: Identifier generator for new set lists
    """

    def __init__(
        self,
        clock: Callable[[], int] = time.time_ns,
        song_ids: Optional[IdGenerator] = None,
        set_list_ids: Optional[IdGenerator] = None,
    ):
        """Initialize an empty store.

        Args:
            clock: Source of nanosecond timestamps
            song_ids: Identifier generator for songs (default prefix "song_")
            set_list_ids: Identifier generator for set lists (default prefix "setlist_")
        """
        self._clock = clock
        self.song_ids = song_ids or IdGenerator("song_", clock)
        self.set_list_ids = set_list_ids or IdGenerator("setlist_", clock)

        self._songs: dict[str, Song] = {}
        self._set_lists: dict[str, SetList] = {}
        self._titles = TitleIndex()
        self._file_handles: dict[str, FileHandleReference] = {}

        self._last_stamp = 0
        self._lock = threading.RLock()

    def _now(self, after: int = 0) -> int:
        """Get a timestamp later than every previous one and than `after`."""
        stamp = max(self._clock(), self._last_stamp + 1, after + 1)
        self._last_stamp = stamp
        return stamp

    # Song operations

    def save_song(
        self,
        song_id: Optional[str] = None,
        *,
        title: str,
        artist: str = "",
        lyrics: str = "",
        scroll_speed: int = 5,
        tempo: int = 120,
        background_color: str = "#000000",
        text_color: str = "#ffffff",
        text_size: int = 24,
        is_bold: bool = False,
        lines_per_scroll: int = 1,
        color_ranges: Iterable[ColorRange] = (),
        replace_existing: bool = False,
        image: Optional[str] = None,
    ) -> SaveSongResult:
        """Create or update a song.

        The identity written to is chosen as follows: the song currently
        owning the title when `replace_existing` is set and that song is not
        `song_id`; otherwise `song_id` when given; otherwise a new identity.
        Updates keep the original creation time. The title index always ends
        up pointing at the written identity.

        Args:
            song_id: Existing song to update, or None to create
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
            color_ranges: Color annotations, normalized against the lyrics
            replace_existing: Overwrite the song that owns the title
            image: Optional attached image reference

        Returns:
            SaveSongResult with the written identity and any title conflict

        Raises:
            NotFoundError: If song_id is given but absent and no
                replacement target applies
        """
        with self._lock:
            key = normalize_title(title)
            owner = self._titles.resolve(key)
            conflict = owner if owner is not None and owner != song_id else None

            if replace_existing and conflict is not None:
                target = conflict
            elif song_id is not None:
                if song_id not in self._songs:
                    raise NotFoundError("song", song_id)
                target = song_id
            else:
                target = self.song_ids.generate()

            previous = self._songs.get(target)
            if previous is not None:
                created_at = previous.created_at
                updated_at = self._now(after=previous.updated_at)
                self._release_title(previous)
            else:
                created_at = updated_at = self._now()

            self._songs[target] = Song(
                id=target,
                title=title,
                artist=artist,
                lyrics=lyrics,
                scroll_speed=scroll_speed,
                tempo=tempo,
                background_color=background_color,
                text_color=text_color,
                text_size=text_size,
                is_bold=is_bold,
                lines_per_scroll=lines_per_scroll,
                color_ranges=normalize_color_ranges(lyrics, color_ranges),
                created_at=created_at,
                updated_at=updated_at,
                image=image,
            )
            self._titles.assign(key, target)

        if conflict is not None:
            action = "replaced" if target == conflict else "saved alongside"
            logger.info(f"Song {target} {action} title owner {conflict} ({key!r})")
        logger.debug(f"Saved song {target} ({'updated' if previous else 'created'})")

        return SaveSongResult(
            song_id=target,
            conflicting_song_id=conflict,
            replaced=conflict is not None and target == conflict,
        )

    def get_song(self, song_id: str) -> Song:
        """Get a song by ID.

        Raises:
            NotFoundError: If the song does not exist
        """
        with self._lock:
            song = self._songs.get(song_id)
            if song is None:
                raise NotFoundError("song", song_id)
            return _copy_song(song)

    def get_all_songs(self) -> list[Song]:
        """Get every song. Ordering is unspecified."""
        with self._lock:
            return [_copy_song(song) for song in self._songs.values()]

    def delete_song(self, song_id: str) -> None:
        """Delete a song and release its title.

        Set lists keep referencing the ID; read paths skip it.

        Raises:
            NotFoundError: If the song does not exist
        """
        with self._lock:
            song = self._songs.pop(song_id, None)
            if song is None:
                raise NotFoundError("song", song_id)
            self._release_title(song)
            self._file_handles.pop(song_id, None)
        logger.info(f"Deleted song {song_id} ({song.title!r})")

    def find_title_conflict(self, title: str, exclude_id: Optional[str] = None) -> Optional[str]:
        """Find the song that owns a title, ignoring `exclude_id`.

        Args:
            title: Title to check (normalized before lookup)
            exclude_id: Song being edited, which never conflicts with itself

        Returns:
            ID of the conflicting song, or None
        """
        with self._lock:
            owner = self._titles.resolve(normalize_title(title))
        if owner is None or owner == exclude_id:
            return None
        return owner

    def is_title_unique(self, title: str, exclude_id: Optional[str] = None) -> bool:
        """Check whether no other song owns the normalized title."""
        return self.find_title_conflict(title, exclude_id) is None

    def _release_title(self, song: Song) -> None:
        """Release a song's title entry, handing it to a same-titled survivor."""
        key = normalize_title(song.title)
        if not self._titles.release(key, song.id):
            return
        candidates = [
            other
            for other in self._songs.values()
            if other.id != song.id and normalize_title(other.title) == key
        ]
        if candidates:
            successor = max(candidates, key=lambda other: other.updated_at)
            self._titles.assign(key, successor.id)

    # Set list operations

    def create_set_list(self, name: str, song_ids: Iterable[str] = ()) -> str:
        """Create a set list.

        Args:
            name: Display name
            song_ids: Initial song order; not checked against the song store

        Returns:
            The new set list's ID
        """
        with self._lock:
            set_list_id = self.set_list_ids.generate()
            now = self._now()
            self._set_lists[set_list_id] = SetList(
                id=set_list_id,
                name=name,
                song_ids=list(song_ids),
                created_at=now,
                updated_at=now,
            )
        logger.info(f"Created set list {set_list_id} ({name!r})")
        return set_list_id

    def update_set_list(self, set_list_id: str, name: str, song_ids: Iterable[str]) -> None:
        """Replace a set list's name and full song sequence.

        Raises:
            NotFoundError: If the set list does not exist
        """
        with self._lock:
            set_list = self._require_set_list(set_list_id)
            set_list.name = name
            set_list.song_ids = list(song_ids)
            set_list.updated_at = self._now(after=set_list.updated_at)
        logger.debug(f"Updated set list {set_list_id}")

    def rename_set_list(self, set_list_id: str, name: str) -> None:
        """Change a set list's name, keeping its songs.

        Raises:
            NotFoundError: If the set list does not exist
        """
        with self._lock:
            set_list = self._require_set_list(set_list_id)
            self.update_set_list(set_list_id, name, set_list.song_ids)

    def add_song_to_set_list(self, set_list_id: str, song_id: str) -> bool:
        """Append a song unless the set list already contains it.

        Returns:
            True if the song was appended

        Raises:
            NotFoundError: If the set list does not exist
        """
        with self._lock:
            set_list = self._require_set_list(set_list_id)
            if song_id in set_list.song_ids:
                return False
            self.update_set_list(set_list_id, set_list.name, [*set_list.song_ids, song_id])
            return True

    def remove_song_from_set_list(self, set_list_id: str, song_id: str) -> int:
        """Remove every occurrence of a song from a set list.

        Returns:
            Number of entries removed

        Raises:
            NotFoundError: If the set list does not exist
        """
        with self._lock:
            set_list = self._require_set_list(set_list_id)
            remaining = [sid for sid in set_list.song_ids if sid != song_id]
            removed = len(set_list.song_ids) - len(remaining)
            if removed:
                self.update_set_list(set_list_id, set_list.name, remaining)
            return removed

    def delete_set_list(self, set_list_id: str) -> None:
        """Delete a set list.

        Raises:
            NotFoundError: If the set list does not exist
        """
        with self._lock:
            set_list = self._set_lists.pop(set_list_id, None)
            if set_list is None:
                raise NotFoundError("set list", set_list_id)
            self._file_handles.pop(set_list_id, None)
        logger.info(f"Deleted set list {set_list_id} ({set_list.name!r})")

    def get_set_list(self, set_list_id: str) -> SetList:
        """Get a set list by ID.

        Raises:
            NotFoundError: If the set list does not exist
        """
        with self._lock:
            return _copy_set_list(self._require_set_list(set_list_id))

    def get_all_set_lists(self) -> list[SetList]:
        """Get every set list. Ordering is unspecified."""
        with self._lock:
            return [_copy_set_list(set_list) for set_list in self._set_lists.values()]

    def get_songs_in_set_list(self, set_list_id: str) -> list[Song]:
        """Get a set list's songs in order, skipping IDs that no longer resolve.

        Raises:
            NotFoundError: If the set list does not exist
        """
        with self._lock:
            set_list = self._require_set_list(set_list_id)
            return [_copy_song(self._songs[sid]) for sid in self._members(set_list)]

    def get_set_list_song_info(self, set_list_id: str) -> SetListSongInfo:
        """Get a set list with the 1-based positions of its resolvable songs.

        Raises:
            NotFoundError: If the set list does not exist
        """
        with self._lock:
            set_list = self._require_set_list(set_list_id)
            positions = [
                SetListSongPosition(song_id=sid, position=index)
                for index, sid in enumerate(self._members(set_list), start=1)
            ]
            return SetListSongInfo(set_list=_copy_set_list(set_list), song_positions=positions)

    def get_set_list_song_count(self, set_list_id: str) -> int:
        """Get the number of resolvable songs in a set list.

        Raises:
            NotFoundError: If the set list does not exist
        """
        with self._lock:
            return len(self._members(self._require_set_list(set_list_id)))

    def move_song_in_set_list(self, set_list_id: str, song_id: str, new_position: int) -> None:
        """Move a song to a new 1-based position.

        The first occurrence of the song lands exactly at `new_position`,
        the other resolvable songs keep their relative order, and positions
        stay contiguous. Dangling IDs keep their slots in the raw sequence.

        Args:
            set_list_id: The set list ID
            song_id: The song to move
            new_position: Target position (1-based)

        Raises:
            NotFoundError: If the set list does not exist or does not
                contain the song
            ValidationRejectedError: If new_position is outside 1..N
        """
        with self._lock:
            set_list = self._require_set_list(set_list_id)
            members = self._members(set_list)

            if song_id not in members:
                raise NotFoundError(
                    "song", song_id, f"Song {song_id} is not in set list {set_list_id}"
                )
            if not 1 <= new_position <= len(members):
                raise ValidationRejectedError(
                    f"Position {new_position} is outside 1..{len(members)} "
                    f"for set list {set_list_id}"
                )

            members.remove(song_id)
            members.insert(new_position - 1, song_id)

            reordered = iter(members)
            set_list.song_ids = [
                next(reordered) if sid in self._songs else sid for sid in set_list.song_ids
            ]
            set_list.updated_at = self._now(after=set_list.updated_at)

        logger.debug(f"Moved song {song_id} to position {new_position} in set list {set_list_id}")

    def _require_set_list(self, set_list_id: str) -> SetList:
        set_list = self._set_lists.get(set_list_id)
        if set_list is None:
            raise NotFoundError("set list", set_list_id)
        return set_list

    def _members(self, set_list: SetList) -> list[str]:
        """Song IDs of a set list that resolve to stored songs, in order."""
        return [sid for sid in set_list.song_ids if sid in self._songs]

    # File handle references

    def save_file_handle_reference(self, entity_id: str, path: str, is_set_list: bool) -> None:
        """Remember where a song or set list was last exported."""
        with self._lock:
            self._file_handles[entity_id] = FileHandleReference(path=path, is_set_list=is_set_list)

    def get_file_handle_reference(self, entity_id: str) -> Optional[FileHandleReference]:
        """Get the remembered export destination for an entity, if any."""
        with self._lock:
            return self._file_handles.get(entity_id)

    def get_all_file_handle_references(self) -> dict[str, FileHandleReference]:
        with self._lock:
            return dict(self._file_handles)

    # Snapshot import/export

    def export_data(self) -> Snapshot:
        """Read every song and set list."""
        with self._lock:
            return Snapshot(songs=self.get_all_songs(), set_lists=self.get_all_set_lists())

    def import_data(self, snapshot: Union[Snapshot, dict[str, Any]]) -> None:
        """Replace all songs, set lists and the title index with a snapshot.

        Songs are inserted in payload order, so the last song with a given
        normalized title owns it in the index. Color ranges are normalized
        against each song's lyrics. A dict payload is decoded first; a
        decoding error leaves the store untouched.

        Args:
            snapshot: Snapshot or its wire-format dictionary

        Raises:
            KeyError: If a dict payload lacks a required field
            ValueError: If a dict payload has the wrong shape
        """
        if not isinstance(snapshot, Snapshot):
            snapshot = Snapshot.from_dict(snapshot)

        songs: dict[str, Song] = {}
        titles = TitleIndex()
        for song in snapshot.songs:
            previous = songs.get(song.id)
            if previous is not None:
                titles.release(normalize_title(previous.title), previous.id)
            songs[song.id] = dataclasses.replace(
                song, color_ranges=normalize_color_ranges(song.lyrics, song.color_ranges)
            )
            titles.assign(normalize_title(song.title), song.id)

        set_lists = {set_list.id: _copy_set_list(set_list) for set_list in snapshot.set_lists}

        with self._lock:
            self._songs = songs
            self._set_lists = set_lists
            self._titles = titles

        logger.info(f"Imported {len(songs)} songs and {len(set_lists)} set lists")
