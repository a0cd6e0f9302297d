"""Title index mapping normalized titles to the owning song.

The index is a conflict-detection hint rather than a uniqueness constraint:
callers look up a title before saving, decide how to resolve a clash, and the
store then writes unconditionally, repointing the entry at the newest writer.
"""

from typing import Optional


def normalize_title(title: str) -> str:
    """Normalize a title for uniqueness comparison.

    Args:
        title: Raw song title

    Returns:
        Lower-cased, whitespace-trimmed title
    """
    return title.strip().lower()


class TitleIndex:
    """Normalized title -> song ID lookup with one entry per live title."""

    def __init__(self) -> None:
        self._entries: dict[str, str] = {}

    def resolve(self, key: str) -> Optional[str]:
        """Get the song owning a normalized title, if any."""
        return self._entries.get(key)

    def assign(self, key: str, song_id: str) -> None:
        """Point a normalized title at a song, replacing any previous owner."""
        self._entries[key] = song_id

    def release(self, key: str, song_id: str) -> bool:
        """Remove the entry for a title if it still points at the given song.

        Args:
            key: Normalized title
            song_id: Song giving up the title

        Returns:
            True if the entry was removed
        """
        if self._entries.get(key) != song_id:
            return False
        del self._entries[key]
        return True
