"""Normalization of lyric color annotations.

Color ranges are half-open [start, end) spans over a song's lyrics. Editing
the lyrics can leave ranges out of bounds or overlapping, so every save and
every preview runs them through normalize_color_ranges() first.
"""

from typing import Iterable, Optional

from lyrics_manager.store.models import ColorRange


def normalize_color_ranges(text: str, ranges: Iterable[ColorRange]) -> list[ColorRange]:
    """Produce a canonical color range list for the given text.

    Ranges that are empty, inverted or out of bounds are dropped. The rest
    are sorted by start; a range overlapping an earlier accepted one is
    dropped entirely, so the first range by start wins.

    Args:
        text: The lyrics the ranges decorate
        ranges: Candidate color ranges in any order

    Returns:
        Sorted, non-overlapping, in-bounds color ranges
    """
    length = len(text)
    valid = [r for r in ranges if 0 <= r.start < r.end <= length]
    valid.sort(key=lambda r: r.start)

    accepted: list[ColorRange] = []
    cursor = 0
    for color_range in valid:
        if color_range.start >= cursor:
            accepted.append(color_range)
            cursor = color_range.end
    return accepted


def split_segments(text: str, ranges: Iterable[ColorRange]) -> list[tuple[str, Optional[str]]]:
    """Split text into consecutive (fragment, color) segments for display.

    Uncolored fragments carry a color of None. Ranges are normalized first,
    so the segments always cover the text exactly once.

    Args:
        text: The lyrics to split
        ranges: Color ranges over the text

    Returns:
        List of (fragment, color) tuples in text order
    """
    segments: list[tuple[str, Optional[str]]] = []
    last = 0
    for color_range in normalize_color_ranges(text, ranges):
        if color_range.start > last:
            segments.append((text[last:color_range.start], None))
        segments.append((text[color_range.start:color_range.end], color_range.color))
        last = color_range.end
    if last < len(text):
        segments.append((text[last:], None))
    return segments
