"""Lyrics Manager - a catalog of songs and set lists for live performance.

This package provides:
- An in-memory catalog store for songs and ordered set lists
- Lyric color annotations kept consistent with the lyrics they decorate
- Library, backup and per-item JSON files
- The `lyrics-manager` command-line interface
"""

__version__ = "1.0.0"
