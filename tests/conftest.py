"""Shared fixtures for lyrics-manager tests."""

import pytest

from lyrics_manager.store.catalog import CatalogStore


class StepClock:
    """Nanosecond clock advancing by a fixed step on every reading."""

    def __init__(self, start: int = 1_700_000_000_000_000_000, step: int = 1_000):
        self.now = start
        self.step = step

    def __call__(self) -> int:
        self.now += self.step
        return self.now


@pytest.fixture
def clock():
    """Deterministic clock for timestamp assertions."""
    return StepClock()


@pytest.fixture
def store(clock):
    """Empty catalog store driven by the deterministic clock."""
    return CatalogStore(clock=clock)


@pytest.fixture
def song_fields():
    """Keyword arguments for a typical song save."""
    return {
        "title": "Amazing Grace",
        "artist": "John Newton",
        "lyrics": "Amazing grace, how sweet the sound",
        "scroll_speed": 4,
        "tempo": 72,
        "background_color": "#000000",
        "text_color": "#ffffff",
        "text_size": 28,
        "is_bold": False,
        "lines_per_scroll": 2,
    }


@pytest.fixture
def three_songs(store):
    """Store holding three songs; returns their IDs in creation order."""
    ids = []
    for title in ("First", "Second", "Third"):
        ids.append(store.save_song(title=title, lyrics=f"{title} verse").song_id)
    return ids


@pytest.fixture
def config_file(tmp_path):
    """Config file pointing the library, exports and logs into tmp_path."""
    config_path = tmp_path / "config.toml"
    config_path.write_text(
        "[library]\n"
        f'path = "{(tmp_path / "library.json").as_posix()}"\n'
        f'export_dir = "{(tmp_path / "exports").as_posix()}"\n'
        "\n"
        "[logging]\n"
        f'dir = "{(tmp_path / "logs").as_posix()}"\n'
    )
    return config_path
