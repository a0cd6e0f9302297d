"""Tests for library and backup files."""

import json
import re

import pytest

from lyrics_manager.config import DisplaySettings
from lyrics_manager.services.library import (
    FORMAT_VERSION,
    LibraryFile,
    LibraryFileError,
    build_backup,
    collapse_songs,
    decode_backup,
    export_backup,
    export_timestamp,
    import_backup,
    read_json_file,
    write_json_file,
)
from lyrics_manager.store.catalog import CatalogStore
from lyrics_manager.store.models import ColorRange, Song


@pytest.fixture
def populated_store(store):
    """Store with two songs, one set list and a remembered export."""
    grace = store.save_song(
        title="amazing grace", lyrics="Amazing grace", color_ranges=[ColorRange(0, 7, "#f00")]
    ).song_id
    vision = store.save_song(title="Be Thou My Vision", lyrics="Be Thou").song_id
    set_list_id = store.create_set_list("Sunday", [vision, grace])
    store.save_file_handle_reference(set_list_id, "/exports/Sunday_setlist.json", is_set_list=True)
    return store


class TestJsonFiles:
    """Tests for the JSON file helpers."""

    def test_write_and_read(self, tmp_path):
        path = tmp_path / "deep" / "file.json"

        write_json_file(path, {"title": "Ναί"})

        assert read_json_file(path) == {"title": "Ναί"}
        assert not (tmp_path / "deep" / ".file.json.tmp").exists()

    def test_read_missing(self, tmp_path):
        with pytest.raises(LibraryFileError, match="Failed to read"):
            read_json_file(tmp_path / "missing.json")

    def test_read_invalid_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json")

        with pytest.raises(LibraryFileError) as exc_info:
            read_json_file(path)

        assert isinstance(exc_info.value.cause, json.JSONDecodeError)

    def test_read_non_object(self, tmp_path):
        path = tmp_path / "list.json"
        path.write_text("[]")

        with pytest.raises(LibraryFileError, match="expected a JSON object"):
            read_json_file(path)

    def test_export_timestamp_format(self):
        assert re.fullmatch(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z", export_timestamp())


class TestCollapseSongs:
    """Tests for collapse_songs()."""

    def test_latest_update_wins(self):
        songs = [
            Song(id="a", title="Old", updated_at=1),
            Song(id="b", title="Other", updated_at=5),
            Song(id="a", title="New", updated_at=3),
            Song(id="a", title="Stale", updated_at=2),
        ]

        collapsed = collapse_songs(songs)

        assert [(song.id, song.title) for song in collapsed] == [("a", "New"), ("b", "Other")]


class TestBackupDocument:
    """Tests for building and decoding backup documents."""

    def test_build_backup(self, populated_store):
        document = build_backup(populated_store, DisplaySettings(default_tempo=90))

        assert [song["title"] for song in document["songs"]] == ["amazing grace", "Be Thou My Vision"]
        assert document["setLists"][0]["name"] == "Sunday"
        assert document["settings"]["defaultTempo"] == 90
        assert document["version"] == FORMAT_VERSION
        assert document["exportDate"].endswith("Z")
        assert "fileHandles" not in document

    def test_default_settings(self, store):
        assert build_backup(store)["settings"] == DisplaySettings().to_backup_dict()

    def test_decode_orders_by_update(self, tmp_path):
        data = {
            "songs": [
                Song(id="b", title="Same", updated_at=9).to_dict(),
                Song(id="a", title="same", updated_at=4).to_dict(),
            ],
            "setLists": [],
        }

        snapshot, settings = decode_backup(data, tmp_path / "backup.json")

        assert [song.id for song in snapshot.songs] == ["a", "b"]
        assert settings is None

    def test_decode_settings(self, tmp_path):
        data = {"songs": [], "setLists": [], "settings": {"defaultTextSize": "40"}}

        _, settings = decode_backup(data, tmp_path / "backup.json")

        assert settings.default_text_size == 40

    def test_decode_invalid(self, tmp_path):
        with pytest.raises(LibraryFileError, match="Invalid data"):
            decode_backup({"songs": [{"id": "x"}]}, tmp_path / "backup.json")

    def test_decode_wrong_item_type(self, tmp_path):
        with pytest.raises(LibraryFileError):
            decode_backup({"songs": ["not a song"]}, tmp_path / "backup.json")

    def test_decode_settings_bool_string(self, tmp_path):
        _, settings = decode_backup({"settings": {"defaultIsBold": "false"}}, tmp_path / "backup.json")

        assert settings.default_is_bold is False

    def test_decode_settings_wrong_type(self, tmp_path):
        with pytest.raises(LibraryFileError, match="defaultTempo"):
            decode_backup({"settings": {"defaultTempo": "fast"}}, tmp_path / "backup.json")

    def test_decode_wrong_set_list_type(self, tmp_path):
        with pytest.raises(LibraryFileError, match="must be an object"):
            decode_backup({"songs": [], "setLists": [42]}, tmp_path / "backup.json")


class TestExportImportBackup:
    """Tests for backup files."""

    def test_round_trip(self, populated_store, tmp_path):
        path = tmp_path / "Lyrics Manager.json"
        export_backup(populated_store, path, DisplaySettings(default_is_bold=True))

        target = CatalogStore()
        target.save_song(title="Will be replaced")
        snapshot, settings = import_backup(target, path)

        assert len(snapshot.songs) == 2
        assert settings.default_is_bold is True
        assert sorted(song.title for song in target.get_all_songs()) == ["Be Thou My Vision", "amazing grace"]
        set_list = target.get_all_set_lists()[0]
        assert [song.title for song in target.get_songs_in_set_list(set_list.id)] == [
            "Be Thou My Vision",
            "amazing grace",
        ]
        assert target.find_title_conflict("Will be replaced") is None

    def test_import_keeps_store_on_bad_file(self, populated_store, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"songs": [{"title": "missing id"}], "setLists": []}))

        with pytest.raises(LibraryFileError):
            import_backup(populated_store, path)

        assert len(populated_store.get_all_songs()) == 2


class TestLibraryFile:
    """Tests for LibraryFile."""

    def test_missing_file_is_empty(self, tmp_path):
        library = LibraryFile(tmp_path / "library.json")

        store = library.load()

        assert library.exists() is False
        assert store.get_all_songs() == []

    def test_save_and_load(self, populated_store, tmp_path):
        library = LibraryFile(tmp_path / "library.json")

        library.save(populated_store, DisplaySettings())
        loaded = library.load()

        assert library.exists() is True
        assert {song.id for song in loaded.get_all_songs()} == {
            song.id for song in populated_store.get_all_songs()
        }
        assert loaded.export_data().set_lists == populated_store.export_data().set_lists
        grace = next(song for song in loaded.get_all_songs() if song.title == "amazing grace")
        assert grace.color_ranges == [ColorRange(0, 7, "#f00")]
        assert loaded.get_all_file_handle_references() == populated_store.get_all_file_handle_references()

    def test_load_into_given_store(self, populated_store, tmp_path):
        library = LibraryFile(tmp_path / "library.json")
        library.save(populated_store)
        target = CatalogStore()

        assert library.load(target) is target
        assert len(target.get_all_songs()) == 2

    def test_file_handles_written(self, populated_store, tmp_path):
        path = tmp_path / "library.json"
        LibraryFile(path).save(populated_store)

        handles = json.loads(path.read_text())["fileHandles"]

        assert list(handles.values()) == [{"path": "/exports/Sunday_setlist.json", "isSetList": True}]

    def test_bad_file_handles(self, tmp_path):
        path = tmp_path / "library.json"
        path.write_text(json.dumps({"songs": [], "setLists": [], "fileHandles": ["nope"]}))

        with pytest.raises(LibraryFileError, match="fileHandles"):
            LibraryFile(path).load()

    @pytest.mark.parametrize("handles", [{"x": "nope"}, {"x": {"isSetList": True}}])
    def test_bad_handle_leaves_store_untouched(self, populated_store, tmp_path, handles):
        path = tmp_path / "library.json"
        path.write_text(json.dumps({"songs": [], "setLists": [], "fileHandles": handles}))
        before = populated_store.export_data()

        with pytest.raises(LibraryFileError):
            LibraryFile(path).load(populated_store)

        assert populated_store.export_data() == before
        assert len(populated_store.get_all_file_handle_references()) == 1

    def test_corrupt_file(self, tmp_path):
        path = tmp_path / "library.json"
        path.write_text("{")

        with pytest.raises(LibraryFileError):
            LibraryFile(path).load()
