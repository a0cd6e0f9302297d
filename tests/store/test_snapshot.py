"""Tests for CatalogStore snapshot export and import."""

import pytest

from lyrics_manager.store.catalog import CatalogStore
from lyrics_manager.store.models import ColorRange, SetList, Snapshot, Song


class TestExportData:
    """Tests for export_data()."""

    def test_empty(self, store):
        snapshot = store.export_data()

        assert snapshot.songs == []
        assert snapshot.set_lists == []

    def test_full_read(self, store, three_songs):
        store.create_set_list("A", three_songs)
        store.delete_song(three_songs[0])

        snapshot = store.export_data()

        assert {song.id for song in snapshot.songs} == set(three_songs[1:])
        # Dangling references are exported as stored
        assert snapshot.set_lists[0].song_ids == three_songs


class TestImportData:
    """Tests for import_data()."""

    def test_empty_import_clears_everything(self, store, three_songs):
        store.create_set_list("A", three_songs)

        store.import_data({"songs": [], "setLists": []})

        snapshot = store.export_data()
        assert snapshot.songs == []
        assert snapshot.set_lists == []
        assert store.is_title_unique("First") is True

    def test_round_trip_into_new_store(self, store, three_songs):
        set_list_id = store.create_set_list("A", three_songs)
        payload = store.export_data().to_dict()

        other = CatalogStore()
        other.import_data(payload)

        assert {song.id for song in other.get_all_songs()} == set(three_songs)
        info = other.get_set_list_song_info(set_list_id)
        assert [entry.position for entry in info.song_positions] == [1, 2, 3]
        assert other.find_title_conflict("second") == three_songs[1]

    def test_last_title_writer_wins(self, store):
        snapshot = Snapshot(
            songs=[Song(id="a", title="Same"), Song(id="b", title=" same ")],
            set_lists=[],
        )

        store.import_data(snapshot)

        assert len(store.get_all_songs()) == 2
        assert store.find_title_conflict("same") == "b"

    def test_repeated_id_keeps_last_record(self, store):
        snapshot = Snapshot(songs=[Song(id="a", title="Old"), Song(id="a", title="New")])

        store.import_data(snapshot)

        assert store.get_song("a").title == "New"
        assert store.is_title_unique("old") is True

    def test_color_ranges_renormalized(self, store):
        song = Song(
            id="a",
            title="T",
            lyrics="abcdef",
            color_ranges=[ColorRange(2, 5, "#f00"), ColorRange(0, 3, "#0f0"), ColorRange(4, 9, "#00f")],
        )

        store.import_data(Snapshot(songs=[song]))

        assert store.get_song("a").color_ranges == [ColorRange(0, 3, "#0f0")]

    def test_bad_payload_leaves_store_untouched(self, store, three_songs):
        with pytest.raises(KeyError):
            store.import_data({"songs": [{"title": "no id"}], "setLists": []})

        assert {song.id for song in store.get_all_songs()} == set(three_songs)

    def test_new_writes_after_import(self, store):
        store.import_data(
            Snapshot(
                songs=[Song(id="a", title="T", created_at=10, updated_at=2_000_000_000_000_000_000)],
                set_lists=[SetList(id="l", name="L", song_ids=["a"])],
            )
        )

        store.save_song("a", title="T")
        store.move_song_in_set_list("l", "a", 1)

        song = store.get_song("a")
        assert song.created_at == 10
        assert song.updated_at > 2_000_000_000_000_000_000
