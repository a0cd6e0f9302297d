"""Tests for data CLI commands."""

import json

from typer.testing import CliRunner

from lyrics_manager.config import LibraryConfig
from lyrics_manager.main import app
from lyrics_manager.services.library import LibraryFile

runner = CliRunner()


def _invoke(config_file, *args, **kwargs):
    return runner.invoke(app, [*args, "--config", str(config_file)], **kwargs)


def _library(config_file):
    return LibraryFile(config_file.parent / "library.json").load()


def _seed(config_file):
    _invoke(config_file, "song", "add", "Grace", "--lyrics", "Amazing grace")
    _invoke(config_file, "song", "add", "Vision")
    song_ids = [song.id for song in _library(config_file).get_all_songs()]
    _invoke(config_file, "setlist", "create", "Sunday", *song_ids)
    return song_ids


class TestDataExport:
    """Tests for 'data export' command."""

    def test_default_location(self, config_file, tmp_path):
        _seed(config_file)

        result = _invoke(config_file, "data", "export")

        assert result.exit_code == 0
        assert "Exported 2 songs" in result.output
        document = json.loads((tmp_path / "exports" / "Lyrics Manager.json").read_text())
        assert [song["title"] for song in document["songs"]] == ["Grace", "Vision"]
        assert len(document["setLists"]) == 1
        assert document["version"] == "1.0"
        assert document["settings"]["defaultTempo"] == 120

    def test_explicit_output(self, config_file, tmp_path):
        output = tmp_path / "backup.json"

        result = _invoke(config_file, "data", "export", "--output", str(output))

        assert result.exit_code == 0
        assert json.loads(output.read_text())["songs"] == []


class TestDataImport:
    """Tests for 'data import' command."""

    def test_replaces_library(self, config_file, tmp_path):
        _seed(config_file)
        backup = tmp_path / "backup.json"
        _invoke(config_file, "data", "export", "--output", str(backup))
        _invoke(config_file, "song", "add", "Extra")

        result = _invoke(config_file, "data", "import", str(backup), "--yes")

        assert result.exit_code == 0
        assert "Imported 2 songs and 1 set lists" in result.output
        titles = sorted(song.title for song in _library(config_file).get_all_songs())
        assert titles == ["Grace", "Vision"]

    def test_restores_settings(self, config_file, tmp_path):
        backup = tmp_path / "backup.json"
        backup.write_text(
            json.dumps({"songs": [], "setLists": [], "settings": {"defaultTempo": "96", "defaultIsBold": True}})
        )

        result = _invoke(config_file, "data", "import", str(backup), "--yes")

        assert result.exit_code == 0
        config = LibraryConfig.load(config_file)
        assert config.display.default_tempo == 96
        assert config.display.default_is_bold is True
        assert config.library_path == tmp_path / "library.json"

    def test_declined(self, config_file, tmp_path):
        _seed(config_file)
        backup = tmp_path / "backup.json"
        backup.write_text(json.dumps({"songs": [], "setLists": []}))

        result = _invoke(config_file, "data", "import", str(backup), input="n\n")

        assert result.exit_code == 1
        assert len(_library(config_file).get_all_songs()) == 2

    def test_invalid_backup(self, config_file, tmp_path):
        _seed(config_file)
        backup = tmp_path / "backup.json"
        backup.write_text(json.dumps({"songs": [{"title": "no id"}], "setLists": []}))

        result = _invoke(config_file, "data", "import", str(backup), "--yes")

        assert result.exit_code == 1
        assert "Invalid data" in result.output
        assert len(_library(config_file).get_all_songs()) == 2


    def test_backup_entry_not_an_object(self, config_file, tmp_path):
        _seed(config_file)
        backup = tmp_path / "backup.json"
        backup.write_text(json.dumps({"songs": ["oops"], "setLists": []}))

        result = _invoke(config_file, "data", "import", str(backup), "--yes")

        assert result.exit_code == 1
        assert "Invalid data" in result.output
        assert len(_library(config_file).get_all_songs()) == 2


class TestDataStatus:
    """Tests for 'data status' command."""

    def test_status_empty(self, config_file):
        result = _invoke(config_file, "data", "status")

        assert result.exit_code == 0
        assert "Songs: 0" in result.output

    def test_status_counts(self, config_file):
        _seed(config_file)

        result = _invoke(config_file, "data", "status")

        assert result.exit_code == 0
        assert "Songs: 2" in result.output
        assert "Set Lists: 1" in result.output


class TestLibraryConfigErrors:
    """Commands report unusable configuration."""

    def test_missing_config(self, tmp_path):
        result = runner.invoke(app, ["data", "status", "--config", str(tmp_path / "missing.toml")])

        assert result.exit_code == 1
        assert "Config file not found" in result.output

    def test_corrupt_library(self, config_file):
        (config_file.parent / "library.json").write_text("{broken")

        result = _invoke(config_file, "song", "list")

        assert result.exit_code == 1
        assert "Error" in result.output
