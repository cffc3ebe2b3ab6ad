import importlib.util
import json
from pathlib import Path

import pytest

from lyric_pic.app.data.database import SQLiteLyricRepository
from lyric_pic.utils import logging_config

SCRIPTS_DIR = Path(__file__).resolve().parent.parent / "scripts"


def _load_script(name):
    spec = importlib.util.spec_from_file_location(f"lyric_pic_script_{name}", SCRIPTS_DIR / f"{name}.py")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture(autouse=True)
def _skip_logging_setup(monkeypatch):
    monkeypatch.setattr(logging_config, "_CONFIGURED", True)


@pytest.fixture
def songs_file(tmp_path):
    payload = {
        "artist": "Script Artist",
        "songs": [
            {
                "title": "Wildest Dreams",
                "lyrics": "Say you'll remember me standing in a nice dress staring at the sunset babe",
                "album": "1989",
                "release_year": 2014,
            },
            {"title": "Wildest Dreams (Live)", "lyrics": "nice dress sunset"},
            {"title": "Empty", "lyrics": ""},
        ],
    }
    path = tmp_path / "songs.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_import_process_and_cleanup_scripts(tmp_path, songs_file):
    db_path = str(tmp_path / "scripts.db")

    assert _load_script("import_songs").main(str(songs_file), db_path) == 0
    assert _load_script("process_songs").main(db_path, reprocess_all=True) == 0
    assert _load_script("cleanup_lyrics").main(db_path) == 0

    repository = SQLiteLyricRepository(db_path)
    try:
        (artist_id,) = repository.list_artist_ids()
        song_ids = repository.list_song_ids(artist_id=artist_id)
        assert len(song_ids) == 1
        song = repository.get_song(song_ids[0])
        assert song.name == "Wildest Dreams"
        assert song.is_selectable
        assert repository.get_lyric("the").is_blocklisted

        links = {link.root_word: link for link in repository.fetch_song_lyrics(song.id)}
        assert links["sunset"].is_selectable
        assert not links["you'll"].is_selectable
        assert repository.fetch_artist_lyric_stats(artist_id)
    finally:
        repository.close()
