# -*- coding: utf-8 -*-
"""
Imports an artist's songs from a JSON file and processes their lyrics.

The file holds {"artist": "...", "songs": [{"title", "lyrics", "album",
"release_year"}, ...]}. Seeds the default blocklist on a fresh database.
Usage: python scripts/import_songs.py songs.json [db_path]
"""
import json
import sys

from lyric_pic.app.data.database import SQLiteLyricRepository, default_db_path
from lyric_pic.app.services.catalog import CatalogImporter, SongSource
from lyric_pic.utils.logging_config import configure_logging
from lyric_pic.utils.observability import get_logger


def main(source_path, db_path=None):
    configure_logging()
    logger = get_logger("scripts.import_songs")

    with open(source_path, encoding="utf-8") as handle:
        payload = json.load(handle)

    repository = SQLiteLyricRepository(db_path or default_db_path())
    if repository.ensure_database() == 0:
        repository.seed_blocklist()

    songs = [SongSource.from_mapping(entry) for entry in payload.get("songs", [])]
    summary = CatalogImporter(repository).import_artist(payload["artist"], songs)
    repository.close()

    logger.info(
        "Import finished",
        context={
            "artist_id": summary.artist_id,
            "imported": summary.imported,
            "playable": summary.playable,
            "skipped": summary.skipped,
            "failed": summary.failed,
        },
    )
    return 1 if summary.failed else 0


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(2)
    sys.exit(main(sys.argv[1], sys.argv[2] if len(sys.argv) > 2 else None))
