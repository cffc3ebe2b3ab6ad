# -*- coding: utf-8 -*-
"""
One-time cleanup of stored lyric data:
  - folds contractions, hyphenated compounds and dropped-g forms into their parts
  - recalculates per-song selectable flags
  - rechecks which songs have enough clue words
  - refreshes artist lyric counts and drops unused root words
Usage: python scripts/cleanup_lyrics.py [db_path]
"""
import sys

from lyric_pic.app.data.database import SQLiteLyricRepository, default_db_path
from lyric_pic.app.services.reconciliation import LyricReconciler
from lyric_pic.utils.logging_config import configure_logging
from lyric_pic.utils.observability import get_logger


def main(db_path=None):
    configure_logging()
    logger = get_logger("scripts.cleanup_lyrics")

    repository = SQLiteLyricRepository(db_path or default_db_path())
    repository.ensure_database()
    reconciler = LyricReconciler(repository)

    expanded = reconciler.cleanup_irregular_forms()
    recalculated = reconciler.recalculate_selectable()
    playability = reconciler.recheck_unplayable_songs()
    for artist_id in repository.list_artist_ids():
        reconciler.reset_artist_lyric_counts(artist_id)
    deleted = repository.delete_unused_lyrics()
    repository.close()

    logger.info(
        "Cleanup complete",
        context={
            "expanded": expanded,
            "recalculated_songs": recalculated,
            "playability": playability,
            "deleted_lyrics": deleted,
        },
    )
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1] if len(sys.argv) > 1 else None))
