# -*- coding: utf-8 -*-
"""
Processes songs whose lyrics are new or failed, then refreshes artist counts.

Pass --all to reprocess every song.
Usage: python scripts/process_songs.py [db_path] [--all]
"""
import logging
import sys

from lyric_pic.app.data.database import SQLiteLyricRepository, default_db_path
from lyric_pic.app.data.models import STATUS_FAILED, STATUS_NEW, STATUS_PROCESSING
from lyric_pic.app.services.reconciliation import LyricPipelineError, LyricReconciler
from lyric_pic.utils.logging_config import configure_logging
from lyric_pic.utils.observability import get_logger
from lyric_pic.utils.telemetry import StructuredTelemetry, TelemetryLogger


def main(db_path=None, reprocess_all=False):
    configure_logging()
    logger = get_logger("scripts.process_songs")

    repository = SQLiteLyricRepository(db_path or default_db_path())
    repository.ensure_database()
    telemetry = StructuredTelemetry(listeners=[TelemetryLogger(level_map={"timing": logging.DEBUG})])
    reconciler = LyricReconciler(repository, telemetry=telemetry)

    telemetry.start_run("process_songs")
    statuses = None if reprocess_all else (STATUS_NEW, STATUS_PROCESSING, STATUS_FAILED)
    song_ids = repository.list_song_ids(statuses=statuses)
    blocklist = repository.load_blocklist()

    failed = 0
    for song_id in song_ids:
        try:
            reconciler.process_song(song_id, blocklist=blocklist)
        except LyricPipelineError as exc:
            failed += 1
            logger.warning("Song skipped", context={"song_id": song_id, "error": str(exc)})

    for artist_id in repository.list_artist_ids():
        reconciler.reset_artist_lyric_counts(artist_id)

    logger.info(
        "Processing complete",
        context={"songs": len(song_ids), "failed": failed, "telemetry": telemetry.snapshot()["counters"]},
    )
    repository.close()
    return 1 if failed else 0


if __name__ == "__main__":
    args = [arg for arg in sys.argv[1:] if arg != "--all"]
    sys.exit(main(args[0] if args else None, reprocess_all="--all" in sys.argv[1:]))
