"""Import an artist's songs and run them through the lyric pipeline."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional

from lyric_pic.core.titles import album_type_for, pick_canonical_versions

from ..data.database import SQLiteLyricRepository
from .reconciliation import LyricPipelineError, LyricReconciler
from ...utils.observability import get_logger


@dataclass
class SongSource:
    title: str
    lyrics: Optional[str]
    album: Optional[str] = None
    release_year: Optional[int] = None

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "SongSource":
        year = payload.get("release_year")
        return cls(
            title=str(payload.get("title") or "").strip(),
            lyrics=payload.get("lyrics"),
            album=payload.get("album"),
            release_year=int(year) if year not in (None, "") else None,
        )


@dataclass
class ImportSummary:
    artist_id: int
    imported: int = 0
    playable: int = 0
    skipped: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)


class CatalogImporter:
    """Adds new songs for an artist, processes them and refreshes counts."""

    def __init__(
        self,
        repository: SQLiteLyricRepository,
        reconciler: Optional[LyricReconciler] = None,
    ) -> None:
        self.repository = repository
        self.reconciler = reconciler or LyricReconciler(repository)
        self._logger = get_logger(__name__).bind(component="catalog_importer")

    def import_artist(self, artist_name: str, songs: Iterable[SongSource]) -> ImportSummary:
        """Import ``songs`` for ``artist_name``.

        Live, acoustic, remix and demo versions are skipped and re-releases of
        one title collapse to the preferred version. Songs already stored or
        without lyrics are skipped. A song that fails processing is recorded
        and the import continues.
        """

        artist_id = self.repository.create_artist(artist_name)
        summary = ImportSummary(artist_id=artist_id)
        entries = [song for song in songs if song.title]
        chosen = pick_canonical_versions(
            entries,
            title_of=lambda song: song.title,
            album_type_of=lambda song: album_type_for(song.album),
        )
        chosen_ids = {id(song) for song in chosen}
        summary.skipped.extend(song.title for song in entries if id(song) not in chosen_ids)

        album_ids: Dict[str, int] = {}
        for song in chosen:
            if self.repository.find_song_by_name(artist_id, song.title) is not None:
                summary.skipped.append(song.title)
                continue
            if not (song.lyrics or "").strip():
                summary.skipped.append(song.title)
                continue

            album_id = None
            if song.album:
                album_id = album_ids.get(song.album)
                if album_id is None:
                    album_id = self.repository.create_album(
                        artist_id,
                        song.album,
                        album_type=album_type_for(song.album),
                        release_year=song.release_year,
                    )
                    album_ids[song.album] = album_id

            song_id = self.repository.add_song(artist_id, song.title, song.lyrics, album_id=album_id)
            summary.imported += 1
            try:
                result = self.reconciler.process_song(song_id)
            except (LyricPipelineError, sqlite3.Error) as exc:
                summary.failed.append(song.title)
                self._logger.warning(
                    "Song processing failed during import",
                    context={"song_id": song_id, "title": song.title, "error": str(exc)},
                )
                continue
            if result.playable:
                summary.playable += 1

        self.reconciler.reset_artist_lyric_counts(artist_id)
        self._logger.info(
            "Artist import complete",
            context={
                "artist": artist_name,
                "imported": summary.imported,
                "playable": summary.playable,
                "skipped": len(summary.skipped),
                "failed": len(summary.failed),
            },
        )
        return summary


__all__ = ["CatalogImporter", "ImportSummary", "SongSource"]
