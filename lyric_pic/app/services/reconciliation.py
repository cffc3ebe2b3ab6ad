"""Reconcile normalized lyric counts with stored root words and song links."""

from __future__ import annotations

import sqlite3
from collections import Counter
from dataclasses import dataclass
from typing import Dict, Iterable, Mapping, Optional, Set, Union

from lyric_pic.core.blocklist import BlocklistSnapshot
from lyric_pic.core.normalizer import NormalizedLyrics, expand_irregular_form, normalize
from lyric_pic.core.ranking import aggregate_stem_groups, resolve_selectable
from lyric_pic.core.stemmer import stem
from lyric_pic.core.titles import is_in_title

from ..data.database import SQLiteLyricRepository
from ..data.models import (
    STATUS_COMPLETED,
    STATUS_FAILED,
    STATUS_NEW,
    STATUS_PROCESSING,
    ArtistLyricStats,
    SongLyricLink,
)
from ...utils.observability import (
    add_span_attributes,
    create_counter,
    create_histogram,
    get_logger,
    record_exception,
    start_span,
)
from ...utils.telemetry import StructuredTelemetry

MIN_PLAYABLE_WORDS = 3
TOO_FEW_WORDS = "too_few_words"


class LyricPipelineError(Exception):
    """Base error for lyric processing failures that are not storage faults."""


class SongNotFoundError(LyricPipelineError, LookupError):
    pass


class MissingLyricsError(LyricPipelineError):
    pass


@dataclass
class ReconcileResult:
    song_id: int
    word_count: int
    selectable_count: int
    playable: bool


def _is_regular_form(word: str) -> bool:
    return expand_irregular_form(word) is None


class LyricReconciler:
    """Applies the stem-group selectability rule to songs and artists."""

    def __init__(
        self,
        repository: SQLiteLyricRepository,
        *,
        telemetry: Optional[StructuredTelemetry] = None,
        min_playable_words: int = MIN_PLAYABLE_WORDS,
    ) -> None:
        self.repository = repository
        self.telemetry = telemetry or StructuredTelemetry()
        self.min_playable_words = max(1, int(min_playable_words))
        self._logger = get_logger(__name__).bind(component="lyric_reconciler")

        self._metric_reconciled = create_counter(
            "lyric_songs_reconciled_total",
            "Songs whose lyric links were rebuilt.",
        )
        self._metric_failures = create_counter(
            "lyric_reconcile_failures_total",
            "Song reconciliations rolled back after an error.",
        )
        self._metric_duration = create_histogram(
            "lyric_reconcile_seconds",
            "Time spent rebuilding one song's lyric links.",
        )

    # ------------------------------------------------------------------
    # Per-song processing
    # ------------------------------------------------------------------
    def reconcile(
        self,
        song_id: int,
        word_counts: Union[NormalizedLyrics, Mapping[str, int]],
    ) -> ReconcileResult:
        """Rebuild every link of ``song_id`` from ``word_counts``.

        Prior links are cleared first, so replaying the same input leaves the
        same state. The rebuild is one transaction: on error nothing written
        here survives, the song is marked failed and the error propagates.
        """

        normalized = self._coerce(word_counts)
        song = self.repository.get_song(song_id)
        if song is None:
            raise SongNotFoundError(f"Song {song_id} does not exist")

        with start_span("lyrics.reconcile", {"song.id": song_id}) as span:
            try:
                with self._metric_duration.time(), self.telemetry.timer(
                    "reconcile", {"song_id": song_id}
                ):
                    result = self._reconcile_in_transaction(song_id, song.name, normalized)
            except Exception as exc:
                record_exception(span, exc)
                self._metric_failures.inc()
                self.telemetry.increment("reconcile.failed")
                self._logger.error(
                    "Song reconciliation failed",
                    context={"song_id": song_id, "error": str(exc)},
                )
                self._mark_failed(song_id)
                raise

            add_span_attributes(
                span,
                {"song.words": result.word_count, "song.playable": result.playable},
            )

        self._metric_reconciled.inc()
        self.telemetry.increment("reconcile.completed")
        self._logger.info(
            "Song reconciled",
            context={
                "song_id": song_id,
                "words": result.word_count,
                "selectable": result.selectable_count,
                "playable": result.playable,
            },
        )
        return result

    def _reconcile_in_transaction(
        self,
        song_id: int,
        title: str,
        normalized: NormalizedLyrics,
    ) -> ReconcileResult:
        repo = self.repository
        counts = normalized.counts
        with repo.transaction() as conn:
            repo.clear_song_lyrics(song_id, conn=conn)
            lyric_ids = {word: repo.find_or_create_lyric(word, conn=conn) for word in sorted(counts)}
            stored = repo.get_lyrics_by_words(lyric_ids, conn=conn)

            def eligible(word: str) -> bool:
                lyric = stored.get(word)
                if lyric is not None and lyric.is_blocklisted:
                    return False
                return normalized.is_eligible(word) and _is_regular_form(word)

            flags = resolve_selectable(counts, eligible)
            links = [
                SongLyricLink(
                    song_id=song_id,
                    lyric_id=lyric_ids[word],
                    root_word=word,
                    count=counts[word],
                    is_selectable=flags[word],
                    is_in_title=is_in_title(word, title),
                    is_expanded=word in normalized.unselectable,
                )
                for word in sorted(counts)
            ]
            repo.insert_song_lyrics(links, conn=conn)

            playable_words = repo.count_playable_words(song_id, conn=conn)
            playable = playable_words >= self.min_playable_words
            repo.set_song_selectable(
                song_id,
                playable,
                status=STATUS_COMPLETED,
                reason=TOO_FEW_WORDS,
                conn=conn,
            )

        return ReconcileResult(
            song_id=song_id,
            word_count=len(links),
            selectable_count=sum(1 for link in links if link.is_selectable),
            playable=playable,
        )

    def _mark_failed(self, song_id: int) -> None:
        try:
            self.repository.set_song_status(song_id, STATUS_FAILED)
        except sqlite3.Error as exc:
            self._logger.error(
                "Unable to record failed status",
                context={"song_id": song_id, "error": str(exc)},
            )

    @staticmethod
    def _coerce(word_counts: Union[NormalizedLyrics, Mapping[str, int]]) -> NormalizedLyrics:
        if isinstance(word_counts, NormalizedLyrics):
            return word_counts
        counts = Counter(
            {str(word).lower(): int(count) for word, count in word_counts.items() if word and count > 0}
        )
        return NormalizedLyrics(counts=counts)

    def process_song(
        self,
        song_id: int,
        *,
        blocklist: Optional[BlocklistSnapshot] = None,
    ) -> ReconcileResult:
        """Normalize a stored song's lyrics and reconcile them.

        Without an explicit ``blocklist`` a fresh snapshot is read from the
        repository.
        """

        song = self.repository.get_song(song_id)
        if song is None:
            raise SongNotFoundError(f"Song {song_id} does not exist")
        if not (song.lyrics_full_text or "").strip():
            self.repository.set_song_status(song_id, STATUS_FAILED)
            raise MissingLyricsError(f"Song {song_id} has no lyrics")

        self.repository.set_song_status(song_id, STATUS_PROCESSING)
        snapshot = blocklist if blocklist is not None else self.repository.load_blocklist()
        with self.telemetry.timer("normalize", {"song_id": song_id}):
            normalized = normalize(song.lyrics_full_text, snapshot)
        return self.reconcile(song_id, normalized)

    def clear_song(self, song_id: int) -> int:
        with self.repository.transaction() as conn:
            removed = self.repository.clear_song_lyrics(song_id, conn=conn)
            self.repository.set_song_status(song_id, STATUS_NEW, conn=conn)
        self._logger.info("Song lyrics cleared", context={"song_id": song_id, "links": removed})
        return removed

    # ------------------------------------------------------------------
    # Batch operations
    # ------------------------------------------------------------------
    def recalculate_selectable(self, song_ids: Optional[Iterable[int]] = None) -> int:
        """Re-rank stored links of each song; returns the number of songs updated."""

        targets = list(song_ids) if song_ids is not None else self.repository.list_song_ids()
        updated = 0
        for song_id in targets:
            with self.repository.transaction() as conn:
                links = self.repository.fetch_song_lyrics(song_id, conn=conn)
                if not links:
                    continue
                by_word = {link.root_word: link for link in links}
                counts = {word: link.count for word, link in by_word.items()}

                def eligible(word: str) -> bool:
                    link = by_word[word]
                    return not (link.is_blocklisted or link.is_expanded) and _is_regular_form(word)

                flags = resolve_selectable(counts, eligible)
                self.repository.set_link_flags(
                    song_id,
                    {by_word[word].lyric_id: flag for word, flag in flags.items()},
                    conn=conn,
                )
            updated += 1
            if updated % 100 == 0:
                self._logger.info(
                    "Selectability recalculation progress",
                    context={"processed": updated, "total": len(targets)},
                )
        self.telemetry.increment("recalculate.songs", updated)
        self._logger.info("Selectability recalculated", context={"songs": updated})
        return updated

    def recheck_unplayable_songs(self) -> Dict[str, int]:
        """Toggle song selectability by the number of usable clue words.

        Songs disabled for any reason other than too few words are left alone.
        """

        marked_unplayable = 0
        marked_playable = 0
        for song_id in self.repository.list_song_ids():
            song = self.repository.get_song(song_id)
            if song is None:
                continue
            words = self.repository.count_playable_words(song_id)
            if words < self.min_playable_words and song.is_selectable:
                self.repository.set_song_selectable(song_id, False, reason=TOO_FEW_WORDS)
                marked_unplayable += 1
                self._logger.info(
                    "Song marked unplayable",
                    context={"song_id": song_id, "name": song.name, "words": words},
                )
            elif (
                words >= self.min_playable_words
                and not song.is_selectable
                and song.unplayable_reason == TOO_FEW_WORDS
            ):
                self.repository.set_song_selectable(song_id, True)
                marked_playable += 1
                self._logger.info(
                    "Song marked playable",
                    context={"song_id": song_id, "name": song.name, "words": words},
                )
        return {"unplayable": marked_unplayable, "playable": marked_playable}

    def reset_artist_lyric_counts(self, artist_id: int) -> int:
        """Recompute song and occurrence counts for every root word of an artist.

        Counts are taken over the artist's enabled songs and aggregated per
        stem group, so ``love``, ``loved`` and ``loving`` all report the songs
        any of them appears in. Returns the number of rows written.
        """

        with start_span("lyrics.reset_artist_counts", {"artist.id": artist_id}):
            with self.repository.transaction() as conn:
                rows = self.repository.fetch_artist_link_rows(artist_id, conn=conn)
                groups = aggregate_stem_groups((song_id, word, count) for song_id, _, word, count in rows)

                stats: Dict[int, ArtistLyricStats] = {}
                for _, lyric_id, word, _ in rows:
                    if lyric_id in stats:
                        continue
                    group = groups[stem(word)]
                    stats[lyric_id] = ArtistLyricStats(
                        artist_id=artist_id,
                        lyric_id=lyric_id,
                        song_count=group.song_count,
                        total_count=group.total_count,
                    )
                self.repository.replace_artist_lyric_stats(artist_id, list(stats.values()), conn=conn)

        self._logger.info(
            "Artist lyric counts reset",
            context={"artist_id": artist_id, "lyrics": len(stats), "stem_groups": len(groups)},
        )
        return len(stats)

    def cleanup_irregular_forms(self) -> Dict[str, int]:
        """Fold stored contractions, hyphenated and dropped-g words into their parts.

        Each link of an irregular root adds its count to the constituent words
        of the same song and is then marked expanded and non-selectable, so a
        second run finds nothing to do. Affected songs are re-ranked.
        """

        forms = 0
        expanded_links = 0
        affected: Set[int] = set()
        for lyric_id, root_word in self.repository.list_lyrics_with_pending_links():
            parts = expand_irregular_form(root_word)
            if parts is None:
                continue
            forms += 1
            with self.repository.transaction() as conn:
                part_ids = [self.repository.find_or_create_lyric(part, conn=conn) for part in parts]
                for link in self.repository.fetch_links_for_lyric(lyric_id, conn=conn):
                    if link.is_expanded:
                        continue
                    for part_id in part_ids:
                        self.repository.add_count_to_song(
                            link.song_id,
                            part_id,
                            link.count,
                            is_in_title=link.is_in_title,
                            conn=conn,
                        )
                    self.repository.mark_link_expanded(link.song_id, lyric_id, conn=conn)
                    expanded_links += 1
                    affected.add(link.song_id)
            self._logger.debug(
                "Irregular form expanded",
                context={"root_word": root_word, "parts": parts},
            )

        if affected:
            self.recalculate_selectable(sorted(affected))

        summary = {"forms": forms, "links": expanded_links, "songs": len(affected)}
        self._logger.info("Irregular form cleanup complete", context=summary)
        return summary


__all__ = [
    "LyricPipelineError",
    "LyricReconciler",
    "MIN_PLAYABLE_WORDS",
    "MissingLyricsError",
    "ReconcileResult",
    "SongNotFoundError",
    "TOO_FEW_WORDS",
]
