import sqlite3

import pytest
from prometheus_client import REGISTRY

from lyric_pic.app.data.models import STATUS_COMPLETED, STATUS_FAILED, STATUS_NEW
from lyric_pic.app.services.reconciliation import (
    TOO_FEW_WORDS,
    LyricPipelineError,
    MissingLyricsError,
    SongNotFoundError,
)
from lyric_pic.core.blocklist import EXPLICIT


def _links_by_word(repository, song_id):
    return {link.root_word: link for link in repository.fetch_song_lyrics(song_id)}


def test_reconcile_picks_one_winner_per_stem_group(repository, reconciler, make_song):
    song_id = make_song("Dance Tonight")
    result = reconciler.reconcile(
        song_id, {"dancing": 5, "dance": 5, "fire": 2, "rain": 1, "night": 1}
    )

    assert result.word_count == 5
    assert result.selectable_count == 4
    assert result.playable

    links = _links_by_word(repository, song_id)
    assert links["dance"].is_selectable
    assert not links["dancing"].is_selectable
    assert links["dance"].count == 5
    assert links["dance"].is_in_title
    assert links["night"].is_in_title
    assert not links["fire"].is_in_title

    song = repository.get_song(song_id)
    assert song.is_selectable
    assert song.load_status == STATUS_COMPLETED
    assert reconciler.telemetry.counter("reconcile.completed") == 1.0


def test_reconcile_prefers_higher_count(repository, reconciler, make_song):
    song_id = make_song("Tonight")
    reconciler.reconcile(song_id, {"dancing": 7, "dance": 2, "fire": 1, "rain": 1})
    links = _links_by_word(repository, song_id)
    assert links["dancing"].is_selectable
    assert not links["dance"].is_selectable


def test_reconcile_is_idempotent(repository, reconciler, make_song):
    song_id = make_song("Style")
    counts = {"dancing": 5, "dance": 5, "fire": 2, "rain": 1}
    reconciler.reconcile(song_id, counts)
    first = repository.fetch_song_lyrics(song_id)
    lyric_total = repository.ensure_database()

    reconciler.reconcile(song_id, counts)

    assert repository.fetch_song_lyrics(song_id) == first
    assert repository.ensure_database() == lyric_total


def test_reconcile_replaces_previous_links(repository, reconciler, make_song):
    song_id = make_song("Style")
    reconciler.reconcile(song_id, {"fire": 1, "rain": 1, "snow": 1})
    reconciler.reconcile(song_id, {"hail": 1, "wind": 1, "storm": 1})
    assert sorted(_links_by_word(repository, song_id)) == ["hail", "storm", "wind"]


def test_process_song_stores_contraction_as_unselectable(repository, reconciler, make_song):
    song_id = make_song("Journey", "Don't stop believing, don't stop")
    result = reconciler.process_song(song_id)

    links = _links_by_word(repository, song_id)
    assert links["don't"].count == 2
    assert not links["don't"].is_selectable
    assert links["don't"].is_expanded
    assert links["do"].count == 2
    assert links["not"].is_selectable
    assert links["stop"].is_selectable
    assert links["believing"].is_selectable
    assert result.selectable_count == 4


def test_blocklisted_word_never_wins(repository, reconciler, make_song):
    repository.blocklist_lyric("damn", EXPLICIT)
    song_id = make_song("Style")
    result = reconciler.reconcile(song_id, {"damn": 3, "fire": 1, "rain": 1, "snow": 1})

    links = _links_by_word(repository, song_id)
    assert not links["damn"].is_selectable
    assert result.selectable_count == 3
    assert result.playable


def test_song_with_too_few_words_is_unplayable(repository, reconciler, make_song):
    repository.seed_blocklist()
    song_id = make_song("Shake It Off", "Shake shake shake it off")
    result = reconciler.process_song(song_id)

    assert not result.playable
    song = repository.get_song(song_id)
    assert not song.is_selectable
    assert song.unplayable_reason == TOO_FEW_WORDS
    assert song.load_status == STATUS_COMPLETED
    assert not _links_by_word(repository, song_id)["it"].is_selectable


def test_failed_reconcile_rolls_back_and_marks_song_failed(
    repository, reconciler, make_song, monkeypatch
):
    song_id = make_song("Style")
    reconciler.reconcile(song_id, {"fire": 1, "rain": 1, "snow": 1})
    before = repository.fetch_song_lyrics(song_id)
    failures = REGISTRY.get_sample_value("lyric_reconcile_failures_total") or 0.0

    def boom(*args, **kwargs):
        raise sqlite3.OperationalError("disk I/O error")

    monkeypatch.setattr(repository, "insert_song_lyrics", boom)

    with pytest.raises(sqlite3.OperationalError):
        reconciler.reconcile(song_id, {"brandnew": 2, "fire": 1})

    assert repository.fetch_song_lyrics(song_id) == before
    assert repository.get_lyric("brandnew") is None
    assert repository.get_song(song_id).load_status == STATUS_FAILED
    assert REGISTRY.get_sample_value("lyric_reconcile_failures_total") == failures + 1
    assert reconciler.telemetry.counter("reconcile.failed") == 1.0


def test_unknown_song_raises(reconciler):
    with pytest.raises(SongNotFoundError):
        reconciler.reconcile(999, {"fire": 1})
    with pytest.raises(LookupError):
        reconciler.process_song(999)


def test_process_song_without_lyrics_fails(repository, reconciler, make_song):
    song_id = make_song("Instrumental", "   ")
    with pytest.raises(MissingLyricsError):
        reconciler.process_song(song_id)
    assert repository.get_song(song_id).load_status == STATUS_FAILED
    assert issubclass(MissingLyricsError, LyricPipelineError)


def test_clear_song_resets_status(repository, reconciler, make_song):
    song_id = make_song("Style", "fire rain snow")
    reconciler.process_song(song_id)

    assert reconciler.clear_song(song_id) == 3
    assert repository.fetch_song_lyrics(song_id) == []
    assert repository.get_song(song_id).load_status == STATUS_NEW


def test_reset_artist_lyric_counts_aggregates_stem_groups(
    repository, reconciler, make_song, artist_id
):
    first = make_song("One")
    second = make_song("Two")
    reconciler.reconcile(first, {"love": 2, "fire": 1, "rain": 1})
    reconciler.reconcile(second, {"loved": 1, "loving": 3, "snow": 1, "hail": 1})

    assert reconciler.reset_artist_lyric_counts(artist_id) == 7

    stats = repository.fetch_artist_lyric_stats(artist_id)
    love = stats[repository.get_lyric("love").id]
    loving = stats[repository.get_lyric("loving").id]
    fire = stats[repository.get_lyric("fire").id]
    assert (love.song_count, love.total_count) == (2, 6)
    assert (loving.song_count, loving.total_count) == (2, 6)
    assert (fire.song_count, fire.total_count) == (1, 1)


def test_reset_artist_lyric_counts_skips_disabled_songs(
    repository, reconciler, make_song, artist_id
):
    playable = make_song("One")
    unplayable = make_song("Two")
    reconciler.reconcile(playable, {"fire": 1, "rain": 1, "snow": 1})
    reconciler.reconcile(unplayable, {"fire": 4})

    reconciler.reset_artist_lyric_counts(artist_id)

    fire = repository.fetch_artist_lyric_stats(artist_id)[repository.get_lyric("fire").id]
    assert (fire.song_count, fire.total_count) == (1, 1)


def test_recheck_and_recalculate_follow_blocklist_changes(repository, reconciler, make_song):
    song_id = make_song("Style")
    reconciler.reconcile(song_id, {"fire": 1, "rain": 1, "snow": 1})

    repository.blocklist_lyric("fire", EXPLICIT)
    assert reconciler.recheck_unplayable_songs() == {"unplayable": 1, "playable": 0}
    assert repository.get_song(song_id).unplayable_reason == TOO_FEW_WORDS

    repository.unblocklist_lyric("fire")
    assert reconciler.recalculate_selectable([song_id]) == 1
    assert _links_by_word(repository, song_id)["fire"].is_selectable
    assert reconciler.recheck_unplayable_songs() == {"unplayable": 0, "playable": 1}
    assert repository.get_song(song_id).is_selectable


def test_recheck_leaves_songs_disabled_for_other_reasons(repository, reconciler, make_song):
    song_id = make_song("Style")
    reconciler.reconcile(song_id, {"fire": 1, "rain": 1, "snow": 1})
    repository.set_song_selectable(song_id, False, reason="duplicate")

    assert reconciler.recheck_unplayable_songs() == {"unplayable": 0, "playable": 0}
    assert not repository.get_song(song_id).is_selectable


def test_cleanup_irregular_forms_folds_into_parts(repository, reconciler, make_song):
    song_id = make_song("Style")
    reconciler.reconcile(song_id, {"don't": 2, "do": 1, "hangin'": 1, "fire": 1, "rain": 1})

    links = _links_by_word(repository, song_id)
    assert not links["don't"].is_selectable
    assert not links["hangin'"].is_selectable

    summary = reconciler.cleanup_irregular_forms()
    assert summary == {"forms": 2, "links": 2, "songs": 1}

    links = _links_by_word(repository, song_id)
    assert links["do"].count == 3
    assert links["do"].is_selectable
    assert links["not"].count == 2
    assert links["hanging"].count == 1
    assert links["hanging"].is_selectable
    assert links["not"].is_selectable
    assert links["don't"].is_expanded
    assert links["hangin'"].is_expanded

    assert reconciler.cleanup_irregular_forms() == {"forms": 0, "links": 0, "songs": 0}
    assert _links_by_word(repository, song_id)["do"].count == 3


def test_cleanup_parts_can_win_their_stem_group(repository, reconciler, make_song):
    song_id = make_song("Porch Light")
    reconciler.reconcile(song_id, {"hangin'": 2, "fire": 1, "rain": 1})

    reconciler.cleanup_irregular_forms()
    reconciler.recalculate_selectable([song_id])

    links = _links_by_word(repository, song_id)
    assert links["hanging"].count == 2
    assert links["hanging"].is_selectable
    assert not links["hanging"].is_expanded
    assert not links["hangin'"].is_selectable
