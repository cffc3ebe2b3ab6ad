import pytest

from gameplay.dataclasses import PuzzleWord, WordCandidate
from gameplay.session import (
    ALREADY_GUESSED,
    CORRECT,
    INCORRECT,
    INVALID,
    PuzzleSession,
    load_next_puzzle,
    load_puzzle,
)


@pytest.fixture
def session():
    return PuzzleSession(
        1,
        [
            PuzzleWord(lyric_id=1, word="dance"),
            PuzzleWord(lyric_id=2, word="fire"),
            PuzzleWord(lyric_id=3, word="rain"),
        ],
    )


def test_inflected_guess_is_correct(session):
    assert session.guess_word(0, "Dancing") == CORRECT
    assert not session.words[0].is_open
    assert session.guess_word(0, "dance") == ALREADY_GUESSED


def test_guess_matching_another_open_clue_credits_it(session):
    assert session.guess_word(1, "rain") == CORRECT
    assert not session.words[2].is_open
    assert session.words[1].is_open


def test_guess_matching_a_solved_clue_is_already_guessed(session):
    session.guess_word(0, "dance")
    assert session.guess_word(1, "danced") == ALREADY_GUESSED


def test_incorrect_guesses_are_remembered(session):
    assert session.guess_word(1, "snow") == INCORRECT
    assert session.guess_word(1, "snow") == ALREADY_GUESSED
    session.guess_word(1, "hail")
    assert session.incorrect_guesses == {1: ["hail", "snow"]}


@pytest.mark.parametrize("index, guess", [(5, "fire"), (-1, "fire"), (1, "fire!"), (1, ""), (1, None)])
def test_invalid_guesses(session, index, guess):
    assert session.guess_word(index, guess) == INVALID


def test_all_words_guessed(session):
    session.guess_word(0, "dance")
    session.guess_word(1, "fires")
    assert not session.all_words_guessed
    assert session.reveal_word(2) == "rain"
    assert session.words[2].revealed
    assert session.all_words_guessed


def test_refresh_image_cycles():
    session = PuzzleSession(1, [PuzzleWord(1, "fire", ["a.png", "b.png"]), PuzzleWord(2, "rain")])
    assert session.words[0].current_image == "a.png"
    assert session.refresh_image(0) == "b.png"
    assert session.refresh_image(0) == "a.png"
    assert session.refresh_image(1) is None
    assert session.refresh_image(9) is None
    assert session.reveal_word(9) is None


def test_word_candidate_from_row():
    candidate = WordCandidate.from_row({"lyric_id": "4", "word": "fire", "song_count": None})
    assert candidate == WordCandidate(lyric_id=4, word="fire", song_count=0)


def test_load_puzzle_excludes_title_words(repository, reconciler, make_song, artist_id, sequence_random):
    song_id = make_song("Shake It Off")
    reconciler.reconcile(song_id, {"fire": 2, "rain": 1, "snow": 1, "shake": 3, "hail": 1})
    reconciler.reset_artist_lyric_counts(artist_id)

    session = load_puzzle(
        repository,
        song_id,
        rng=sequence_random,
        image_lookup=lambda word: [f"{word}.png"],
    )

    assert [word.word for word in session.words] == ["fire", "hail", "rain"]
    assert session.words[0].current_image == "fire.png"
    assert session.song_id == song_id


def test_load_puzzle_returns_none_for_unplayable_songs(repository, reconciler, make_song):
    song_id = make_song("Style")
    reconciler.reconcile(song_id, {"fire": 1, "rain": 1})
    assert load_puzzle(repository, song_id) is None
    assert load_puzzle(repository, 999) is None


def test_load_next_puzzle_skips_played_and_unplayable_songs(
    repository, reconciler, make_song, artist_id, sequence_random
):
    title_heavy = make_song("Fire and Rain")
    played = make_song("Song One")
    fresh = make_song("Song Two")
    reconciler.reconcile(title_heavy, {"fire": 1, "rain": 1, "snow": 1})
    reconciler.reconcile(played, {"fire": 1, "rain": 1, "snow": 1})
    reconciler.reconcile(fresh, {"hail": 1, "wind": 1, "storm": 1})

    song_id, session = load_next_puzzle(repository, artist_id, [played], rng=sequence_random)
    assert song_id == fresh
    assert sorted(word.word for word in session.words) == ["hail", "storm", "wind"]

    assert load_next_puzzle(repository, artist_id, [played, fresh], rng=sequence_random) is None
