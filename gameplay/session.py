"""Puzzle loading and live guess validation."""

from __future__ import annotations

import random
import re
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from lyric_pic.app.data.database import SQLiteLyricRepository
from lyric_pic.core.quick_stem import is_matching_guess
from lyric_pic.utils.observability import create_counter, get_logger

from .dataclasses import PuzzleWord, WordCandidate
from .selection import PUZZLE_WORD_COUNT, select_puzzle_words

CORRECT = "correct"
INCORRECT = "incorrect"
ALREADY_GUESSED = "already_guessed"
INVALID = "invalid"

ImageLookup = Callable[[str], Sequence[str]]

_GUESS_PATTERN = re.compile(r"^[a-z'-]+$")
_logger = get_logger(__name__).bind(component="puzzle_session")
_metric_guesses = create_counter(
    "lyric_puzzle_guesses_total",
    "Word guesses checked against running puzzles.",
    label_names=("outcome",),
)


class PuzzleSession:
    """Guess state of one song's clue words."""

    def __init__(self, song_id: int, words: Iterable[PuzzleWord]) -> None:
        self.song_id = song_id
        self.words: List[PuzzleWord] = list(words)
        self.incorrect_guesses: Dict[int, List[str]] = {}

    @property
    def all_words_guessed(self) -> bool:
        return all(not word.is_open for word in self.words)

    def guess_word(self, index: int, guess: str) -> str:
        """Check ``guess`` against clue ``index``.

        A guess matching another open clue credits that clue instead. Matches
        use :func:`is_matching_guess`, so ``"dancing"`` solves ``"dance"``.
        """

        outcome = self._evaluate(index, guess)
        _metric_guesses.labels(outcome=outcome).inc()
        _logger.debug(
            "Guess evaluated",
            context={"song_id": self.song_id, "index": index, "outcome": outcome},
        )
        return outcome

    def _evaluate(self, index: int, guess: str) -> str:
        if not 0 <= index < len(self.words):
            return INVALID
        trimmed = guess.strip().lower() if isinstance(guess, str) else ""
        if not trimmed or not _GUESS_PATTERN.match(trimmed):
            return INVALID

        target = self.words[index]
        if not target.is_open:
            return ALREADY_GUESSED
        if trimmed in self.incorrect_guesses.get(index, ()):
            return ALREADY_GUESSED

        if is_matching_guess(trimmed, target.word):
            target.guessed = True
            return CORRECT

        for position, word in enumerate(self.words):
            if position == index or not is_matching_guess(trimmed, word.word):
                continue
            if not word.is_open:
                return ALREADY_GUESSED
            word.guessed = True
            return CORRECT

        guesses = self.incorrect_guesses.setdefault(index, [])
        guesses.append(trimmed)
        guesses.sort()
        return INCORRECT

    def reveal_word(self, index: int) -> Optional[str]:
        if not 0 <= index < len(self.words):
            return None
        word = self.words[index]
        word.guessed = True
        word.revealed = True
        return word.word

    def refresh_image(self, index: int) -> Optional[str]:
        """Advance clue ``index`` to its next image and return it."""

        if not 0 <= index < len(self.words):
            return None
        word = self.words[index]
        if word.image_urls:
            word.current_image_index = (word.current_image_index + 1) % len(word.image_urls)
        return word.current_image


def build_session(
    song_id: int,
    selected: Sequence[WordCandidate],
    image_lookup: Optional[ImageLookup] = None,
) -> PuzzleSession:
    words = [
        PuzzleWord(
            lyric_id=candidate.lyric_id,
            word=candidate.word,
            image_urls=list(image_lookup(candidate.word)) if image_lookup else [],
        )
        for candidate in selected
    ]
    return PuzzleSession(song_id, words)


def load_puzzle(
    repository: SQLiteLyricRepository,
    song_id: int,
    *,
    rng: Optional[Any] = None,
    image_lookup: Optional[ImageLookup] = None,
) -> Optional[PuzzleSession]:
    """Build a session for ``song_id`` or return ``None`` if it is unplayable."""

    song = repository.get_song(song_id)
    if song is None:
        return None
    candidates = [WordCandidate.from_row(row) for row in repository.fetch_puzzle_candidates(song_id)]
    selected = select_puzzle_words(candidates, song.name, rng=rng)
    if len(selected) < PUZZLE_WORD_COUNT:
        _logger.info(
            "Song has too few clue words",
            context={"song_id": song_id, "candidates": len(candidates), "selected": len(selected)},
        )
        return None
    return build_session(song_id, selected, image_lookup)


def load_next_puzzle(
    repository: SQLiteLyricRepository,
    artist_id: int,
    played_song_ids: Iterable[int] = (),
    *,
    rng: Optional[random.Random] = None,
    image_lookup: Optional[ImageLookup] = None,
) -> Optional[Tuple[int, PuzzleSession]]:
    """Pick a random unplayed song of the artist that yields a full puzzle.

    Songs that turn out unplayable are skipped. Returns ``None`` once every
    selectable song has been played or skipped.
    """

    source = rng or random.Random()
    excluded = set(played_song_ids)
    remaining = [
        song_id
        for song_id in repository.list_song_ids(artist_id=artist_id, only_selectable=True)
        if song_id not in excluded
    ]
    source.shuffle(remaining)
    for song_id in remaining:
        session = load_puzzle(repository, song_id, rng=source, image_lookup=image_lookup)
        if session is not None:
            return song_id, session
    return None


__all__ = [
    "ALREADY_GUESSED",
    "CORRECT",
    "INCORRECT",
    "INVALID",
    "PuzzleSession",
    "build_session",
    "load_next_puzzle",
    "load_puzzle",
]
