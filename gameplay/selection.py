"""Choose which of a song's words become puzzle clues."""

from __future__ import annotations

import random
import re
from typing import Any, Iterable, List, Optional, Set

from lyric_pic.core.titles import title_words

from .dataclasses import WordCandidate

PUZZLE_WORD_COUNT = 3
TOP_DISTINCTIVE_WORDS = 10
MIN_WORD_LENGTH = 2
MAX_WORD_LENGTH = 20

_VALID_WORD = re.compile(r"^[A-Za-z'-]+$")


def is_valid_puzzle_word(word: str) -> bool:
    if not isinstance(word, str):
        return False
    return MIN_WORD_LENGTH <= len(word) <= MAX_WORD_LENGTH and bool(_VALID_WORD.match(word))


def filter_candidates(candidates: Iterable[WordCandidate], song_title: str) -> List[WordCandidate]:
    """Drop title words, invalid tokens and repeated entries, keeping order."""

    excluded: Set[str] = title_words(song_title)
    seen: Set[str] = set()
    kept: List[WordCandidate] = []
    for candidate in candidates or ():
        word = candidate.word.lower() if isinstance(candidate.word, str) else ""
        if word in excluded or word in seen or not is_valid_puzzle_word(word):
            continue
        seen.add(word)
        kept.append(candidate)
    return kept


def select_puzzle_words(
    candidates: Iterable[WordCandidate],
    song_title: str,
    *,
    rng: Optional[Any] = None,
    target: int = PUZZLE_WORD_COUNT,
    pool_size: int = TOP_DISTINCTIVE_WORDS,
) -> List[WordCandidate]:
    """Pick the clue words for one play of a song.

    Args:
        candidates: The song's selectable words.
        song_title: Title of the song; its words are never clues.
        rng: Source of randomness with a ``sample`` method; defaults to the
            :mod:`random` module.
        target: Number of clues wanted.
        pool_size: How many of the most distinctive words to sample from.

    Returns:
        Every valid candidate when there are at most ``target`` of them,
        otherwise ``target`` distinct words drawn uniformly from the
        ``pool_size`` candidates with the lowest song count. Fewer than
        ``target`` words means the song is unplayable.
    """

    valid = filter_candidates(candidates, song_title)
    if len(valid) <= target:
        return valid

    ranked = sorted(valid, key=lambda candidate: candidate.song_count)
    pool = ranked[: max(target, pool_size)]
    source = rng if rng is not None else random
    return source.sample(pool, target)


__all__ = [
    "MAX_WORD_LENGTH",
    "MIN_WORD_LENGTH",
    "PUZZLE_WORD_COUNT",
    "TOP_DISTINCTIVE_WORDS",
    "filter_candidates",
    "is_valid_puzzle_word",
    "select_puzzle_words",
]
