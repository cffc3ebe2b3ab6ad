"""Public API for puzzle gameplay over processed song lyrics."""

from .dataclasses import PuzzleWord, WordCandidate
from .selection import PUZZLE_WORD_COUNT, TOP_DISTINCTIVE_WORDS, select_puzzle_words
from .session import PuzzleSession, load_next_puzzle, load_puzzle

__all__ = [
    "PUZZLE_WORD_COUNT",
    "TOP_DISTINCTIVE_WORDS",
    "PuzzleSession",
    "PuzzleWord",
    "WordCandidate",
    "load_next_puzzle",
    "load_puzzle",
    "select_puzzle_words",
]
