"""Shared dataclasses for puzzle gameplay."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional


@dataclass(frozen=True)
class WordCandidate:
    """A selectable word of one song with its catalogue distinctiveness.

    ``song_count`` is the number of the artist's songs in which the word's
    stem group appears; lower means more distinctive.
    """

    lyric_id: int
    word: str
    song_count: int = 0

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "WordCandidate":
        return cls(
            lyric_id=int(row["lyric_id"]),
            word=str(row["word"]),
            song_count=int(row.get("song_count") or 0),
        )


@dataclass
class PuzzleWord:
    """One clue of a running puzzle and its guess state."""

    lyric_id: int
    word: str
    image_urls: List[str] = field(default_factory=list)
    current_image_index: int = 0
    guessed: bool = False
    revealed: bool = False

    @property
    def is_open(self) -> bool:
        return not (self.guessed or self.revealed)

    @property
    def current_image(self) -> Optional[str]:
        if not self.image_urls:
            return None
        return self.image_urls[self.current_image_index % len(self.image_urls)]


__all__ = ["PuzzleWord", "WordCandidate"]
