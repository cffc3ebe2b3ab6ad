"""Turn raw lyric text into per-song surface word counts."""

from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Mapping, Optional, Set, Tuple

from .blocklist import EMPTY_BLOCKLIST, BlocklistSnapshot

_SECTION_HEADER = re.compile(r"\[.*?\]")
_DISALLOWED_CHARS = re.compile(r"[^a-zA-Z'-]")

CONTRACTIONS: Mapping[str, Tuple[str, ...]] = {
    "don't": ("do", "not"),
    "doesn't": ("does", "not"),
    "didn't": ("did", "not"),
    "won't": ("will", "not"),
    "wouldn't": ("would", "not"),
    "shouldn't": ("should", "not"),
    "couldn't": ("could", "not"),
    "can't": ("can", "not"),
    "cannot": ("can", "not"),
    "ain't": ("am", "not"),
    "aren't": ("are", "not"),
    "isn't": ("is", "not"),
    "wasn't": ("was", "not"),
    "weren't": ("were", "not"),
    "hasn't": ("has", "not"),
    "haven't": ("have", "not"),
    "hadn't": ("had", "not"),
    "i'm": ("i", "am"),
    "you're": ("you", "are"),
    "he's": ("he", "is"),
    "she's": ("she", "is"),
    "it's": ("it", "is"),
    "we're": ("we", "are"),
    "they're": ("they", "are"),
    "that's": ("that", "is"),
    "there's": ("there", "is"),
    "here's": ("here", "is"),
    "what's": ("what", "is"),
    "who's": ("who", "is"),
    "where's": ("where", "is"),
    "let's": ("let", "us"),
    "i'd": ("i", "would"),
    "you'd": ("you", "would"),
    "he'd": ("he", "would"),
    "she'd": ("she", "would"),
    "we'd": ("we", "would"),
    "they'd": ("they", "would"),
    "it'd": ("it", "would"),
    "i'll": ("i", "will"),
    "you'll": ("you", "will"),
    "he'll": ("he", "will"),
    "she'll": ("she", "will"),
    "we'll": ("we", "will"),
    "they'll": ("they", "will"),
    "it'll": ("it", "will"),
    "i've": ("i", "have"),
    "you've": ("you", "have"),
    "we've": ("we", "have"),
    "they've": ("they", "have"),
    "could've": ("could", "have"),
    "should've": ("should", "have"),
    "would've": ("would", "have"),
    "might've": ("might", "have"),
    "must've": ("must", "have"),
}

MIN_WORD_LENGTH = 2


@dataclass
class NormalizedLyrics:
    """Surface word counts for one song plus the words barred from puzzles.

    ``unselectable`` holds forms that stay stored but never become clues
    (contractions whose parts were counted separately). ``excluded`` maps
    blocklisted words to the reason category that caught them.
    """

    counts: Counter = field(default_factory=Counter)
    unselectable: Set[str] = field(default_factory=set)
    excluded: Dict[str, str] = field(default_factory=dict)

    def add(self, word: str, amount: int = 1) -> None:
        self.counts[word] += amount

    def is_eligible(self, word: str) -> bool:
        """Whether ``word`` may win its stem group."""

        return word not in self.unselectable and word not in self.excluded

    def words(self) -> List[str]:
        return sorted(self.counts)

    def __len__(self) -> int:
        return len(self.counts)

    def __contains__(self, word: object) -> bool:
        return word in self.counts


def strip_section_headers(text: str) -> str:
    return _SECTION_HEADER.sub("", text)


def clean_token(token: str) -> str:
    """Keep letters, apostrophes and hyphens and lowercase the rest."""

    return _DISALLOWED_CHARS.sub("", token).lower()


def split_hyphenated(token: str) -> List[str]:
    if "-" not in token:
        return [token]
    return [part for part in token.split("-") if len(part) >= MIN_WORD_LENGTH]


def restore_dropped_g(token: str) -> str:
    """``hangin'`` becomes ``hanging``."""

    if token.endswith("in'") and len(token) > 3:
        return token[:-1] + "g"
    return token


def strip_quotes(token: str) -> str:
    """Remove wrapping single quotes, then a possessive ``'s``.

    ``'love's'`` and ``love's`` become ``love``; ``girls'`` keeps the ``s``.
    """

    token = token.strip("'")
    if token.endswith("'s"):
        token = token[:-2]
    return token


def tokenize(text: str) -> Iterator[str]:
    """Yield cleaned raw tokens with section headers removed."""

    if not isinstance(text, str) or not text:
        return
    for raw in strip_section_headers(text).split():
        cleaned = clean_token(raw)
        if cleaned:
            yield cleaned


def expand_irregular_form(surface: str) -> Optional[List[str]]:
    """Return the words an already stored irregular form stands for.

    Contractions map to their table entry, hyphenated compounds to their
    parts and dropped-g forms to the full ``-ing`` word. Constituents shorter
    than two characters are dropped, so the result may be empty. Regular
    words return ``None``.
    """

    if not isinstance(surface, str):
        return None
    word = surface.strip().lower()
    if word in CONTRACTIONS:
        return [part for part in CONTRACTIONS[word] if len(part) >= MIN_WORD_LENGTH]
    if "-" in word:
        parts = (strip_quotes(part) for part in split_hyphenated(word))
        return [part for part in parts if len(part) >= MIN_WORD_LENGTH]
    restored = restore_dropped_g(word)
    if restored != word:
        return [restored]
    return None


class LyricNormalizer:
    """Normalizer bound to one blocklist snapshot."""

    def __init__(self, blocklist: Optional[BlocklistSnapshot] = None) -> None:
        self.blocklist = blocklist or EMPTY_BLOCKLIST

    def normalize(self, text: str) -> NormalizedLyrics:
        result = NormalizedLyrics()
        for token in tokenize(text):
            for part in split_hyphenated(token):
                self._consume(part, result)
        return result

    def _consume(self, token: str, result: NormalizedLyrics) -> None:
        contraction = CONTRACTIONS.get(token.strip("'"))
        if contraction is not None:
            form = token.strip("'")
            result.add(form)
            result.unselectable.add(form)
            self._check_pre_quote(form, result)
            for word in contraction:
                self._finish(word, result)
            return

        if self._check_pre_quote(token, result):
            result.add(token)
            return

        self._finish(strip_quotes(restore_dropped_g(token)), result)

    def _check_pre_quote(self, token: str, result: NormalizedLyrics) -> bool:
        if not self.blocklist.blocks_before_quotes(token):
            return False
        result.excluded.setdefault(token, self.blocklist.reason_for(token) or "")
        return True

    def _finish(self, word: str, result: NormalizedLyrics) -> None:
        if len(word) < MIN_WORD_LENGTH:
            return
        if self.blocklist.blocks_after_quotes(word):
            result.excluded.setdefault(word, self.blocklist.reason_for(word) or "")
        result.add(word)


def normalize(text: str, blocklist: Optional[BlocklistSnapshot] = None) -> NormalizedLyrics:
    """Normalize ``text`` against an explicit blocklist snapshot.

    Args:
        text: Full lyric text, possibly with ``[Verse]`` style headers.
        blocklist: Words to exclude from puzzles. Defaults to none.

    Returns:
        The song's :class:`NormalizedLyrics`. Non-text input yields an empty
        result.
    """

    return LyricNormalizer(blocklist).normalize(text)


__all__ = [
    "CONTRACTIONS",
    "LyricNormalizer",
    "NormalizedLyrics",
    "clean_token",
    "expand_irregular_form",
    "normalize",
    "restore_dropped_g",
    "split_hyphenated",
    "strip_quotes",
    "tokenize",
]
