"""Suffix-heuristic stemmer for checking live guesses against puzzle answers.

The stored stem groups are built with :func:`lyric_pic.core.stemmer.stem`.
This reducer is cheaper and produces different strings (``"playing"`` becomes
``"play"`` here and ``"plai"`` there), but both put a word and its regular
plural, ``-ing`` and ``-ed`` forms in the same class, which is what guess
matching relies on.
"""

from __future__ import annotations

import re

_VOWEL = re.compile(r"[aeiou]")


def _has_vowel(text: str) -> bool:
    return bool(_VOWEL.search(text))


def _strip_if_stem_remains(word: str, suffix_length: int) -> str:
    base = word[:-suffix_length]
    if len(base) >= 2 and _has_vowel(base):
        return base
    return word


def quick_stem(word: str) -> str:
    """Reduce ``word`` to an approximate root.

    ``girls -> girl``, ``playing -> play``, ``tried -> try``,
    ``running -> run``, ``making -> mak``, ``make -> mak``.
    """

    if not isinstance(word, str):
        return ""
    w = word.lower().strip()
    if len(w) <= 2:
        return w

    if w.endswith("ing"):
        w = _strip_if_stem_remains(w, 3)
    elif w.endswith("ied") and len(w) > 4:
        return w[:-3] + "y"
    elif w.endswith("ed"):
        w = _strip_if_stem_remains(w, 2)
    elif w.endswith("ies") and len(w) > 4:
        return w[:-3] + "y"
    elif w.endswith("es") and len(w) > 4:
        w = w[:-2]
    elif not w.endswith("ss") and w.endswith("s") and len(w) > 3:
        w = w[:-1]

    if len(w) > 2 and w[-1] == w[-2] and not _has_vowel(w[-1]):
        w = w[:-1]

    if w.endswith("e") and len(w) > 3:
        w = w[:-1]

    return w


def is_matching_guess(guess: str, answer: str) -> bool:
    """Return ``True`` when ``guess`` is the answer or one of its inflections."""

    if not isinstance(guess, str) or not isinstance(answer, str):
        return False
    normalized_guess = guess.strip().lower()
    normalized_answer = answer.strip().lower()
    if not normalized_guess or not normalized_answer:
        return False
    if normalized_guess == normalized_answer:
        return True
    return quick_stem(normalized_guess) == quick_stem(normalized_answer)


__all__ = ["quick_stem", "is_matching_guess"]
