"""Porter stemmer used to group stored root words by stem."""

from __future__ import annotations

import re
from typing import Callable, Optional, Sequence, Tuple

_DOUBLE_CONSONANT = re.compile(r"([^aeiouy])\1$")
_STEP4_SUFFIXES = re.compile(
    r"^(.+?)(al|ance|ence|er|ic|able|ible|ant|ement|ment|ent|ou|ism|ate|iti|ous|ive|ize)$"
)
_STEP4_ION = re.compile(r"^(.+?)(s|t)(ion)$")

# (suffix, replacement) pairs; each is tried against the token entering the stage.
_STEP2_SUFFIXES: Tuple[Tuple[str, str], ...] = (
    ("ational", "ate"),
    ("tional", "tion"),
    ("enci", "ence"),
    ("anci", "ance"),
    ("izer", "ize"),
    ("abli", "able"),
    ("bli", "ble"),
    ("alli", "al"),
    ("entli", "ent"),
    ("eli", "e"),
    ("ousli", "ous"),
    ("ization", "ize"),
    ("ation", "ate"),
    ("ator", "ate"),
    ("alism", "al"),
    ("iveness", "ive"),
    ("fulness", "ful"),
    ("ousness", "ous"),
    ("aliti", "al"),
    ("iviti", "ive"),
    ("biliti", "ble"),
    ("logi", "log"),
)

_STEP3_SUFFIXES: Tuple[Tuple[str, str], ...] = (
    ("icate", "ic"),
    ("ative", ""),
    ("alize", "al"),
    ("iciti", "ic"),
    ("ical", "ic"),
    ("ful", ""),
    ("ness", ""),
)


def categorize_groups(token: str) -> str:
    """Collapse ``token`` into alternating ``C``/``V`` runs."""

    collapsed = re.sub(r"[^aeiouy]+y", "CV", token)
    collapsed = re.sub(r"[aeiou]+", "V", collapsed)
    return re.sub(r"[^V]+", "C", collapsed)


def categorize_chars(token: str) -> str:
    """Map every character of ``token`` to ``C`` or ``V`` keeping its length."""

    marked = re.sub(r"[^aeiouy]y", "CV", token)
    marked = re.sub(r"[aeiou]", "V", marked)
    return re.sub(r"[^V]", "C", marked)


def measure(token: Optional[str]) -> float:
    """Return the Porter measure of ``token`` (``-1`` for an empty token).

    Half-steps are possible for tokens such as ``"a"`` and are kept as-is
    when compared against the stage thresholds.
    """

    if not token:
        return -1
    groups = categorize_groups(token)
    if groups.startswith("C"):
        groups = groups[1:]
    if groups.endswith("V"):
        groups = groups[:-1]
    return len(groups) / 2


def _replace_suffix(token: str, suffix: str, replacement: str) -> Optional[str]:
    if not token.endswith(suffix):
        return None
    return token[: len(token) - len(suffix)] + replacement


def _apply_suffix_table(
    token: str,
    table: Sequence[Tuple[str, str]],
    threshold: Optional[float],
) -> str:
    result = token
    for suffix, replacement in table:
        if threshold is not None:
            stripped = _replace_suffix(token, suffix, "")
            if measure(stripped) <= threshold:
                continue
        result = _replace_suffix(result, suffix, replacement) or result
    return result


def _step1a(token: str) -> str:
    if token.endswith("sses") or token.endswith("ies"):
        return token[:-2]
    if token.endswith("s") and token[-2:-1] != "s" and len(token) > 2:
        return token[:-1]
    return token


def _repair_after_strip(base: str) -> str:
    repaired = _apply_suffix_table(base, (("at", "ate"), ("bl", "ble"), ("iz", "ize")), None)
    if repaired != base:
        return repaired
    if _DOUBLE_CONSONANT.search(base) and base[-1] not in "lsz":
        return base[:-1]
    if measure(base) == 1 and categorize_chars(base).endswith("CVC") and base[-1] not in "wxy":
        return base + "e"
    return base


def _step1b(token: str) -> str:
    if token.endswith("eed"):
        if measure(token[:-3]) > 0:
            return token[:-1]
        return token

    match = re.search(r"(ed|ing)$", token)
    if match is None:
        return token
    base = token[: match.start()]
    if not base or "V" not in categorize_groups(base):
        return token
    return _repair_after_strip(base)


def _step1c(token: str) -> str:
    if token.endswith("y") and "V" in categorize_groups(token)[:-1]:
        return token[:-1] + "i"
    return token


def _step2(token: str) -> str:
    return _apply_suffix_table(token, _STEP2_SUFFIXES, 0)


def _step3(token: str) -> str:
    return _apply_suffix_table(token, _STEP3_SUFFIXES, 0)


def _regex_strip(token: str, pattern: re.Pattern, groups: Sequence[int]) -> Optional[str]:
    match = pattern.match(token)
    if match is None:
        return None
    result = "".join(match.group(index) for index in groups)
    if measure(result) > 1:
        return result
    return None


def _step4(token: str) -> str:
    return (
        _regex_strip(token, _STEP4_SUFFIXES, (1,))
        or _regex_strip(token, _STEP4_ION, (1, 2))
        or token
    )


def _step5a(token: str) -> str:
    without_e = token[:-1] if token.endswith("e") else token
    m = measure(without_e)
    if m > 1:
        return without_e
    if m == 1:
        start = max(len(token) - 4, 0)
        short_syllable = (
            categorize_chars(token)[start : start + 3] == "CVC"
            and len(token) >= 2
            and token[-2] not in "wxy"
        )
        if not short_syllable:
            return without_e
    return token


def _step5b(token: str) -> str:
    if measure(token) > 1 and token.endswith("ll"):
        return token[:-1]
    return token


_STAGES: Tuple[Callable[[str], str], ...] = (
    _step1a,
    _step1b,
    _step1c,
    _step2,
    _step3,
    _step4,
    _step5a,
    _step5b,
)


def stem(word: str) -> str:
    """Reduce ``word`` to its Porter stem.

    Args:
        word: A single surface word. Non-string values yield ``""``.

    Returns:
        The lowercase stem. Words shorter than three characters are returned
        unchanged.
    """

    if not isinstance(word, str):
        return ""
    if len(word) < 3:
        return word
    token = word.lower()
    for stage in _STAGES:
        token = stage(token)
    return token


__all__ = ["stem", "measure", "categorize_groups", "categorize_chars"]
