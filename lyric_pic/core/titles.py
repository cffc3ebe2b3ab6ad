"""Song title helpers used when importing songs and picking clues."""

from __future__ import annotations

import re
from typing import Callable, Dict, Iterable, List, Optional, Set, Tuple, TypeVar

from .normalizer import clean_token, split_hyphenated, strip_quotes

_SKIP_PATTERNS: Tuple[re.Pattern, ...] = tuple(
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"\(live\)",
        r"live from",
        r"live at",
        r"live acoustic",
        r"\(acoustic\)",
        r"acoustic version",
        r"acoustic\)",
        r"\(remix\)",
        r"remix$",
        r"\(.*mix\)",
        r"\(radio edit\)",
        r"\(demo\)",
        r"demo version",
    )
)

_VERSION_TAGS: Tuple[re.Pattern, ...] = tuple(
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"\(Taylor's Version\)",
        r"\(Deluxe.*?\)",
        r"\(Expanded.*?\)",
        r"\(.*?Edition\)",
        r"\(From the Vault\)",
    )
)

STUDIO = "studio"
DELUXE = "deluxe"
LIVE = "live"
EP = "ep"
COMPILATION = "compilation"

T = TypeVar("T")


def title_words(title: str) -> Set[str]:
    """Lowercase words of ``title`` cleaned the same way as lyric tokens."""

    if not isinstance(title, str):
        return set()
    words: Set[str] = set()
    for raw in title.split():
        for part in split_hyphenated(clean_token(raw)):
            word = strip_quotes(part)
            if word:
                words.add(word)
    return words


def is_in_title(word: str, title: str) -> bool:
    """Whether ``word`` occurs inside the lowercased title text."""

    if not word or not isinstance(title, str):
        return False
    return word.lower() in title.lower()


def should_skip_song(title: str) -> bool:
    """Live, acoustic, remix, radio edit and demo versions are not imported."""

    return any(pattern.search(title or "") for pattern in _SKIP_PATTERNS)


def clean_title(title: str) -> str:
    """Drop re-release tags so versions of one song share a key."""

    cleaned = title or ""
    for pattern in _VERSION_TAGS:
        cleaned = pattern.sub("", cleaned, count=1)
    return cleaned.strip().lower()


def album_type_for(album_name: Optional[str]) -> str:
    lower = (album_name or "").lower()
    if "deluxe" in lower or "expanded" in lower:
        return DELUXE
    if "live" in lower:
        return LIVE
    if re.search(r"\bep\b", lower):
        return EP
    if "compilation" in lower or "greatest hits" in lower:
        return COMPILATION
    return STUDIO


def version_priority(title: str, album_type: str) -> int:
    """Lower is preferred: plain studio cut, then re-recording, then deluxe."""

    if not re.search(r"\(.+\)", title) and album_type == STUDIO:
        return 1
    if "Taylor's Version" in title:
        return 2
    if album_type == DELUXE or "Deluxe" in title or "Expanded" in title:
        return 3
    return 99


def pick_canonical_versions(
    entries: Iterable[T],
    *,
    title_of: Callable[[T], str],
    album_type_of: Callable[[T], str],
) -> List[T]:
    """Keep one entry per cleaned title, the one with the best priority.

    Entries are returned in first-seen order of their cleaned title; among
    equal priorities the earliest entry wins.
    """

    best: Dict[str, Tuple[int, int, T]] = {}
    order: List[str] = []
    for position, entry in enumerate(entries):
        title = title_of(entry)
        if should_skip_song(title):
            continue
        key = clean_title(title)
        priority = version_priority(title, album_type_of(entry))
        current = best.get(key)
        if current is None:
            order.append(key)
            best[key] = (priority, position, entry)
        elif (priority, position) < current[:2]:
            best[key] = (priority, position, entry)
    return [best[key][2] for key in order]


__all__ = [
    "COMPILATION",
    "DELUXE",
    "EP",
    "LIVE",
    "STUDIO",
    "album_type_for",
    "clean_title",
    "is_in_title",
    "pick_canonical_versions",
    "should_skip_song",
    "title_words",
    "version_priority",
]
