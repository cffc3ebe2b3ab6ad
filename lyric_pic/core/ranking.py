"""Stem grouping and the tie-break rule shared by every selectability pass."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Set, Tuple

from .stemmer import stem


def rank_key(word: str, count: int) -> Tuple[int, str]:
    """Sort key putting the highest count first, then alphabetical text."""

    return (-int(count), word)


def group_by_stem(words: Iterable[str]) -> Dict[str, List[str]]:
    """Group root words by Porter stem; members are sorted alphabetically."""

    groups: Dict[str, List[str]] = {}
    for word in sorted(set(words)):
        groups.setdefault(stem(word), []).append(word)
    return groups


def choose_winner(
    counts: Mapping[str, int],
    members: Iterable[str],
    is_eligible: Optional[Callable[[str], bool]] = None,
) -> Optional[str]:
    """Return the member that may be used as a clue, if any is eligible."""

    candidates = [word for word in members if is_eligible is None or is_eligible(word)]
    if not candidates:
        return None
    return min(candidates, key=lambda word: rank_key(word, counts.get(word, 0)))


def resolve_selectable(
    counts: Mapping[str, int],
    is_eligible: Optional[Callable[[str], bool]] = None,
) -> Dict[str, bool]:
    """Decide the selectable flag of every word of one song.

    Args:
        counts: Occurrences of each root word within the song.
        is_eligible: Predicate rejecting words that can never be clues
            (contraction forms, blocklisted words). Ineligible words never
            win their stem group.

    Returns:
        ``word -> selectable`` with at most one ``True`` per stem group.
    """

    flags = {word: False for word in counts}
    for members in group_by_stem(counts).values():
        winner = choose_winner(counts, members, is_eligible)
        if winner is not None:
            flags[winner] = True
    return flags


@dataclass
class StemGroupStats:
    """Catalogue statistics of one stem group."""

    stem: str
    members: Set[str]
    song_ids: Set[int]
    total_count: int = 0

    @property
    def song_count(self) -> int:
        return len(self.song_ids)


def aggregate_stem_groups(rows: Iterable[Tuple[int, str, int]]) -> Dict[str, StemGroupStats]:
    """Fold ``(song_id, root_word, count)`` rows into per-stem statistics."""

    groups: Dict[str, StemGroupStats] = {}
    for song_id, word, count in rows:
        key = stem(word)
        stats = groups.get(key)
        if stats is None:
            stats = groups[key] = StemGroupStats(stem=key, members=set(), song_ids=set())
        stats.members.add(word)
        stats.song_ids.add(int(song_id))
        stats.total_count += int(count)
    return groups


__all__ = [
    "StemGroupStats",
    "aggregate_stem_groups",
    "choose_winner",
    "group_by_stem",
    "rank_key",
    "resolve_selectable",
]
