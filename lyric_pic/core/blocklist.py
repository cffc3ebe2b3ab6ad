"""Blocklist reason categories and the snapshot consumed by the pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, Mapping, Optional, Tuple

COMMON_WORD = "common_word"
PRONOUN = "pronoun"
VOCALIZATION = "vocalization"
CONTRACTION = "contraction"
EXPLICIT = "explicit"
UNKNOWN = "unknown"
NO_IMAGES = "no_images"

# Reasons checked against the raw token before quote cleanup.
PRE_QUOTE_REASONS: FrozenSet[str] = frozenset({CONTRACTION})
# Reasons checked after quote cleanup.
POST_QUOTE_REASONS: FrozenSet[str] = frozenset({COMMON_WORD, PRONOUN, VOCALIZATION})
# Reasons that switch a word off in every song, not just for puzzle picking.
DISABLING_REASONS: FrozenSet[str] = frozenset({EXPLICIT, UNKNOWN, NO_IMAGES})

BLOCKLIST_REASONS: Tuple[str, ...] = (
    COMMON_WORD,
    PRONOUN,
    VOCALIZATION,
    CONTRACTION,
    EXPLICIT,
    UNKNOWN,
    NO_IMAGES,
)

_COMMON_WORDS = (
    "the a an and or but in on at to for of with from by about as into through "
    "is are was were be been being have has had do does did will would could "
    "should may might shall can not no so if then than that this what when "
    "where who how all just like up out down now got get go come make know "
    "take see think let back too say said tell told want give keep way still "
    "even here there over only never ever always every more some any much own"
).split()

_PRONOUNS = (
    "i you he she it we they me him her us them my your his its our their "
    "mine yours myself yourself"
).split()

_VOCALIZATIONS = "oh ah ooh yeah whoa hey mmm la na uh da ba huh ha woah".split()

_CONTRACTIONS = (
    "don't won't can't didn't it's i'm i'll i'd i've you're you'll you've "
    "we're we'll they're they'll that's there's what's who's let's ain't "
    "wasn't weren't hasn't haven't couldn't wouldn't shouldn't isn't"
).split()


def default_blocklist_entries() -> Dict[str, str]:
    """Return the seed ``word -> reason`` table applied to a fresh catalogue."""

    entries: Dict[str, str] = {}
    for reason, words in (
        (COMMON_WORD, _COMMON_WORDS),
        (PRONOUN, _PRONOUNS),
        (VOCALIZATION, _VOCALIZATIONS),
        (CONTRACTION, _CONTRACTIONS),
    ):
        for word in words:
            entries.setdefault(word, reason)
    return entries


def is_disabling_reason(reason: Optional[str]) -> bool:
    return reason in DISABLING_REASONS


@dataclass(frozen=True)
class BlocklistSnapshot:
    """Immutable view of blocklisted root words grouped by how they are applied."""

    pre_quote: FrozenSet[str] = field(default_factory=frozenset)
    post_quote: FrozenSet[str] = field(default_factory=frozenset)
    disabling: FrozenSet[str] = field(default_factory=frozenset)
    reasons: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_entries(cls, entries: Iterable[Tuple[str, Optional[str]]]) -> "BlocklistSnapshot":
        """Build a snapshot from ``(root_word, reason)`` pairs.

        Words with a reason outside the known categories are treated as
        post-quote exclusions so a moderator's custom reason still keeps the
        word out of puzzles.
        """

        pre, post, disabling = set(), set(), set()
        reasons: Dict[str, str] = {}
        for word, reason in entries:
            normalized = str(word or "").strip().lower()
            if not normalized:
                continue
            label = reason or UNKNOWN
            reasons[normalized] = label
            if label in PRE_QUOTE_REASONS:
                pre.add(normalized)
            elif label in DISABLING_REASONS:
                disabling.add(normalized)
            else:
                post.add(normalized)
        return cls(frozenset(pre), frozenset(post), frozenset(disabling), reasons)

    @classmethod
    def default(cls) -> "BlocklistSnapshot":
        return cls.from_entries(default_blocklist_entries().items())

    def reason_for(self, word: str) -> Optional[str]:
        return self.reasons.get(word)

    def blocks_before_quotes(self, token: str) -> bool:
        return token in self.pre_quote

    def blocks_after_quotes(self, token: str) -> bool:
        return token in self.post_quote or token in self.disabling

    def __len__(self) -> int:
        return len(self.reasons)


EMPTY_BLOCKLIST = BlocklistSnapshot()


__all__ = [
    "BLOCKLIST_REASONS",
    "BlocklistSnapshot",
    "COMMON_WORD",
    "CONTRACTION",
    "DISABLING_REASONS",
    "EMPTY_BLOCKLIST",
    "EXPLICIT",
    "NO_IMAGES",
    "POST_QUOTE_REASONS",
    "PRE_QUOTE_REASONS",
    "PRONOUN",
    "UNKNOWN",
    "VOCALIZATION",
    "default_blocklist_entries",
    "is_disabling_reason",
]
