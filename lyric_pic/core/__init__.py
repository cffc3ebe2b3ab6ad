"""Text processing core for Lyric Pic: stemming, normalization and ranking."""

from .blocklist import BlocklistSnapshot, DISABLING_REASONS, default_blocklist_entries
from .normalizer import (
    CONTRACTIONS,
    LyricNormalizer,
    NormalizedLyrics,
    expand_irregular_form,
    normalize,
)
from .quick_stem import is_matching_guess, quick_stem
from .ranking import aggregate_stem_groups, group_by_stem, resolve_selectable
from .stemmer import stem
from .titles import is_in_title, title_words

__all__ = [
    "BlocklistSnapshot",
    "CONTRACTIONS",
    "DISABLING_REASONS",
    "LyricNormalizer",
    "NormalizedLyrics",
    "aggregate_stem_groups",
    "default_blocklist_entries",
    "expand_irregular_form",
    "group_by_stem",
    "is_in_title",
    "is_matching_guess",
    "normalize",
    "quick_stem",
    "resolve_selectable",
    "stem",
    "title_words",
]
