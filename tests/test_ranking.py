from lyric_pic.core.ranking import (
    aggregate_stem_groups,
    choose_winner,
    group_by_stem,
    rank_key,
    resolve_selectable,
)
from lyric_pic.core.stemmer import stem


def test_rank_key_orders_by_count_then_text():
    words = {"dancing": 5, "dance": 5, "danced": 9}
    ordered = sorted(words, key=lambda word: rank_key(word, words[word]))
    assert ordered == ["danced", "dance", "dancing"]


def test_group_by_stem_collects_inflections():
    groups = group_by_stem(["dancing", "dance", "fire", "dance"])
    assert groups[stem("dance")] == ["dance", "dancing"]
    assert groups[stem("fire")] == ["fire"]


def test_highest_count_wins_its_group():
    flags = resolve_selectable({"dancing": 7, "dance": 2, "fire": 1})
    assert flags == {"dancing": True, "dance": False, "fire": True}


def test_tie_goes_to_alphabetically_first_word():
    flags = resolve_selectable({"dancing": 5, "dance": 5, "danced": 2})
    assert flags == {"dance": True, "dancing": False, "danced": False}


def test_ineligible_words_never_win():
    flags = resolve_selectable({"dancing": 7, "dance": 2}, lambda word: word != "dancing")
    assert flags == {"dancing": False, "dance": True}


def test_group_without_eligible_member_has_no_winner():
    flags = resolve_selectable({"dancing": 7, "dance": 2}, lambda word: False)
    assert not any(flags.values())
    assert choose_winner({"dance": 1}, ["dance"], lambda word: False) is None


def test_at_most_one_winner_per_group():
    counts = {"love": 3, "loved": 3, "loves": 1, "loving": 4, "fire": 2, "fires": 2}
    flags = resolve_selectable(counts)
    for members in group_by_stem(counts).values():
        assert sum(flags[word] for word in members) == 1


def test_aggregate_stem_groups():
    rows = [(1, "dance", 2), (2, "dancing", 3), (2, "dance", 1), (3, "fire", 1)]
    groups = aggregate_stem_groups(rows)
    dance = groups[stem("dance")]
    assert dance.members == {"dance", "dancing"}
    assert dance.song_count == 2
    assert dance.total_count == 6
    assert groups[stem("fire")].song_count == 1
