import pytest

from lyric_pic.core.quick_stem import is_matching_guess, quick_stem
from lyric_pic.core.stemmer import stem


@pytest.mark.parametrize(
    "word, expected",
    [
        ("girls", "girl"),
        ("playing", "play"),
        ("tried", "try"),
        ("running", "run"),
        ("making", "mak"),
        ("make", "mak"),
        ("loves", "lov"),
        ("cries", "cry"),
        ("bring", "bring"),
        ("kiss", "kis"),
        ("kisses", "kis"),
        ("go", "go"),
        ("  Dancing ", "danc"),
    ],
)
def test_quick_stem_heuristics(word, expected):
    assert quick_stem(word) == expected


def test_quick_stem_handles_non_text():
    assert quick_stem(None) == ""
    assert quick_stem("") == ""


@pytest.mark.parametrize(
    "base, inflections",
    [
        ("dance", ["dancing", "danced", "dances"]),
        ("girl", ["girls"]),
        ("play", ["playing", "played", "plays"]),
        ("love", ["loved", "loves", "loving"]),
        ("jump", ["jumping", "jumped", "jumps"]),
        ("run", ["running"]),
        ("hop", ["hopping", "hopped"]),
    ],
)
def test_runtime_and_full_stemmer_group_common_inflections_alike(base, inflections):
    for word in inflections:
        assert quick_stem(word) == quick_stem(base)
        assert stem(word) == stem(base)


def test_is_matching_guess_accepts_inflections():
    assert is_matching_guess("Dancing", "dance")
    assert is_matching_guess("girl", "girls")
    assert is_matching_guess("tried", "tried")


def test_is_matching_guess_rejects_other_words():
    assert not is_matching_guess("dog", "cat")
    assert not is_matching_guess("", "cat")
    assert not is_matching_guess(None, "cat")
