import pytest

from fep.utils.text import normalize_for_match, normalize_whitespace, similar_chars, similarity_percent


def test_normalize_for_match_strips_punctuation_and_case():
    assert normalize_for_match("  Puppet Show for Kids in Ostrava! ") == "puppet show for kids in ostrava"
    assert normalize_for_match("Divadlo  loutek, Ostrava") == "divadlo loutek ostrava"
    assert normalize_for_match("Pohádka_pro–děti") == "pohádka pro děti"
    assert normalize_for_match(None) == ""


def test_normalize_whitespace():
    assert normalize_whitespace(" a \n b\t c ") == "a b c"


def test_similar_chars_recurses_on_both_sides():
    assert similar_chars("World", "Word") == 4
    assert similar_chars("abc", "xyz") == 0
    assert similar_chars("", "abc") == 0


def test_similarity_percent():
    assert similarity_percent("World", "Word") == pytest.approx(88.888, rel=1e-3)
    assert similarity_percent("same", "same") == 100.0
    assert similarity_percent("", "") == 0.0


def test_similarity_is_order_sensitive():
    # Same letters in a different order share less than the full length.
    assert similarity_percent("abcd", "dcba") < 50.0
