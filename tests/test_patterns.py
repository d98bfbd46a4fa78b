import pytest

from tasklink.services.patterns import build_pattern, name_matches, split_filter_text


@pytest.mark.parametrize("text", [None, "", "   ", "\t\n"])
def test_blank_filter_text_means_no_filter(text) -> None:
    assert build_pattern(text) is None
    assert name_matches(None, "Ann") is True
    assert name_matches(None, "   ") is False


def test_single_word_matches_at_word_start_only() -> None:
    pattern = build_pattern("ann")
    assert name_matches(pattern, "Anna Karenina")
    assert name_matches(pattern, "Mary ANNE")
    assert name_matches(pattern, "Jean-Anne")
    assert not name_matches(build_pattern("ana"), "Banana Split")


def test_words_must_keep_their_order() -> None:
    pattern = build_pattern("jo sm")
    assert name_matches(pattern, "John Smith")
    assert name_matches(pattern, "Jonathan Smithson")
    assert name_matches(pattern, "Jo Ann   Smalls")
    assert not name_matches(pattern, "Smith John")


def test_later_words_must_follow_whitespace() -> None:
    pattern = build_pattern("jo sm")
    assert not name_matches(pattern, "John-Smith")


def test_special_characters_are_literal() -> None:
    pattern = build_pattern("a.b (c")
    assert name_matches(pattern, "a.b (c)")
    assert not name_matches(pattern, "axb c")
    assert name_matches(build_pattern("+1"), "call +1 555")


def test_split_filter_text_escapes_each_word() -> None:
    assert split_filter_text("  jo   s.m  ") == ["jo", r"s\.m"]


def test_unicode_names_match() -> None:
    assert name_matches(build_pattern("ém"), "Émile Zola")
