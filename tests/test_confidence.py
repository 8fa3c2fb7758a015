from __future__ import annotations

from core.confidence import score_identity, tokenize_identity


def test_tokenize_splits_separators_camel_case_and_digits() -> None:
    assert tokenize_identity("MyReallyCoolUsername-88") == ["my", "really", "cool", "username", "88"]
    assert tokenize_identity("snake_case_99name") == ["snake", "case", "99", "name"]


def test_exact_match_is_case_insensitive() -> None:
    assert score_identity("SomeUser", "https://example.com/someuser/photos") == 100


def test_match_ignoring_separators() -> None:
    assert score_identity("some_user", "https://example.com/someuser") == 90
    assert score_identity("some-user", "https://example.com/some_user") == 90


def test_most_tokens_found() -> None:
    assert score_identity("BlueFoxArt", "blue and fox art") == 80


def test_exactly_two_thirds_is_a_low_partial_match() -> None:
    assert score_identity("red_fox_art", "a red fox") == 50


def test_some_tokens_found() -> None:
    assert score_identity("BlueFoxArt", "a fox") == 50


def test_no_tokens_found() -> None:
    assert score_identity("BlueFoxArt", "nothing here") == 0


def test_empty_inputs_score_zero() -> None:
    assert score_identity("", "anything") == 0
    assert score_identity("someone", "") == 0
    assert score_identity("--", "text with -- in it") == 100
    assert score_identity("__", "plain text") == 0
