"""Tests for token estimation and truncation."""

from knowledge_context.core.tokens import TRUNCATION_MARKER, estimate_tokens, truncate_to_token_limit


def test_estimate_tokens_rounds_up() -> None:
    assert estimate_tokens("") == 0
    assert estimate_tokens("abcd") == 1
    assert estimate_tokens("abcde") == 2


def test_text_within_budget_unchanged() -> None:
    text = "a" * 40
    assert truncate_to_token_limit(text, max_tokens=10) == (text, False)


def test_truncated_text_fits_buffered_budget() -> None:
    """Result, marker included, should be floor(max_tokens * 4 * buffer) characters."""
    text = "a" * 1000
    truncated, was_truncated = truncate_to_token_limit(text, max_tokens=10, buffer=0.9)

    assert was_truncated is True
    assert truncated.endswith(TRUNCATION_MARKER)
    assert len(truncated) == 36
    assert estimate_tokens(truncated) <= 10


def test_tiny_budget_still_returns_marker() -> None:
    truncated, was_truncated = truncate_to_token_limit("a" * 100, max_tokens=1)

    assert was_truncated is True
    assert truncated == TRUNCATION_MARKER
