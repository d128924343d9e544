"""
Token estimation and budget truncation.

Uses the chars/4 heuristic throughout. It is an approximation of
provider tokenizers, kept so that budgets stay provider independent.

Dependencies: None
System role: Token accounting for embedding stats and context budgets
"""

import math

CHARS_PER_TOKEN = 4
TRUNCATION_MARKER = "...[truncated]"


def estimate_tokens(text: str) -> int:
    """Estimated token count of a text (ceil of chars / 4)."""
    return math.ceil(len(text) / CHARS_PER_TOKEN)


def truncate_to_token_limit(
    text: str,
    max_tokens: int,
    buffer: float = 0.9,
    marker: str = TRUNCATION_MARKER,
) -> tuple[str, bool]:
    """
    Cut a text from the tail so it fits the token budget.

    Texts whose estimate is within max_tokens are returned unchanged.
    Otherwise the result, marker included, is at most
    floor(max_tokens * 4 * buffer) characters.

    Args:
        text: Full text
        max_tokens: Token budget
        buffer: Fraction of the character budget to keep
        marker: Appended to truncated text

    Returns:
        tuple: (possibly truncated text, whether truncation happened)
    """
    if estimate_tokens(text) <= max_tokens:
        return text, False

    max_chars = math.floor(max_tokens * CHARS_PER_TOKEN * buffer)
    keep = max(0, max_chars - len(marker))
    return text[:keep] + marker, True
