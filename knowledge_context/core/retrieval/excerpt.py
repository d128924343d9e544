"""
Search excerpt extraction.

Dependencies: none
System role: Result snippet generation for knowledge search
"""

ELLIPSIS = "..."


def extract_excerpt(content: str, query: str, max_length: int = 200, lead: int = 50) -> str:
    """
    Cut a window of content around the earliest query term.

    The window starts `lead` characters before the first case-insensitive
    occurrence of any whitespace-separated query term and spans at most
    `max_length` characters. Ellipses mark truncation at either end. With no
    term present the opening `max_length` characters are returned.

    Args:
        content: Text to excerpt
        query: Search query
        max_length: Window size in characters
        lead: Characters kept before the match

    Returns:
        str: Excerpt text
    """
    content_lower = content.lower()
    first_index = -1
    for term in query.lower().split():
        index = content_lower.find(term)
        if index != -1 and (first_index == -1 or index < first_index):
            first_index = index

    if first_index == -1:
        return content[:max_length] + (ELLIPSIS if len(content) > max_length else "")

    start = max(0, first_index - lead)
    end = min(len(content), first_index + max_length - lead)

    excerpt = content[start:end]
    if start > 0:
        excerpt = ELLIPSIS + excerpt
    if end < len(content):
        excerpt = excerpt + ELLIPSIS
    return excerpt
