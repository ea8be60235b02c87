"""Context snippets for search results."""

ELLIPSIS = "..."


def build_snippet(content: str, query: str, radius: int = 100) -> str:
    """Return the text around the first case-insensitive match of ``query``.

    The window runs from ``radius`` characters before the match to
    ``len(query) + radius`` characters after its start, clipped to the
    content. An ellipsis marks each clipped side. Returns an empty string
    when ``query`` does not occur in ``content``.
    """
    if not query:
        return ""
    index = content.lower().find(query.lower())
    if index == -1:
        return ""

    start = max(0, index - radius)
    end = min(len(content), index + len(query) + radius)
    prefix = ELLIPSIS if start > 0 else ""
    suffix = ELLIPSIS if end < len(content) else ""
    return f"{prefix}{content[start:end]}{suffix}"
