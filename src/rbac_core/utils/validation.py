"""Input validation utilities for catalog and registry search filters."""

MAX_SEARCH_LENGTH = 100


def sanitize_search(search: str | None, max_length: int = MAX_SEARCH_LENGTH) -> str | None:
    """Sanitize search input.

    Args:
        search: Raw search string
        max_length: Maximum allowed length

    Returns:
        Sanitized search string or None
    """
    if search is None:
        return None

    search = search[:max_length]

    # SQLAlchemy parameterizes these anyway
    search = search.replace(";", "").replace("--", "")

    return search.strip() or None


def escape_like_wildcards(value: str) -> str:
    """Escape SQL LIKE wildcards so they match literally."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def contains_pattern(search: str | None) -> str | None:
    """Build an escaped ``%search%`` pattern, or None when nothing is left to match.

    Use with ``column.ilike(pattern, escape="\\\\")``.
    """
    search = sanitize_search(search)
    if search is None:
        return None
    return f"%{escape_like_wildcards(search)}%"
