"""Include/exclude regex filtering of changed file paths."""

import logging
import re

logger = logging.getLogger(__name__)

_NEWLINE_RE = re.compile(r"[\r\n]+")


def split_patterns(raw: str | None) -> list[str]:
    """Split a raw pattern string into a clean list.

    Newline-separated when the string contains a newline, otherwise
    comma-separated. Entries are trimmed and empty entries dropped.

    Args:
        raw: Raw input, e.g. ``"src/.*\\.py, docs/"``.

    Returns:
        Ordered list of non-empty pattern strings.
    """
    if not raw or not isinstance(raw, str):
        return []

    trimmed = raw.strip()
    if not trimmed:
        return []

    if "\n" in trimmed or "\r" in trimmed:
        parts = _NEWLINE_RE.split(trimmed)
    else:
        parts = trimmed.split(",")

    return [part.strip() for part in parts if part.strip()]


def matches_any(patterns: list[str] | tuple[str, ...], candidate: str | None) -> bool:
    """Return True if any pattern matches anywhere in ``candidate``.

    Patterns that fail to compile are logged and treated as non-matching.

    Args:
        patterns: Regular expressions, tested with ``re.search``.
        candidate: File path to test.

    Returns:
        False for an empty pattern list or empty candidate.
    """
    if not patterns or not candidate:
        return False

    for pattern in patterns:
        try:
            regex = re.compile(pattern)
        except re.error as exc:
            logger.warning("Invalid regex pattern %r ignored: %s", pattern, exc)
            continue
        if regex.search(candidate):
            return True
    return False


def is_in_scope(
    path: str,
    include: list[str] | tuple[str, ...],
    exclude: list[str] | tuple[str, ...],
) -> bool:
    """Apply the inclusion policy. Exclude always wins over include."""
    if include and not matches_any(include, path):
        return False
    return not matches_any(exclude, path)
