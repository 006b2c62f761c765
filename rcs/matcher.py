"""
Category and tag matching for search.

A hierarchical token such as ``go-concurrency`` also counts as each of
its components (``go``, ``concurrency``), so a request for ``go`` finds
snippets filed under ``go-concurrency``. Comparison is case-insensitive.
"""

from typing import Iterable

from .types import HIERARCHY_SEPARATOR, split_tags


def _components(token: str) -> list[str]:
    return [c for c in token.split(HIERARCHY_SEPARATOR) if c]


def expand_tokens(tokens: Iterable[str]) -> set[str]:
    """Casefolded tokens plus every hierarchy component of each."""
    expanded: set[str] = set()
    for token in tokens:
        token = token.strip().casefold()
        if not token:
            continue
        expanded.add(token)
        expanded.update(_components(token))
    return expanded


def parse_tag_query(query: str) -> list[str]:
    """Split a requested tag string into individual casefolded tags."""
    return [t.casefold() for t in split_tags(query)]


def category_matches(stored_category: str, requested_category: str) -> bool:
    """Empty request matches all; otherwise match the whole category or a component."""
    requested = (requested_category or "").strip().casefold()
    if not requested:
        return True
    stored = stored_category.casefold()
    return requested == stored or requested in _components(stored)


def tags_match(stored_category: str, stored_tags: str, requested_tags: str) -> bool:
    """Every requested tag must appear in the expanded tag universe (AND)."""
    requested = parse_tag_query(requested_tags)
    if not requested:
        return True
    universe = expand_tokens([stored_category, *split_tags(stored_tags)])
    return all(tag in universe for tag in requested)


def matches(
    stored_category: str,
    stored_tags: str,
    requested_category: str,
    requested_tags: str,
) -> bool:
    """Whether a stored record satisfies both the category and tag request."""
    return (
        category_matches(stored_category, requested_category)
        and tags_match(stored_category, stored_tags, requested_tags)
    )
