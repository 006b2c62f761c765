"""
Data types for the snippet store.
"""

from dataclasses import dataclass, replace as _dc_replace
from typing import Iterable

from .errors import ValidationError


# Field delimiter of the persisted line format
DELIMITER = "|"

# Separator between tags in the tags field
TAG_SEPARATOR = ","

# Hierarchy separator inside a category or tag (e.g. "backend-go")
HIERARCHY_SEPARATOR = "-"

# Length of a generated id: base64 of a 20-byte SHA-1 digest
ID_LENGTH = 28


def split_tags(tags: str) -> list[str]:
    """Split a comma-joined tag string into tokens.

    Whitespace around tokens is stripped, empty tokens are dropped and
    repeats are removed, keeping first-seen order.
    """
    result: list[str] = []
    for token in (tags or "").split(TAG_SEPARATOR):
        token = token.strip()
        if token and token not in result:
            result.append(token)
    return result


def join_tags(tags: Iterable[str]) -> str:
    """Join tag tokens back into the stored comma-joined form."""
    return TAG_SEPARATOR.join(tags)


def _has_line_break(value: str) -> bool:
    # the sentinel makes a trailing break count too
    return len((value + "x").splitlines()) > 1


def check_persistable(category: str, tags: str) -> None:
    """Reject category or tags that would break the one-line record format."""
    if DELIMITER in category or DELIMITER in tags:
        raise ValidationError(f"category and tags can not contain '{DELIMITER}'")
    if _has_line_break(category) or _has_line_break(tags):
        raise ValidationError("category and tags can not contain line breaks")


def validate_classification(category: str, tags: str) -> None:
    """Check that a record can be classified and safely persisted."""
    if not category and not tags:
        raise ValidationError("category and tags can not both be empty")
    check_persistable(category, tags)


@dataclass(frozen=True)
class Snippet:
    """
    A stored code snippet with its classification.

    This is an immutable snapshot. Store operations return new Snippets
    rather than mutating the ones passed in.

    Attributes:
        id: Identifier derived from category + tags; empty until stored
        category: Single classification token, optionally hierarchical
        tags: Comma-joined free-form tags
        description: Free-form text, may span lines
        content: The snippet body itself
    """
    id: str = ""
    category: str = ""
    tags: str = ""
    description: str = ""
    content: str = ""

    @property
    def tag_list(self) -> list[str]:
        return split_tags(self.tags)

    def replace(self, **changes) -> "Snippet":
        """Return a copy with the given fields changed."""
        return _dc_replace(self, **changes)

    def __str__(self) -> str:
        return f"{self.id} [{self.category}] {self.tags}"
