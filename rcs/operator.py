"""
Snippet workflows on top of a store: validated add, update, append,
search, merge and interactive edit.

Every method either returns its result or raises a SnippetError. No
error state is carried between calls; the caller decides whether to
continue after a failure.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

from .codec import from_editable, to_editable
from .editor import edit_text
from .errors import CategoryMismatchError, ValidationError
from .protocol import SnippetStoreProtocol
from .types import Snippet, check_persistable, join_tags, validate_classification

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_LIMIT = 10


@dataclass
class SearchPage:
    """The first ``limit`` matches of a search, and how many there were in total."""
    snippets: list[Snippet] = field(default_factory=list)
    total: int = 0
    warnings: list[str] = field(default_factory=list)

    @property
    def truncated(self) -> bool:
        return self.total > len(self.snippets)


class SnippetOperator:
    """
    Validated, multi-record operations over a snippet store.

    Args:
        store: Any SnippetStoreProtocol implementation
        editor: Callable taking the editable text and returning the
            edited text; defaults to launching the user's editor
        search_limit: Maximum number of snippets in a SearchPage
    """

    def __init__(
        self,
        store: SnippetStoreProtocol,
        editor: Optional[Callable[[str], str]] = None,
        search_limit: int = DEFAULT_SEARCH_LIMIT,
    ):
        self._store = store
        self._editor = editor or edit_text
        self._search_limit = search_limit

    @property
    def store(self) -> SnippetStoreProtocol:
        return self._store

    @staticmethod
    def _validated(snippet: Snippet) -> Snippet:
        """Trimmed copy of a new snippet, or ValidationError."""
        snippet = snippet.replace(content=snippet.content.strip())
        if not snippet.content:
            raise ValidationError("content can not be empty")
        validate_classification(snippet.category, snippet.tags)
        return snippet

    @staticmethod
    def _require_id(id: str) -> None:
        if not id:
            raise ValidationError("id is empty")

    # -------------------------------------------------------------------------
    # Single-record operations
    # -------------------------------------------------------------------------

    def add(self, snippet: Snippet) -> Snippet:
        """Validate and store a new snippet. Returns it with its id."""
        return self._store.add(self._validated(snippet))

    def get(self, id: str) -> Snippet:
        self._require_id(id)
        return self._store.get_by_id(id)

    def update(self, snippet: Snippet) -> Snippet:
        """Overwrite the non-empty fields of the snippet with ``snippet.id``."""
        self._require_id(snippet.id)
        check_persistable(snippet.category, snippet.tags)
        return self._store.update(snippet.replace(content=snippet.content.strip()))

    def append(self, id: str, extra: str) -> Snippet:
        """Append ``extra`` to the content of the snippet with ``id``."""
        self._require_id(id)
        if not extra.strip():
            raise ValidationError("content to append is empty")
        return self._store.append(id, extra)

    def remove(self, id: str) -> int:
        self._require_id(id)
        return self._store.remove(id)

    def search(self, category: str = "", tags: str = "") -> SearchPage:
        """Matching snippets, capped at the search limit."""
        found = self._store.search(category, tags)
        return SearchPage(
            snippets=found.snippets[:self._search_limit],
            total=len(found.snippets),
            warnings=list(found.warnings),
        )

    # -------------------------------------------------------------------------
    # Multi-record operations
    # -------------------------------------------------------------------------

    def merge(self, *ids: str) -> Snippet:
        """
        Merge snippets of one category into a single new snippet.

        Descriptions and contents are joined in argument order, tags are
        unioned in first-seen order, and the result gets a fresh id.
        Nothing is changed unless every id is found and every category
        equals the first one. Sources are removed before the merged
        snippet is added, so it can't collide with its own sources.

        Raises:
            ValidationError: no ids given
            NotFoundError: an id doesn't exist
            CategoryMismatchError: categories differ
        """
        ids = list(dict.fromkeys(ids))
        if not ids:
            raise ValidationError("no ids to merge")

        sources = [self._store.get_by_id(id) for id in ids]
        category = sources[0].category
        for source in sources[1:]:
            if source.category != category:
                raise CategoryMismatchError(
                    f"categories are not equal ({category!r} vs {source.category!r}), can not merge"
                )

        tags: list[str] = []
        for source in sources:
            for tag in source.tag_list:
                if tag not in tags:
                    tags.append(tag)

        merged = Snippet(
            category=category,
            tags=join_tags(tags),
            description="\n".join(s.description for s in sources).strip(),
            content="\n".join(s.content for s in sources).strip(),
        )
        merged = self._store.replace([s.id for s in sources], self._validated(merged))
        logger.info("Merged %s into %s", ", ".join(s.id for s in sources), merged.id)
        return merged

    def edit(self, id: str) -> Snippet:
        """
        Edit a snippet interactively and store the result as a new record.

        The edited snippet gets a fresh id derived from its (possibly
        changed) classification. The old record is removed before the
        edited one is added, in one rewrite; an editor failure, a parse
        error or a rejected add leaves the store unchanged.
        """
        current = self.get(id)
        edited_text = self._editor(to_editable(current))
        edited = self._validated(from_editable(edited_text).replace(id=""))
        result = self._store.replace([current.id], edited)
        logger.info("Edited %s -> %s", current.id, result.id)
        return result

    # -------------------------------------------------------------------------
    # Listings
    # -------------------------------------------------------------------------

    def list_categories(self) -> list[tuple[str, int, list[str]]]:
        """(category, record count, tags used) for every category."""
        stats = self._store.get_stats()
        return [
            (c, stats.category_counts[c], stats.category_tags[c])
            for c in stats.categories
        ]

    def list_tags(self) -> list[tuple[str, int, list[str]]]:
        """(tag, record count, categories it appears under) for every tag."""
        stats = self._store.get_stats()
        return [
            (t, stats.tag_counts[t], stats.tag_categories[t])
            for t in stats.tags
        ]
