"""
Flat-file snippet store.

One snippet per line in a UTF-8 text file (see codec.py for the line
format). Nothing is cached: every call re-reads the file, and every
mutation other than a plain add rewrites it completely.

Before a rewrite the live file is renamed to ``<file>.old``, replacing
any earlier backup, so the immediately previous version can always be
recovered by hand. The rename and the following write are not atomic
together, and nothing guards against two processes writing the same
file at once.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator, Union

from .codec import decode_line, encode_line
from .errors import DuplicateError, InvalidIdError, MalformedRecordError, NotFoundError
from .ids import generate_id
from .matcher import matches
from .types import DELIMITER, ID_LENGTH, Snippet, validate_classification

logger = logging.getLogger(__name__)

BACKUP_SUFFIX = ".old"


@dataclass
class ScanResult:
    """Snippets decoded by a scan, plus one warning per skipped line."""
    snippets: list[Snippet] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.snippets)

    def __iter__(self) -> Iterator[Snippet]:
        return iter(self.snippets)


@dataclass
class StoreStats:
    """
    Aggregate views over the whole store, for listings.

    All collections keep first-seen (file) order. Records with an empty
    category are counted in ``total`` and under their tags, but don't
    appear in the category views.
    """
    total: int = 0
    categories: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    category_tags: dict[str, list[str]] = field(default_factory=dict)
    category_counts: dict[str, int] = field(default_factory=dict)
    tag_categories: dict[str, list[str]] = field(default_factory=dict)
    tag_counts: dict[str, int] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)

    def _record(self, snippet: Snippet) -> None:
        self.total += 1
        category = snippet.category
        tags = snippet.tag_list
        if category:
            if category not in self.category_tags:
                self.categories.append(category)
                self.category_tags[category] = []
                self.category_counts[category] = 0
            self.category_counts[category] += 1
            for tag in tags:
                if tag not in self.category_tags[category]:
                    self.category_tags[category].append(tag)
        for tag in tags:
            if tag not in self.tag_counts:
                self.tags.append(tag)
                self.tag_categories[tag] = []
                self.tag_counts[tag] = 0
            self.tag_counts[tag] += 1
            if category and category not in self.tag_categories[tag]:
                self.tag_categories[tag].append(category)


def _check_id(id: str) -> None:
    if len(id or "") < ID_LENGTH:
        raise InvalidIdError(f"invalid id (shorter than {ID_LENGTH} characters): {id!r}")


class SnippetStore:
    """
    Store of snippets backed by a single flat file.

    The file is created on the first add. Reads of a missing file behave
    as an empty store, except for lookups by id, which report NotFoundError.
    """

    def __init__(self, path: Union[str, Path]):
        """
        Args:
            path: Path to the data file
        """
        self._path = Path(path).expanduser()

    @property
    def path(self) -> Path:
        return self._path

    @property
    def backup_path(self) -> Path:
        """Where the previous version lives after a rewrite."""
        return self._path.with_name(self._path.name + BACKUP_SUFFIX)

    def __repr__(self) -> str:
        return f"SnippetStore({str(self._path)!r})"

    # -------------------------------------------------------------------------
    # File access
    # -------------------------------------------------------------------------

    def _read_lines(self) -> list[str]:
        """All lines, blank ones included. Raises FileNotFoundError if the file is absent."""
        # newline="\n": only LF ends a record, a stray CR stays in its field
        with open(self._path, encoding="utf-8", newline="\n") as f:
            return [line.rstrip("\r\n") for line in f]

    def _read_lines_or_empty(self) -> list[str]:
        try:
            return self._read_lines()
        except FileNotFoundError:
            return []

    def _read_lines_required(self) -> list[str]:
        try:
            return self._read_lines()
        except FileNotFoundError as e:
            raise NotFoundError(f"store file does not exist: {self._path}") from e

    def _rewrite(self, lines: list[str]) -> None:
        """Back up the live file, then write ``lines`` as the new file."""
        if self._path.exists():
            self._path.replace(self.backup_path)
        else:
            self._path.parent.mkdir(parents=True, exist_ok=True)
        with open(self._path, "w", encoding="utf-8", newline="\n") as f:
            for line in lines:
                if line.strip():
                    f.write(line + "\n")

    def _scan(self, lines: Iterable[str]) -> ScanResult:
        result = ScanResult()
        for lineno, line in enumerate(lines, start=1):
            if not line.strip():
                continue
            try:
                result.snippets.append(decode_line(line))
            except MalformedRecordError as e:
                logger.warning("Skipping malformed record in %s line %d: %s",
                               self._path, lineno, e)
                result.warnings.append(f"line {lineno}: {e}")
        return result

    def _check_duplicate(self, snippet: Snippet, lines: Iterable[str]) -> None:
        for line in lines:
            if line.split(DELIMITER, 1)[0] == snippet.id:
                raise DuplicateError(f"duplicated id: {snippet.id}")
            try:
                existing = decode_line(line)
            except MalformedRecordError:
                continue
            if existing.content == snippet.content:
                raise DuplicateError(f"duplicated content: already stored as {existing.id}")

    def _prepare(self, snippet: Snippet) -> Snippet:
        """Validate classification and assign an id if the snippet has none."""
        validate_classification(snippet.category, snippet.tags)
        if snippet.id:
            _check_id(snippet.id)
        else:
            snippet = snippet.replace(id=generate_id(snippet))
        return snippet

    # -------------------------------------------------------------------------
    # Write Operations
    # -------------------------------------------------------------------------

    def add(self, snippet: Snippet) -> Snippet:
        """
        Append a snippet to the store.

        An id is generated if the snippet has none.

        Returns:
            The stored snippet, with its id

        Raises:
            ValidationError: no classification to derive an id from
            InvalidIdError: a given id is shorter than an id can be
            DuplicateError: same id or identical content already stored
        """
        snippet = self._prepare(snippet)
        self._check_duplicate(snippet, self._read_lines_or_empty())

        self._path.parent.mkdir(parents=True, exist_ok=True)
        with open(self._path, "a", encoding="utf-8", newline="\n") as f:
            f.write(encode_line(snippet) + "\n")
        logger.info("Added %s [%s] %s", snippet.id, snippet.category, snippet.tags)
        return snippet

    def update(self, snippet: Snippet) -> Snippet:
        """
        Merge non-empty fields of ``snippet`` into the stored record with its id.

        Empty incoming fields leave the stored value unchanged. The id is
        kept even when the classification changes.

        Returns:
            The updated snippet
        """
        current = self.get_by_id(snippet.id)
        merged = current.replace(
            category=snippet.category or current.category,
            tags=snippet.tags or current.tags,
            description=snippet.description or current.description,
            content=snippet.content or current.content,
        )
        updated = self.replace([current.id], merged)
        logger.info("Updated %s", current.id)
        return updated

    def append(self, id: str, extra: str) -> Snippet:
        """
        Append text to a stored snippet's content.

        Exactly one newline separates the old content from ``extra``,
        whatever newlines either side already carried at the boundary.
        """
        current = self.get_by_id(id)
        content = current.content.rstrip("\n") + "\n" + extra.lstrip("\n")
        updated = self.replace([current.id], current.replace(content=content))
        logger.info("Appended %d chars to %s", len(extra), current.id)
        return updated

    def remove(self, id: str) -> int:
        """
        Remove every record whose line starts with ``id``.

        Returns:
            Number of records removed

        Raises:
            InvalidIdError: id too short
            NotFoundError: file absent or nothing matched
        """
        _check_id(id)
        lines = self._read_lines_required()
        kept = [line for line in lines if not line.startswith(id)]
        removed = len(lines) - len(kept)
        if not removed:
            raise NotFoundError(f"can not find snippet by id: {id}")
        self._rewrite(kept)
        logger.info("Removed %s (%d record%s)", id, removed, "" if removed == 1 else "s")
        return removed

    def replace(self, remove_ids: Iterable[str], snippet: Snippet) -> Snippet:
        """
        Remove records, then add ``snippet``, in a single rewrite.

        The new record is checked for duplicates against what remains
        after removal, so a record may be replaced by one with the same
        id or content. If any check fails the file is left untouched.

        Raises:
            InvalidIdError, NotFoundError: as for remove()
            ValidationError, DuplicateError: as for add()
        """
        remove_ids = list(remove_ids)
        for id in remove_ids:
            _check_id(id)
        snippet = self._prepare(snippet)

        kept = self._read_lines_required()
        for id in remove_ids:
            remaining = [line for line in kept if not line.startswith(id)]
            if len(remaining) == len(kept):
                raise NotFoundError(f"can not find snippet by id: {id}")
            kept = remaining

        self._check_duplicate(snippet, kept)
        kept.append(encode_line(snippet))
        self._rewrite(kept)
        logger.info("Replaced %s with %s", ", ".join(remove_ids) or "nothing", snippet.id)
        return snippet

    # -------------------------------------------------------------------------
    # Read Operations
    # -------------------------------------------------------------------------

    def get_by_id(self, id: str) -> Snippet:
        """
        Get the first snippet whose line starts with ``id``.

        Raises:
            InvalidIdError: id too short
            NotFoundError: file absent or no line matches
            MalformedRecordError: the matching line can't be decoded
        """
        _check_id(id)
        for line in self._read_lines_required():
            if line.startswith(id):
                return decode_line(line)
        raise NotFoundError(f"can not find snippet by id: {id}")

    def all(self) -> ScanResult:
        """Every decodable snippet, in file order."""
        return self._scan(self._read_lines_or_empty())

    def count(self) -> int:
        return len(self.all())

    def search(self, category: str = "", tags: str = "") -> ScanResult:
        """
        Snippets matching a category and tag request, in file order.

        Empty category and tags match everything.
        """
        scan = self.all()
        found = [s for s in scan.snippets if matches(s.category, s.tags, category, tags)]
        logger.debug("Search category=%r tags=%r: %d of %d", category, tags, len(found), len(scan))
        return ScanResult(found, scan.warnings)

    def get_stats(self) -> StoreStats:
        """Aggregate category and tag views for listings."""
        scan = self.all()
        stats = StoreStats(warnings=list(scan.warnings))
        for snippet in scan.snippets:
            stats._record(snippet)
        return stats
