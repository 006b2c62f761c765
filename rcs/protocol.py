"""
Protocol definition for snippet storage backends.

SnippetStore (flat file) is the only implementation. An indexed backend
(id -> file offset, rebuilt on open) could satisfy the same contract
without changing the operator or the CLI.
"""

from typing import Iterable, Protocol, runtime_checkable

from .store import ScanResult, StoreStats
from .types import Snippet


@runtime_checkable
class SnippetStoreProtocol(Protocol):
    """
    The storage contract used by SnippetOperator.

    Every method is synchronous and reads or rewrites the backing
    storage on each call.
    """

    # -- Write operations --

    def add(self, snippet: Snippet) -> Snippet: ...

    def update(self, snippet: Snippet) -> Snippet: ...

    def append(self, id: str, extra: str) -> Snippet: ...

    def remove(self, id: str) -> int: ...

    def replace(self, remove_ids: Iterable[str], snippet: Snippet) -> Snippet: ...

    # -- Query operations --

    def get_by_id(self, id: str) -> Snippet: ...

    def search(self, category: str = "", tags: str = "") -> ScanResult: ...

    def get_stats(self) -> StoreStats: ...
