"""
rcs: reusable code snippets

A personal store for code snippets, filed by category and free-form tags
and kept in a single flat text file.

Quick Start:
    from rcs import Snippet, SnippetOperator, SnippetStore

    op = SnippetOperator(SnippetStore("~/.rcs/segfile.rcs"))
    s = op.add(Snippet(category="go", tags="http,server", content="srv.Shutdown(ctx)"))
    page = op.search("go", "http")

CLI Usage:
    rcs add -c go -t http,server -m "graceful stop" 'srv.Shutdown(ctx)'
    rcs search go http
    rcs merge <id1> <id2>

Environment Variables:
    RCS_STORE_PATH  - Override default store directory (~/.rcs)
    RCS_VERBOSE     - Set to 1 for debug logging
"""

from .errors import (
    CategoryMismatchError,
    DuplicateError,
    EditorError,
    InvalidIdError,
    MalformedRecordError,
    NotFoundError,
    SnippetError,
    ValidationError,
)
from .operator import SearchPage, SnippetOperator
from .store import ScanResult, SnippetStore, StoreStats
from .types import Snippet

__version__ = "0.1.0"
__all__ = [
    "Snippet",
    "SnippetStore",
    "SnippetOperator",
    "ScanResult",
    "SearchPage",
    "StoreStats",
    "SnippetError",
    "ValidationError",
    "InvalidIdError",
    "DuplicateError",
    "NotFoundError",
    "MalformedRecordError",
    "CategoryMismatchError",
    "EditorError",
]
