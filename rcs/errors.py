"""
Error types and error logging for rcs.

Store and operator failures raise a subclass of SnippetError so the CLI
can show a clean one-line message. Unexpected exceptions are logged with
full stack traces for debugging.
"""

import os
import traceback
from datetime import datetime, timezone
from pathlib import Path


class SnippetError(Exception):
    """Base class for every failure the store or operator reports."""


class ValidationError(SnippetError, ValueError):
    """A request is rejected before the store is touched."""


class InvalidIdError(ValidationError):
    """An identifier is structurally invalid (too short to be an id)."""


class DuplicateError(SnippetError):
    """A record with the same id or identical content is already stored."""


class NotFoundError(SnippetError, LookupError):
    """No record matches the id, or the store file is absent."""


class MalformedRecordError(SnippetError, ValueError):
    """A stored line or edited text cannot be decoded into a record."""


class CategoryMismatchError(SnippetError):
    """Records from different categories cannot be merged."""


class EditorError(SnippetError):
    """The external editor could not be launched or exited with an error."""


def _error_log_path() -> Path:
    """Resolve error log path, respecting RCS_STORE_PATH."""
    store = os.environ.get("RCS_STORE_PATH")
    if store:
        return Path(store) / "rcs-errors.log"
    return Path.home() / ".rcs" / "rcs-errors.log"


def log_exception(exc: Exception, context: str = "") -> Path:
    """
    Log exception with full traceback to file.

    Args:
        exc: The exception that occurred
        context: Optional context string (e.g., command name)

    Returns:
        Path to the error log file
    """
    log_path = _error_log_path()
    timestamp = datetime.now(timezone.utc).isoformat()
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(log_path, os.O_WRONLY | os.O_CREAT | os.O_APPEND, 0o600)
        with os.fdopen(fd, "a") as f:
            f.write(f"\n{'='*60}\n")
            f.write(f"[{timestamp}]")
            if context:
                f.write(f" {context}")
            f.write("\n")
            f.write("".join(traceback.format_exception(type(exc), exc, exc.__traceback__)))
    except OSError:
        pass  # Can't write error log; don't crash over it
    return log_path
