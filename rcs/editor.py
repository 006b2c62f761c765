"""
External text editor integration for interactive edits.
"""

import logging
import os
import shlex
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import Optional

from .errors import EditorError

logger = logging.getLogger(__name__)

DEFAULT_EDITOR = "vi"
EDIT_SUFFIX = ".rcs"


def resolve_editor(configured: Optional[str] = None) -> str:
    """Editor command: configured value, then $VISUAL, then $EDITOR, then vi."""
    return (
        configured
        or os.environ.get("VISUAL")
        or os.environ.get("EDITOR")
        or DEFAULT_EDITOR
    )


def edit_text(text: str, editor: Optional[str] = None) -> str:
    """
    Open ``text`` in an editor and return what the user saved.

    Blocks until the editor process exits. The editor inherits the
    terminal. The temporary file is always deleted.

    Raises:
        EditorError: editor not found, failed to start, or exited non-zero
    """
    command = shlex.split(resolve_editor(editor))
    if not command or shutil.which(command[0]) is None:
        raise EditorError(f"editor not found: {command[0] if command else editor!r}")

    fd, name = tempfile.mkstemp(prefix="rcs-", suffix=EDIT_SUFFIX)
    path = Path(name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
        logger.debug("Launching editor: %s %s", command, path)
        try:
            proc = subprocess.run([*command, str(path)])
        except OSError as e:
            raise EditorError(f"can not launch editor {command[0]}: {e}") from e
        if proc.returncode != 0:
            raise EditorError(f"editor {command[0]} exited with status {proc.returncode}")
        return path.read_text(encoding="utf-8")
    finally:
        path.unlink(missing_ok=True)
