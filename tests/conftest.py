"""
Shared pytest fixtures for rcs tests.

Every store lives under tmp_path. The interactive editor is replaced
by FakeEditor so no terminal program is launched.
"""

from pathlib import Path
from typing import Callable, Optional

import pytest

from rcs.errors import EditorError
from rcs.operator import SnippetOperator
from rcs.store import SnippetStore
from rcs.types import Snippet


class FakeEditor:
    """
    Stand-in for the external editor.

    Applies ``transform`` to the text it is given (identity by default)
    and remembers every text it was shown.
    """

    def __init__(self, transform: Optional[Callable[[str], str]] = None, fail: bool = False):
        self.transform = transform or (lambda text: text)
        self.fail = fail
        self.seen: list[str] = []

    def __call__(self, text: str) -> str:
        self.seen.append(text)
        if self.fail:
            raise EditorError("editor vi exited with status 1")
        return self.transform(text)


@pytest.fixture
def store_file(tmp_path) -> Path:
    return tmp_path / "segfile.rcs"


@pytest.fixture
def store(store_file):
    """An empty store; the file doesn't exist yet."""
    return SnippetStore(store_file)


@pytest.fixture
def fake_editor():
    return FakeEditor()


@pytest.fixture
def editor_factory():
    """Build FakeEditors with a custom transform or failure."""
    return FakeEditor


@pytest.fixture
def operator(store, fake_editor):
    return SnippetOperator(store, editor=fake_editor)


@pytest.fixture
def seeded(store):
    """A store with a few snippets; returns (store, {name: snippet})."""
    snippets = {
        "fanin": store.add(Snippet(
            category="go-concurrency", tags="channels",
            description="fan-in", content="func merge(cs ...<-chan int) <-chan int",
        )),
        "waitgroup": store.add(Snippet(
            category="go", tags="concurrency,testing",
            description="", content="var wg sync.WaitGroup",
        )),
        "pool": store.add(Snippet(
            category="python", tags="concurrency",
            description="process pool", content="with ProcessPoolExecutor() as ex:\n    ex.map(f, xs)",
        )),
        "venv": store.add(Snippet(
            category="python", tags="tooling,venv",
            description="", content="python -m venv .venv",
        )),
    }
    return store, snippets
