"""
CLI interface for the snippet store.

Usage:
    rcs add -c go -t concurrency,channels -m "fan-in" 'func merge(cs ...<-chan int) ...'
    rcs search -c go concurrency
    rcs edit <id>
"""

import functools
import logging
import os
from pathlib import Path
from typing import NoReturn, Optional

import typer
from typing_extensions import Annotated

from .config import StoreConfig, load_or_create_config
from .editor import edit_text
from .errors import SnippetError
from .logging_config import configure_ops_log, configure_quiet_mode, enable_debug_mode
from .operator import SnippetOperator
from .store import SnippetStore
from .types import Snippet

RESULT_DELIMITER = "-" * 56
CONTENT_LABEL = "Content: "

# Tag lists in listings wrap after this many characters
TAG_LINE_MAX = 50


# Configure quiet mode by default
# Set RCS_VERBOSE=1 to enable debug mode via environment
if os.environ.get("RCS_VERBOSE") == "1":
    enable_debug_mode()
else:
    configure_quiet_mode(quiet=True)


def _version_callback(value: bool):
    if value:
        from importlib.metadata import version
        print(f"rcs {version('rcs-snippets')}")
        raise typer.Exit()


def _verbose_callback(value: bool):
    if value:
        enable_debug_mode()


# Global state for CLI options
_store_override: Optional[Path] = None
_ops_log_handler: Optional[logging.Handler] = None


def _store_callback(value: Optional[Path]):
    global _store_override
    _store_override = value


def _get_store_override() -> Optional[Path]:
    return _store_override


app = typer.Typer(
    name="rcs",
    help="Reusable code snippets, filed by category and tags.",
    no_args_is_help=False,
    invoke_without_command=True,
    rich_markup_mode=None,
)


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[bool, typer.Option(
        "--verbose", "-v",
        help="Enable debug-level logging to stderr",
        callback=_verbose_callback,
        is_eager=True,
    )] = False,
    version: Annotated[Optional[bool], typer.Option(
        "--version",
        help="Show version and exit",
        callback=_version_callback,
        is_eager=True,
    )] = None,
    store: Annotated[Optional[Path], typer.Option(
        "--store", "-s",
        envvar="RCS_STORE_PATH",
        help="Path to the store directory (default: ~/.rcs/)",
        callback=_store_callback,
        is_eager=True,
    )] = None,
):
    """Reusable code snippets, filed by category and tags."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(2)


# -----------------------------------------------------------------------------
# Common Options
# -----------------------------------------------------------------------------

IdOption = Annotated[
    str,
    typer.Option("--id", "-i", help="Snippet id"),
]

CategoryOption = Annotated[
    str,
    typer.Option("--category", "-c", help="Category, optionally hierarchical (backend-go)"),
]

TagsOption = Annotated[
    str,
    typer.Option("--tags", "-t", help="Comma-separated tags (tag1,tag2)"),
]

DescOption = Annotated[
    str,
    typer.Option("--message", "-m", help="Description"),
]

ContentArgument = Annotated[
    Optional[list[str]],
    typer.Argument(help="Snippet content (words are joined with spaces)"),
]


def _get_config(store: Optional[Path] = None) -> StoreConfig:
    actual_store = store if store is not None else _get_store_override()
    try:
        return load_or_create_config(actual_store)
    except (OSError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


def _get_operator(store: Optional[Path] = None) -> SnippetOperator:
    """Build an operator over the configured store, with the ops log attached."""
    global _ops_log_handler
    config = _get_config(store)

    rcs_logger = logging.getLogger("rcs")
    if _ops_log_handler is not None:
        rcs_logger.removeHandler(_ops_log_handler)
        _ops_log_handler.close()
    try:
        _ops_log_handler = configure_ops_log(config.path)
    except OSError:
        _ops_log_handler = None  # Never block normal operation

    editor = functools.partial(edit_text, editor=config.editor or None)
    return SnippetOperator(
        SnippetStore(config.data_path),
        editor=editor,
        search_limit=config.search_limit,
    )


def _fail(e: Exception) -> NoReturn:
    typer.echo(f"Error: {e}", err=True)
    raise typer.Exit(1)


def _join_content(content: Optional[list[str]]) -> str:
    return " ".join(content or [])


# -----------------------------------------------------------------------------
# Output Formatting
# -----------------------------------------------------------------------------

def _format_snippet(snippet: Snippet) -> str:
    """Full display block: header line, description, indented content."""
    lines = [
        f"Id:{snippet.id}; Category:{snippet.category}; Tags:{snippet.tags}",
        f"Description: {snippet.description}",
    ]
    for i, line in enumerate(snippet.content.split("\n")):
        prefix = CONTENT_LABEL if i == 0 else " " * len(CONTENT_LABEL)
        lines.append(prefix + line)
    return "\n".join(lines)


def _wrap_tags(tags: list[str], width: int = TAG_LINE_MAX) -> list[str]:
    """Comma-join tags over several lines of at most ``width`` characters.

    A single tag longer than ``width`` gets a line of its own. Every line
    but the last ends with a comma.
    """
    lines: list[str] = []
    line = ""
    for tag in tags:
        candidate = f"{line},{tag}" if line else tag
        if line and len(candidate) > width:
            lines.append(line + ",")
            line = tag
        else:
            line = candidate
    if line or not lines:
        lines.append(line)
    return lines


def _format_table(header: list[str], rows: list[list[str]], wrap_last: list[list[str]]) -> str:
    """Fixed-width columns; the last column may span several lines per row."""
    widths = [
        max([len(header[i])] + [len(r[i]) for r in rows]) + 2
        for i in range(len(header) - 1)
    ]
    indent = " " * sum(widths)

    def fmt(cells: list[str], last: str) -> str:
        return "".join(c.ljust(w) for c, w in zip(cells, widths)) + last

    out = [fmt(header[:-1], header[-1]).rstrip()]
    for row, last_lines in zip(rows, wrap_last):
        out.append(fmt(row, last_lines[0]).rstrip())
        out.extend((indent + extra).rstrip() for extra in last_lines[1:])
    return "\n".join(out)


def _echo_warnings(warnings: list[str]) -> None:
    for w in warnings:
        typer.echo(f"Warning: skipped malformed record at {w}", err=True)


# -----------------------------------------------------------------------------
# Commands
# -----------------------------------------------------------------------------

@app.command()
def add(
    content: ContentArgument = None,
    category: CategoryOption = "",
    tags: TagsOption = "",
    desc: DescOption = "",
):
    """
    Store a new snippet.

    \b
    Examples:
        rcs add -c go -t http,server -m "graceful stop" 'srv.Shutdown(ctx)'
    """
    op = _get_operator()
    try:
        snippet = op.add(Snippet(
            category=category, tags=tags, description=desc, content=_join_content(content),
        ))
    except SnippetError as e:
        _fail(e)
    typer.echo(f"Added {snippet.id}")


@app.command()
def update(
    content: ContentArgument = None,
    id: IdOption = "",
    category: CategoryOption = "",
    tags: TagsOption = "",
    desc: DescOption = "",
):
    """
    Overwrite fields of a stored snippet. Omitted fields are kept.
    """
    op = _get_operator()
    try:
        snippet = op.update(Snippet(
            id=id, category=category, tags=tags, description=desc,
            content=_join_content(content),
        ))
    except SnippetError as e:
        _fail(e)
    typer.echo(f"Updated {snippet.id}")


@app.command()
def append(
    content: ContentArgument = None,
    id: IdOption = "",
):
    """
    Append a line of content to a stored snippet.
    """
    op = _get_operator()
    try:
        snippet = op.append(id, _join_content(content))
    except SnippetError as e:
        _fail(e)
    typer.echo(f"Appended to {snippet.id}")


@app.command()
def merge(
    ids: Annotated[list[str], typer.Argument(help="Ids of snippets to merge (same category)")],
):
    """
    Merge snippets of one category into a single new snippet.
    """
    op = _get_operator()
    try:
        snippet = op.merge(*ids)
    except SnippetError as e:
        _fail(e)
    typer.echo(f"Merged {len(ids)} snippets into {snippet.id}")


@app.command()
def search(
    words: Annotated[Optional[list[str]], typer.Argument(help="Tags to search for")] = None,
    category: CategoryOption = "",
    tags: TagsOption = "",
):
    """
    Find snippets by category and tags (all tags must match).

    \b
    Examples:
        rcs search go concurrency
        rcs search -c go -t http,server
    """
    query = ",".join(t for t in [tags, *(words or [])] if t)
    op = _get_operator()
    page = op.search(category, query)
    _echo_warnings(page.warnings)

    if page.total == 0:
        typer.echo("no result found.")
        return
    if page.total == 1:
        typer.echo(page.snippets[0].content)
        return

    if page.truncated:
        typer.echo(f"Found {page.total} matched snippets, showing first {len(page.snippets)}:")
    else:
        typer.echo(f"Found {page.total} matched snippets:")
    for snippet in page.snippets:
        typer.echo(RESULT_DELIMITER)
        typer.echo(_format_snippet(snippet))
    typer.echo(RESULT_DELIMITER)


@app.command()
def get(
    id: Annotated[str, typer.Argument(help="Snippet id")],
):
    """
    Show one snippet in full.
    """
    op = _get_operator()
    try:
        snippet = op.get(id)
    except SnippetError as e:
        _fail(e)
    typer.echo(_format_snippet(snippet))


@app.command()
def remove(
    id: Annotated[str, typer.Argument(help="Snippet id")],
    yes: Annotated[bool, typer.Option(
        "--yes", "-y",
        help="Don't ask for confirmation",
    )] = False,
):
    """
    Remove a snippet. The previous store file is kept as <file>.old.
    """
    op = _get_operator()
    if not yes and not typer.confirm(f"Are you sure to remove snippet with id ({id})?"):
        typer.echo("Nothing removed.")
        return
    try:
        op.remove(id)
    except SnippetError as e:
        _fail(e)
    typer.echo(f"Removed {id}")


@app.command()
def edit(
    id: Annotated[str, typer.Argument(help="Snippet id")],
):
    """
    Edit a snippet in $EDITOR. The result is stored under a fresh id.
    """
    op = _get_operator()
    try:
        snippet = op.edit(id)
    except SnippetError as e:
        _fail(e)
    typer.echo(f"Saved {snippet.id}")


@app.command("list-categories")
def list_categories():
    """
    List categories with their snippet count and tags.
    """
    op = _get_operator()
    rows = op.list_categories()
    if not rows:
        typer.echo("No snippets stored.")
        return
    typer.echo(_format_table(
        ["INDEX", "CATEGORY", "RCS-NUM", "TAGS"],
        [[str(i), cate, str(num)] for i, (cate, num, _) in enumerate(rows, start=1)],
        [_wrap_tags(tags) for _, _, tags in rows],
    ))


@app.command("list-tags")
def list_tags():
    """
    List tags with their snippet count and categories.
    """
    op = _get_operator()
    rows = op.list_tags()
    if not rows:
        typer.echo("No snippets stored.")
        return
    typer.echo(_format_table(
        ["INDEX", "TAG", "RCS-NUM", "CATEGORIES"],
        [[str(i), tag, str(num)] for i, (tag, num, _) in enumerate(rows, start=1)],
        [[",".join(cates)] for _, _, cates in rows],
    ))


@app.command("list-c", hidden=True)
def list_c():
    """List categories (alias for 'list-categories')."""
    list_categories()


@app.command("list-t", hidden=True)
def list_t():
    """List tags (alias for 'list-tags')."""
    list_tags()


# -----------------------------------------------------------------------------
# Entry point
# -----------------------------------------------------------------------------

def main():
    try:
        app()
    except SystemExit:
        raise  # Let typer handle exit codes
    except KeyboardInterrupt:
        raise SystemExit(130)  # Standard exit code for Ctrl+C
    except Exception as e:
        # Log full traceback to file, show clean message to user
        from .errors import log_exception
        log_path = log_exception(e, context="rcs CLI")
        typer.echo(f"Error: {e}", err=True)
        typer.echo(f"Details logged to {log_path}", err=True)
        raise SystemExit(1)


if __name__ == "__main__":
    main()
