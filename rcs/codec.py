"""
Record codec: the persisted one-line form and the human-editable form.

Persisted line::

    id|category|tags|base64(description)|base64(content)

Description and content are base64-encoded (standard alphabet over UTF-8
bytes), so neither can introduce a newline or the delimiter into the line.
"""

import base64
import binascii

from .errors import MalformedRecordError
from .types import DELIMITER, Snippet

FIELD_COUNT = 5

# Continuation lines in the editable form are indented to the label width
EDIT_LABEL_WIDTH = 10
EDIT_INDENT = " " * EDIT_LABEL_WIDTH

_LABEL_ID = "Id:"
_LABEL_CATEGORY = "Category:"
_LABEL_TAGS = "Tags:"
_LABEL_DESC = "Desc:"
_LABEL_CONTENT = "Content:"


def _encode_text(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def _decode_text(field: str, name: str) -> str:
    try:
        return base64.b64decode(field, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as e:
        raise MalformedRecordError(f"cannot decode {name} field: {e}") from e


def encode_line(snippet: Snippet) -> str:
    """Serialize a snippet to its persisted line (without trailing newline)."""
    return DELIMITER.join((
        snippet.id,
        snippet.category,
        snippet.tags,
        _encode_text(snippet.description),
        _encode_text(snippet.content),
    ))


def decode_line(line: str) -> Snippet:
    """
    Parse a persisted line back into a snippet.

    Raises:
        MalformedRecordError: wrong field count or undecodable text field
    """
    fields = line.rstrip("\r\n").split(DELIMITER)
    if len(fields) != FIELD_COUNT:
        raise MalformedRecordError(
            f"expected {FIELD_COUNT} fields, found {len(fields)}"
        )
    id, category, tags, desc, content = fields
    return Snippet(
        id=id,
        category=category,
        tags=tags,
        description=_decode_text(desc, "description"),
        content=_decode_text(content, "content"),
    )


# -----------------------------------------------------------------------------
# Editable text form
# -----------------------------------------------------------------------------

def _labelled(label: str, text: str) -> list[str]:
    """First line after the padded label, the rest indented under it."""
    lines = text.split("\n")
    out = [label.ljust(EDIT_LABEL_WIDTH) + lines[0]]
    out.extend(EDIT_INDENT + line for line in lines[1:])
    return out


def to_editable(snippet: Snippet) -> str:
    """Render a snippet as a labelled block for editing in a text editor."""
    lines = [
        _LABEL_ID.ljust(EDIT_LABEL_WIDTH) + snippet.id,
        _LABEL_CATEGORY.ljust(EDIT_LABEL_WIDTH) + snippet.category,
        _LABEL_TAGS.ljust(EDIT_LABEL_WIDTH) + snippet.tags,
    ]
    lines.extend(_labelled(_LABEL_DESC, snippet.description))
    lines.extend(_labelled(_LABEL_CONTENT, snippet.content))
    return "\n".join(lines) + "\n"


def _after_label(line: str, label: str) -> str:
    """Drop the label and its padding, keeping any indentation beyond it."""
    rest = line[len(label):]
    pad = EDIT_LABEL_WIDTH - len(label)
    stripped = rest.lstrip(" ")
    if len(rest) - len(stripped) > pad:
        return rest[pad:]
    return stripped


def _continuation(line: str) -> str:
    if line.startswith(EDIT_INDENT):
        return line[EDIT_LABEL_WIDTH:]
    return line


def _trim_trailing_blank(lines: list[str]) -> str:
    while len(lines) > 1 and not lines[-1].strip():
        lines.pop()
    return "\n".join(lines)


def from_editable(text: str) -> Snippet:
    """
    Parse the labelled block produced by to_editable().

    Header values are stripped. Lines following Desc: or Content: that
    don't start a new label belong to that section; the fixed indent is
    removed and deeper indentation is kept. Only LF (or CRLF) ends a
    line, so other Unicode line separators stay inside the text.

    Raises:
        MalformedRecordError: the text has no Content: section
    """
    fields = {"id": "", "category": "", "tags": ""}
    desc_lines: list[str] = []
    content_lines: list[str] | None = None
    section: list[str] | None = None

    for line in text.split("\n"):
        if line.endswith("\r"):
            line = line[:-1]
        if line.startswith(_LABEL_ID):
            fields["id"] = line[len(_LABEL_ID):].strip()
            section = None
        elif line.startswith(_LABEL_CATEGORY):
            fields["category"] = line[len(_LABEL_CATEGORY):].strip()
            section = None
        elif line.startswith(_LABEL_TAGS):
            fields["tags"] = line[len(_LABEL_TAGS):].strip()
            section = None
        elif line.startswith(_LABEL_DESC):
            desc_lines = [_after_label(line, _LABEL_DESC)]
            section = desc_lines
        elif line.startswith(_LABEL_CONTENT):
            content_lines = [_after_label(line, _LABEL_CONTENT)]
            section = content_lines
        elif section is not None:
            section.append(_continuation(line))

    if content_lines is None:
        raise MalformedRecordError(f"edited text has no '{_LABEL_CONTENT}' section")

    return Snippet(
        id=fields["id"],
        category=fields["category"],
        tags=fields["tags"],
        description=_trim_trailing_blank(desc_lines) if desc_lines else "",
        content=_trim_trailing_blank(content_lines),
    )
