"""
Identifier generation.

An id is the base64 text of the SHA-1 digest of ``category + tags``. It
depends on classification only, never on content: two snippets with the
same category and tags get the same id, and the second one is rejected
as a duplicate when stored. Users are expected to pick more specific
tags in that case; the collision is reported, not papered over.
"""

import base64
import hashlib

from .errors import ValidationError
from .types import Snippet


def generate_id(snippet: Snippet) -> str:
    """
    Derive the id for a snippet that has not been stored yet.

    Raises:
        ValidationError: the snippet already has an id, or has neither
            category nor tags to derive one from
    """
    if snippet.id:
        raise ValidationError(f"id already assigned: {snippet.id}")
    if not snippet.category and not snippet.tags:
        raise ValidationError("cannot generate id: category and tags are both empty")

    digest = hashlib.sha1((snippet.category + snippet.tags).encode("utf-8")).digest()
    return base64.b64encode(digest).decode("ascii")
