"""Content payload helpers - canonical serialization of post content.

The version store hashes raw bytes, so equal logical content must always
serialize to equal bytes: keys sorted, compact separators, UTF-8, and
unset optional fields omitted rather than written as null.
"""

import json

import pydantic

from ..exceptions import CorruptContentError, ValidationError
from ..schemas.post import PostContent


def validate_content(fields: dict) -> PostContent:
    """
    Validate raw content fields before anything reaches the version store.

    The ``format`` field selects the variant ("md" or "adoc"); an unknown
    format, a blank title or a missing body is rejected.

    Raises:
        ValidationError: with the first offending field name.
    """
    try:
        return PostContent(**fields)
    except pydantic.ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ())) or None
        raise ValidationError(f"Invalid content: {first.get('msg', 'invalid value')}", field=field) from e


def serialize_content(content: PostContent) -> bytes:
    """Canonical bytes for *content*; the input to the content hash."""
    data = content.model_dump(exclude_none=True)
    return json.dumps(data, sort_keys=True, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def deserialize_content(payload: bytes, namespace_path: str, content_hash: str) -> PostContent:
    """Parse stored bytes back into ``PostContent``.

    A payload that passed hash verification but no longer parses is still
    corrupt from the caller's point of view.
    """
    try:
        return PostContent(**json.loads(payload.decode("utf-8")))
    except (UnicodeDecodeError, json.JSONDecodeError, TypeError, pydantic.ValidationError) as e:
        raise CorruptContentError(namespace_path, content_hash, reason=f"undecodable payload ({type(e).__name__})") from e
