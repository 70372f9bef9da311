"""
Path-based access to nested value trees.

Trees are plain JSON-like structures: dicts keyed by strings, lists, and
scalars (str, int, float, bool, None). Paths are ordered lists of field
names; an empty path addresses the whole tree.
"""

import base64
import binascii
import copy
from typing import Any, Callable, Dict, List, Sequence

from .errors import DecodeError, FieldAccessError, FieldAccessErrorKind

Decoder = Callable[[Any], Any]

SCALAR_TYPES = (str, int, float, bool, type(None))


def split_path(text: str) -> List[str]:
    """Split a dotted path; the empty string is the root path."""
    if not text:
        return []
    return text.split(".")


def join_path(*parts: str) -> str:
    """Join dotted path fragments, skipping empty ones."""
    return ".".join(p for p in parts if p)


def is_scalar(value: Any) -> bool:
    return isinstance(value, SCALAR_TYPES)


def get_field(tree: Dict[str, Any], fields: Sequence[str]) -> Any:
    """
    Return a deep copy of the value found at ``fields``.

    Raises:
        FieldAccessError: NOT_FOUND if a field is missing or its parent is
            not a mapping
    """
    cur: Any = tree
    for idx, field in enumerate(fields):
        if not isinstance(cur, dict):
            raise FieldAccessError(
                FieldAccessErrorKind.NOT_FOUND,
                fields[: idx + 1],
                f"parent is {type(cur).__name__}, not a mapping",
            )
        if field not in cur:
            raise FieldAccessError(FieldAccessErrorKind.NOT_FOUND, fields[: idx + 1])
        cur = cur[field]
    return copy.deepcopy(cur)


def get_string(tree: Dict[str, Any], fields: Sequence[str]) -> str:
    """Like get_field, but the value must be a string."""
    value = get_field(tree, fields)
    if not isinstance(value, str):
        raise FieldAccessError(
            FieldAccessErrorKind.TYPE_MISMATCH,
            fields,
            f"expected string, found {type(value).__name__}",
        )
    return value


def resolve(tree: Dict[str, Any], fields: Sequence[str], decode: Decoder) -> Any:
    """
    Extract the value at ``fields`` and decode its leaves.

    A mapping is decoded element-wise into a new mapping; anything else is
    handed to ``decode`` as a single value.
    """
    value = get_field(tree, fields)
    if isinstance(value, dict):
        return {k: _decode(decode, v, list(fields) + [k]) for k, v in value.items()}
    return _decode(decode, value, fields)


def _decode(decode: Decoder, value: Any, fields: Sequence[str]) -> Any:
    try:
        return decode(value)
    except FieldAccessError as e:
        # decoders don't know where the value came from
        raise FieldAccessError(e.kind, fields, str(e)) from e


def identity(value: Any) -> Any:
    return value


def string_value(value: Any) -> str:
    if not isinstance(value, str):
        raise FieldAccessError(
            FieldAccessErrorKind.TYPE_MISMATCH, [], f"expected string, found {type(value).__name__}"
        )
    return value


def decode_base64(value: Any) -> str:
    """
    Decode a base64 encoded string value (as stored in Secret data).

    Raises:
        FieldAccessError: TYPE_MISMATCH if value is not a string
        DecodeError: If the value is not valid base64 or not UTF-8 text
    """
    encoded = string_value(value)
    try:
        return base64.b64decode(encoded, validate=True).decode("utf-8")
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f"invalid base64 value: {e}") from e


def compose_value(value: Any, fields: Sequence[str]) -> Any:
    """
    Build the minimal tree holding ``value`` at ``fields``.

    compose_value("x", ["a", "b"]) == {"a": {"b": "x"}}
    """
    result = copy.deepcopy(value)
    for field in reversed(fields):
        result = {field: result}
    return result


def set_field(tree: Dict[str, Any], value: Any, fields: Sequence[str]) -> None:
    """
    Set ``value`` at ``fields`` in place, creating intermediate mappings.

    Raises:
        FieldAccessError: TYPE_MISMATCH if an intermediate value is not a mapping
    """
    if not fields:
        raise FieldAccessError(FieldAccessErrorKind.NOT_FOUND, fields, "empty path")
    cur = tree
    for idx, field in enumerate(fields[:-1]):
        nxt = cur.get(field)
        if nxt is None:
            nxt = {}
            cur[field] = nxt
        elif not isinstance(nxt, dict):
            raise FieldAccessError(
                FieldAccessErrorKind.TYPE_MISMATCH,
                fields[: idx + 1],
                f"cannot descend into {type(nxt).__name__}",
            )
        cur = nxt
    cur[fields[-1]] = copy.deepcopy(value)
