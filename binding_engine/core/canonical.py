"""
Canonical serialization of nested value trees.

Used for the ``marshal`` template helper and for deterministic CLI output:
the same tree must always render to the same text.
"""

import json
from typing import Any


def canonicalize(obj: Any) -> Any:
    """
    Convert an arbitrary nested dict/list tree to canonical form.

    Rules:
    - dict keys sorted alphabetically
    - tuples converted to lists
    - bytes decoded as UTF-8
    """
    if isinstance(obj, dict):
        return {k: canonicalize(obj[k]) for k in sorted(obj.keys())}
    if isinstance(obj, (list, tuple)):
        return [canonicalize(x) for x in obj]
    if isinstance(obj, bytes):
        return obj.decode("utf-8", errors="replace")
    return obj


def compact_json(obj: Any) -> str:
    """
    Compact, key-sorted JSON text for a sub-tree.

    No whitespace between tokens; unicode is kept as-is.
    """
    canon = canonicalize(obj)
    return json.dumps(canon, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
