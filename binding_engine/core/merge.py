"""
Merging of handler results into running accumulators.

Both operations are pure: inputs are never mutated, a new tree is returned.
"""

import copy
from typing import Any, Dict, List

from .errors import MergeTypeError


def merge_object(existing: Dict[str, Any], incoming: Dict[str, Any]) -> Dict[str, Any]:
    """
    Merge handler raw data into an object snapshot.

    Rules:
    - mapping onto mapping recurses
    - incoming scalars and sequences replace what was there (no concatenation)
    - an incoming mapping replaces an existing scalar or sequence
    - an incoming non-mapping onto an existing mapping is rejected
    """
    _require_mappings(existing, incoming)
    return _merge_object(existing, incoming, [])


def _merge_object(existing: Dict[str, Any], incoming: Dict[str, Any], path: List[str]) -> Dict[str, Any]:
    merged = copy.deepcopy(existing)
    for key, value in incoming.items():
        cur = merged.get(key)
        if isinstance(cur, dict) and isinstance(value, dict):
            merged[key] = _merge_object(cur, value, path + [key])
        elif isinstance(cur, dict):
            raise MergeTypeError(path + [key], cur, value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def merge_env_tree(existing: Dict[str, Any], incoming: Dict[str, Any]) -> Dict[str, Any]:
    """
    Merge handler data into an environment variable tree.

    Rules:
    - mapping onto mapping recurses
    - sequence onto sequence appends (existing first, then incoming)
    - scalar onto scalar overrides
    - anything else is a shape mismatch
    """
    _require_mappings(existing, incoming)
    return _merge_env(existing, incoming, [])


def _merge_env(existing: Dict[str, Any], incoming: Dict[str, Any], path: List[str]) -> Dict[str, Any]:
    merged = copy.deepcopy(existing)
    for key, value in incoming.items():
        if key not in merged:
            merged[key] = copy.deepcopy(value)
            continue
        cur = merged[key]
        if isinstance(cur, dict) and isinstance(value, dict):
            merged[key] = _merge_env(cur, value, path + [key])
        elif isinstance(cur, list) and isinstance(value, list):
            merged[key] = cur + copy.deepcopy(value)
        elif not isinstance(cur, (dict, list)) and not isinstance(value, (dict, list)):
            merged[key] = value
        else:
            raise MergeTypeError(path + [key], cur, value)
    return merged


def _require_mappings(existing: Any, incoming: Any) -> None:
    if not isinstance(existing, dict) or not isinstance(incoming, dict):
        raise MergeTypeError([], existing, incoming)
