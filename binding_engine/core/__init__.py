"""
Core primitives shared by every stage of binding resolution:
- Errors: typed error taxonomy
- Nested: path-based get/set/compose over JSON-like trees
- Merge: object and env-var tree merging
- Canonical: deterministic JSON rendering
- GVK: group/version/kind and group/version/resource identities
"""

from .errors import (
    BindingError,
    ClassificationError,
    ClassificationErrorKind,
    DecodeError,
    FetchError,
    FetchErrorKind,
    FieldAccessError,
    FieldAccessErrorKind,
    MergeTypeError,
    RequestError,
    TemplateError,
)
from .canonical import canonicalize, compact_json
from .gvk import GroupVersionKind, GroupVersionResource
from .merge import merge_env_tree, merge_object
from .nested import compose_value, get_field, resolve, set_field, split_path

__all__ = [
    "BindingError",
    "ClassificationError",
    "ClassificationErrorKind",
    "DecodeError",
    "FetchError",
    "FetchErrorKind",
    "FieldAccessError",
    "FieldAccessErrorKind",
    "MergeTypeError",
    "RequestError",
    "TemplateError",
    "canonicalize",
    "compact_json",
    "GroupVersionKind",
    "GroupVersionResource",
    "merge_env_tree",
    "merge_object",
    "compose_value",
    "get_field",
    "resolve",
    "set_field",
    "split_path",
]
