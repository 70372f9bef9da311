"""
Flattening of nested env var trees into environment variable names.

{"secret": {"user": "admin"}} with prefix ("P",) -> {"P_SECRET_USER": "admin"}
"""

from typing import Any, Dict, List, Sequence

from .core.errors import FieldAccessError, FieldAccessErrorKind


def env_var_name(path: Sequence[str]) -> str:
    return "_".join(path).upper()


def scalar_text(value: Any) -> str:
    """
    Render a leaf value as environment variable text.

    Raises:
        FieldAccessError: TYPE_MISMATCH for values that aren't JSON scalars
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    raise FieldAccessError(
        FieldAccessErrorKind.TYPE_MISMATCH, [], f"unsupported env var value {type(value).__name__}"
    )


def build(tree: Any, *prefix: str) -> Dict[str, str]:
    """
    Flatten ``tree`` into env var name -> text.

    Mapping keys and sequence indexes become name segments; empty prefix
    segments are dropped so no leading separator is produced.
    """
    env: Dict[str, str] = {}
    _build(tree, [p for p in prefix if p], env)
    return env


def _build(value: Any, path: List[str], env: Dict[str, str]) -> None:
    if isinstance(value, dict):
        for key, item in value.items():
            _build(item, path + [str(key)], env)
    elif isinstance(value, (list, tuple)):
        for idx, item in enumerate(value):
            _build(item, path + [str(idx)], env)
    else:
        try:
            env[env_var_name(path)] = scalar_text(value)
        except FieldAccessError as e:
            raise FieldAccessError(e.kind, path, str(e)) from e
