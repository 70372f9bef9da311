"""
Exception types for the binding resolution engine.

Every error carries enough context to be reported by the caller; recoverable
failures are distinguished by their ``kind`` attribute, never by identity.
"""

from enum import Enum
from typing import Optional


class BindingError(Exception):
    """Base class for all binding resolution errors."""
    pass


class ClassificationErrorKind(str, Enum):
    INVALID_PREFIX = "InvalidPrefix"
    MALFORMED_VALUE = "MalformedValue"
    UNKNOWN_BINDING_TYPE = "UnknownBindingType"
    HANDLER_NOT_FOUND = "HandlerNotFound"


class ClassificationError(BindingError):
    """Raised when an annotation key/value pair is not a usable binding."""

    def __init__(self, kind: ClassificationErrorKind, key: str, value: str, detail: str = ""):
        self.kind = kind
        self.key = key
        self.value = value
        message = f"{kind.value}: {key}={value!r}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class FieldAccessErrorKind(str, Enum):
    NOT_FOUND = "NotFound"
    TYPE_MISMATCH = "TypeMismatch"


class FieldAccessError(BindingError):
    """Raised when a path cannot be resolved inside a nested tree."""

    def __init__(self, kind: FieldAccessErrorKind, path, detail: str = ""):
        self.kind = kind
        self.path = list(path)
        message = f"{kind.value}: {'.'.join(self.path) or '<root>'}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class DecodeError(BindingError):
    """Raised when a leaf value cannot be decoded."""
    pass


class FetchErrorKind(str, Enum):
    NOT_FOUND = "NotFound"
    TRANSPORT = "TransportError"


class FetchError(BindingError):
    """Raised by cluster readers; wraps not-found and transport failures."""

    def __init__(self, kind: FetchErrorKind, resource: str, name: Optional[str] = None, detail: str = ""):
        self.kind = kind
        self.resource = resource
        self.name = name
        target = f"{resource}/{name}" if name else resource
        message = f"{kind.value}: {target}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)

    @property
    def not_found(self) -> bool:
        return self.kind == FetchErrorKind.NOT_FOUND


class MergeTypeError(BindingError):
    """Raised when two trees have incompatible shapes at the same path."""

    def __init__(self, path, existing, incoming):
        self.path = list(path)
        message = (
            f"cannot merge {type(incoming).__name__} into {type(existing).__name__} "
            f"at {'.'.join(self.path) or '<root>'}"
        )
        super().__init__(message)


class TemplateError(BindingError):
    """Raised when a custom environment variable template fails."""

    def __init__(self, name: str, detail: str):
        self.name = name
        super().__init__(f"custom env var {name!r}: {detail}")


class RequestError(BindingError):
    """Raised when a binding request is malformed."""
    pass
