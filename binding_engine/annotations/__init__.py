"""
Binding annotations: classification, related-resource fetching, handlers and
schema descriptor conversion.
"""

from .binding import (
    ANNOTATION_PREFIX,
    BindingKind,
    BindingSpec,
    BindingType,
    classify,
)
from .descriptors import descriptor_annotations, find_crd_description
from .handlers import HANDLERS, ResolvedValue, build_handler
from .related import fetch_related

__all__ = [
    "ANNOTATION_PREFIX",
    "BindingKind",
    "BindingSpec",
    "BindingType",
    "classify",
    "descriptor_annotations",
    "find_crd_description",
    "HANDLERS",
    "ResolvedValue",
    "build_handler",
    "fetch_related",
]
