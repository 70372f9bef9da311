"""
Binding annotation classifier.

Annotation keys look like ``<prefix>/<resourceReferencePath>[-<sourcePath>]``
and values like ``binding:<type>:<rest>``. Classification turns such a pair
into a BindingSpec or raises ClassificationError; it never touches the cluster.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

from ..core.errors import ClassificationError, ClassificationErrorKind
from ..core.nested import split_path

logger = logging.getLogger(__name__)

ANNOTATION_PREFIX = "servicebindingoperator.redhat.io"

BINDING_VALUE_RE = re.compile(r"^binding:(?P<type>.*?):(?P<rest>.*)$")


class BindingType(str, Enum):
    """Coarse binding type: where the resolved value ends up."""

    ENV = "env"
    VOLUME_MOUNT = "volumemount"


class BindingKind(str, Enum):
    """Fine-grained binding kind: which handler resolves the value."""

    ENV_ATTRIBUTE = "EnvAttribute"
    ENV_OBJECT_SECRET = "EnvObjectSecret"
    ENV_OBJECT_CONFIGMAP = "EnvObjectConfigMap"
    VOLUME_MOUNT = "VolumeMount"


SUPPORTED_BINDING_TYPES = frozenset(t.value for t in BindingType)

# (type, form) -> (kind, accepts trailing item segment)
BINDING_FORMS = {
    (BindingType.ENV, "attribute"): (BindingKind.ENV_ATTRIBUTE, False),
    (BindingType.ENV, "object:secret"): (BindingKind.ENV_OBJECT_SECRET, True),
    (BindingType.ENV, "object:configmap"): (BindingKind.ENV_OBJECT_CONFIGMAP, True),
    (BindingType.VOLUME_MOUNT, "secret"): (BindingKind.VOLUME_MOUNT, True),
}


@dataclass(frozen=True)
class BindingSpec:
    """
    Parsed binding annotation.

    Fields:
        key: Original annotation key
        value: Original annotation value
        type: Coarse binding type (env / volumemount)
        kind: Handler selector
        resource_reference_path: Field segments locating the referenced value
            on the owning object (never empty)
        source_path: Field segments inside the related object (may be empty)
    """
    key: str
    value: str
    type: BindingType
    kind: BindingKind
    resource_reference_path: Tuple[str, ...]
    source_path: Tuple[str, ...] = ()

    @property
    def reference_path(self) -> str:
        return ".".join(self.resource_reference_path)

    @property
    def source(self) -> str:
        return ".".join(self.source_path)

    def input_path_fields(self, input_root: Optional[str] = None) -> List[str]:
        """
        Fields used to extract the value from the related object.

        Empty when there is no source path and no input root: the whole
        related object is used.
        """
        fields = list(self.source_path)
        if input_root:
            fields = [input_root] + fields
        return fields


def split_key(key: str, prefix: str = ANNOTATION_PREFIX) -> Tuple[str, str]:
    """
    Split an annotation key into (reference path, source path).

    Raises:
        ClassificationError: INVALID_PREFIX if the key is not a binding key
    """
    head = prefix + "/"
    if not key.startswith(head):
        raise ClassificationError(ClassificationErrorKind.INVALID_PREFIX, key, "")
    reference, _, source = key[len(head):].partition("-")
    return reference, source


def discover_binding_type(key: str, value: str) -> Tuple[BindingType, str]:
    """
    Extract the coarse binding type and the remainder of a value.

    Raises:
        ClassificationError: MALFORMED_VALUE or UNKNOWN_BINDING_TYPE
    """
    match = BINDING_VALUE_RE.match(value)
    if not match:
        raise ClassificationError(ClassificationErrorKind.MALFORMED_VALUE, key, value)
    raw_type = match.group("type")
    if raw_type not in SUPPORTED_BINDING_TYPES:
        raise ClassificationError(
            ClassificationErrorKind.UNKNOWN_BINDING_TYPE, key, value, f"type {raw_type!r}"
        )
    return BindingType(raw_type), match.group("rest")


def discover_kind(key: str, value: str, binding_type: BindingType, rest: str) -> Tuple[BindingKind, str]:
    for (form_type, form), (kind, takes_item) in BINDING_FORMS.items():
        if form_type != binding_type:
            continue
        if rest == form:
            return kind, ""
        if takes_item and rest.startswith(form + ":"):
            return kind, rest[len(form) + 1:]
    raise ClassificationError(ClassificationErrorKind.HANDLER_NOT_FOUND, key, value)


def classify(key: str, value: str, prefix: str = ANNOTATION_PREFIX) -> BindingSpec:
    """
    Classify an annotation pair.

    Raises:
        ClassificationError: For keys outside the prefix, values outside the
            grammar, unsupported types, and values without a handler
    """
    reference, source = split_key(key, prefix)
    binding_type, rest = discover_binding_type(key, value)
    kind, item = discover_kind(key, value, binding_type, rest)

    if not reference:
        raise ClassificationError(
            ClassificationErrorKind.MALFORMED_VALUE, key, value, "empty resource reference path"
        )
    # the value's item segment names the source field unless the key already does
    if not source and item:
        source = item

    spec = BindingSpec(
        key=key,
        value=value,
        type=binding_type,
        kind=kind,
        resource_reference_path=tuple(split_path(reference)),
        source_path=tuple(split_path(source)),
    )
    logger.debug(
        f"classified {key}: kind={kind.value} reference={spec.reference_path} source={spec.source}"
    )
    return spec
