"""
Binding handlers.

Each BindingKind maps to exactly one handler constructor in HANDLERS. A
handler resolves one annotation into a ResolvedValue:

- data: value composed at the output path (feeds environment variables)
- raw_data: value composed at the source location (feeds the object snapshot)
- path: dotted output path (used as volume key for volume mounts)
"""

import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from ..cluster.reader import ClusterReader
from ..core.errors import ClassificationError, ClassificationErrorKind
from ..core.gvk import CONFIG_MAPS, SECRETS, GroupVersionResource
from ..core.nested import (
    Decoder,
    compose_value,
    decode_base64,
    identity,
    join_path,
    resolve,
    split_path,
    string_value,
)
from .binding import BindingKind, BindingSpec, BindingType
from .related import fetch_related, related_output_prefix

SPEC_OR_STATUS_RE = re.compile(r"^(spec|status)\.")

DATA_ROOT = "data"


@dataclass(frozen=True)
class ResolvedValue:
    data: Dict[str, Any]
    type: BindingType
    path: str
    raw_data: Dict[str, Any] = field(default_factory=dict)


class AttributeHandler:
    """Reads a value straight off the owning object; no cluster access."""

    def __init__(self, spec: BindingSpec, owner: Dict):
        if not spec.resource_reference_path:
            raise ValueError("binding has an empty resource reference path")
        self.spec = spec
        self.owner = owner

    def output_path(self) -> str:
        if self.spec.source:
            return self.spec.source
        # spec.dbName -> dbName
        stripped = SPEC_OR_STATUS_RE.sub("", self.spec.reference_path)
        return stripped or self.spec.reference_path

    def handle(self) -> ResolvedValue:
        val = resolve(self.owner, self.spec.resource_reference_path, identity)
        output_path = self.output_path()
        return ResolvedValue(
            data=compose_value(val, split_path(output_path)),
            type=self.spec.type,
            path=output_path,
            raw_data=compose_value(val, self.spec.resource_reference_path),
        )


class ResourceHandler:
    """
    Reads a value from a related object named by the owning object.

    The related object is fetched when the handler is built; ``handle`` only
    extracts, decodes and composes.
    """

    def __init__(
        self,
        reader: ClusterReader,
        spec: BindingSpec,
        owner: Dict,
        gvr: GroupVersionResource,
        decode: Decoder,
        input_root: Optional[str] = DATA_ROOT,
    ):
        if reader is None:
            raise ValueError("a cluster reader is required")
        if not spec.resource_reference_path:
            raise ValueError("binding has an empty resource reference path")
        self.reader = reader
        self.spec = spec
        self.owner = owner
        self.gvr = gvr
        self.decode = decode
        self.input_root = input_root
        self.related = fetch_related(reader, owner, spec, gvr)

    def handle(self) -> ResolvedValue:
        fields = self.spec.input_path_fields(self.input_root)
        val = resolve(self.related, fields, self.decode)

        output_path = join_path(related_output_prefix(self.reader, self.gvr), self.spec.source)
        raw_data_path = join_path(self.spec.reference_path, self.spec.source)
        return ResolvedValue(
            data=compose_value(val, split_path(output_path)),
            type=self.spec.type,
            path=output_path,
            raw_data=compose_value(val, split_path(raw_data_path)),
        )


def new_attribute_handler(reader: ClusterReader, spec: BindingSpec, owner: Dict) -> AttributeHandler:
    return AttributeHandler(spec, owner)


def new_secret_handler(reader: ClusterReader, spec: BindingSpec, owner: Dict) -> ResourceHandler:
    return ResourceHandler(reader, spec, owner, SECRETS, decode_base64)


def new_config_map_handler(reader: ClusterReader, spec: BindingSpec, owner: Dict) -> ResourceHandler:
    return ResourceHandler(reader, spec, owner, CONFIG_MAPS, string_value)


HandlerFactory = Callable[[ClusterReader, BindingSpec, Dict], Any]

HANDLERS: Dict[BindingKind, HandlerFactory] = {
    BindingKind.ENV_ATTRIBUTE: new_attribute_handler,
    BindingKind.ENV_OBJECT_SECRET: new_secret_handler,
    BindingKind.ENV_OBJECT_CONFIGMAP: new_config_map_handler,
    BindingKind.VOLUME_MOUNT: new_secret_handler,
}


def build_handler(reader: ClusterReader, spec: BindingSpec, owner: Dict):
    """
    Build the handler for a classified binding.

    Raises:
        ClassificationError: HANDLER_NOT_FOUND if the kind has no handler
        FieldAccessError, FetchError: From eager related-object resolution
    """
    factory = HANDLERS.get(spec.kind)
    if factory is None:
        raise ClassificationError(ClassificationErrorKind.HANDLER_NOT_FOUND, spec.key, spec.value)
    return factory(reader, spec, owner)
