"""
Service context builder.

For every backing service selected by a binding request:

1. fetch the service object
2. collect binding annotations (descriptor < CRD < instance precedence)
3. classify and run each annotation's handler, merging results into the
   object snapshot, the env var tree and the volume key list
4. optionally repeat 2-3 for objects the service directly owns

Processing is strictly sequential; a failed pass leaves nothing behind.
"""

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .annotations.binding import BindingType, classify
from .annotations.descriptors import descriptor_annotations, find_crd_description
from .annotations.handlers import build_handler
from .cluster.reader import ClusterReader
from .config import BindingSettings
from .core.errors import ClassificationError, FetchError
from .core.gvk import CLUSTER_SERVICE_VERSIONS, CUSTOM_RESOURCE_DEFINITIONS, GroupVersionKind
from .core.merge import merge_env_tree, merge_object
from .logging_config import get_logger
from .metrics import track_annotation
from .request import BackingServiceSelector, BindingRequest


@dataclass
class ServiceContext:
    """
    Per-service result of annotation processing.

    Fields:
        service: Object snapshot with every handler's raw data merged in
        env_vars: Nested env var tree contributed by the service
        volume_keys: Output paths to project as files, in discovery order
        env_var_prefix: Explicit prefix; None means "use the Kind"
    """
    service: Dict[str, Any]
    env_vars: Dict[str, Any] = field(default_factory=dict)
    volume_keys: List[str] = field(default_factory=list)
    env_var_prefix: Optional[str] = None

    @property
    def gvk(self) -> GroupVersionKind:
        return GroupVersionKind.from_object(self.service)

    @property
    def name(self) -> str:
        return (self.service.get("metadata") or {}).get("name", "")


def _object_ref(obj: Dict) -> str:
    meta = obj.get("metadata") or {}
    return f"{obj.get('kind')} {meta.get('namespace')}/{meta.get('name')}"


class ServiceContextBuilder:
    """Builds ServiceContexts for the selectors of one binding request."""

    def __init__(self, reader: ClusterReader, settings: Optional[BindingSettings] = None, logger=None):
        self.reader = reader
        self.settings = settings or BindingSettings()
        self.logger = logger or get_logger(__name__)

    def build_all(self, request: BindingRequest) -> List[ServiceContext]:
        """
        Build contexts for every selector, in selector order, each followed
        by the contexts of the objects it owns (when enabled).

        Raises:
            BindingError: Any non-classification failure aborts the pass
        """
        include_owned = request.detect_binding_resources
        if include_owned is None:
            include_owned = self.settings.detect_owned_resources

        contexts: List[ServiceContext] = []
        for selector in request.selectors:
            namespace = selector.namespace or request.namespace or self.settings.default_namespace
            for service in self.find_services(namespace, selector):
                ctx = self.build_for_object(service, selector.gvk, selector.env_var_prefix)
                contexts.append(ctx)
                if include_owned:
                    # owned resources fall back to the selector's kind as prefix
                    prefix = ctx.env_var_prefix if ctx.env_var_prefix is not None else selector.kind
                    contexts.extend(self.build_owned(service, prefix))
        return contexts

    def find_services(self, namespace: str, selector: BackingServiceSelector) -> List[Dict]:
        """
        Fetch the backing service(s) named by a selector.

        A resourceRef yields exactly one object; a label selector yields its
        matches sorted by name.
        """
        gvr = self.reader.resource_for(selector.gvk)
        if selector.resource_ref:
            return [self.reader.get(gvr, namespace, selector.resource_ref)]
        items = self.reader.list(gvr, namespace, selector.label_selector)
        if not items:
            self.logger.warning(f"No {selector.kind} in {namespace} matches {selector.label_selector}")
        return sorted(items, key=lambda o: (o.get("metadata") or {}).get("name", ""))

    def build(
        self,
        namespace: str,
        gvk: GroupVersionKind,
        name: str,
        env_var_prefix: Optional[str] = None,
    ) -> ServiceContext:
        """Fetch one service by name and build its context."""
        gvr = self.reader.resource_for(gvk)
        service = self.reader.get(gvr, namespace, name)
        return self.build_for_object(service, gvk, env_var_prefix)

    def build_for_object(
        self,
        service: Dict,
        gvk: Optional[GroupVersionKind] = None,
        env_var_prefix: Optional[str] = None,
    ) -> ServiceContext:
        gvk = gvk or GroupVersionKind.from_object(service)
        annotations = self.collect_annotations(service, gvk)

        snapshot = copy.deepcopy(service)
        env_vars: Dict[str, Any] = {}
        volume_keys: List[str] = []

        for key in sorted(annotations):
            value = annotations[key]
            try:
                spec = classify(key, value, self.settings.annotation_prefix)
                handler = build_handler(self.reader, spec, service)
            except ClassificationError as e:
                self.logger.info(f"Skipping annotation on {_object_ref(service)}: {e}")
                track_annotation("skipped")
                continue

            result = handler.handle()
            snapshot = merge_object(snapshot, result.raw_data)
            if result.type == BindingType.VOLUME_MOUNT:
                if result.path not in volume_keys:
                    volume_keys.append(result.path)
            else:
                env_vars = merge_env_tree(env_vars, result.data)
            self.logger.debug(f"Resolved {key} on {_object_ref(service)} -> {result.path}")
            track_annotation("resolved")

        return ServiceContext(
            service=snapshot,
            env_vars=env_vars,
            volume_keys=volume_keys,
            env_var_prefix=env_var_prefix,
        )

    def collect_annotations(self, service: Dict, gvk: GroupVersionKind) -> Dict[str, str]:
        """
        Effective annotations, lowest precedence first:
        CRD description descriptors, CRD annotations, instance annotations.
        """
        annotations: Dict[str, str] = {}
        crd = self.find_crd(gvk)
        if crd is not None:
            namespace = (service.get("metadata") or {}).get("namespace")
            crd_description = self.find_crd_description(namespace, gvk, crd)
            annotations.update(descriptor_annotations(crd_description, self.settings.annotation_prefix))
            annotations.update((crd.get("metadata") or {}).get("annotations") or {})
        annotations.update((service.get("metadata") or {}).get("annotations") or {})
        return annotations

    def find_crd(self, gvk: GroupVersionKind) -> Optional[Dict]:
        """The CRD backing ``gvk``, or None when there is none (core types included)."""
        if not gvk.group:
            return None
        try:
            gvr = self.reader.resource_for(gvk)
            return self.reader.get(CUSTOM_RESOURCE_DEFINITIONS, None, f"{gvr.resource}.{gvk.group}")
        except FetchError as e:
            if e.not_found:
                self.logger.debug(f"No CRD for {gvk}")
                return None
            raise

    def find_crd_description(self, namespace: Optional[str], gvk: GroupVersionKind, crd: Dict) -> Optional[Dict]:
        crd_name = (crd.get("metadata") or {}).get("name", "")
        try:
            csvs = self.reader.list(CLUSTER_SERVICE_VERSIONS, namespace)
        except FetchError as e:
            if e.not_found:
                return None
            raise
        return find_crd_description(csvs, crd_name, gvk.version, gvk.kind)

    def build_owned(self, service: Dict, env_var_prefix: Optional[str]) -> List[ServiceContext]:
        """
        Contexts for objects directly owned by ``service`` (one level only).
        """
        meta = service.get("metadata") or {}
        namespace, name, uid = meta.get("namespace"), meta.get("name"), meta.get("uid")

        contexts = []
        for gvr in self.settings.owned_resource_types:
            try:
                items = self.reader.list(gvr, namespace)
            except FetchError as e:
                if e.not_found:
                    self.logger.debug(f"Owned resource type {gvr} unavailable, skipping")
                    continue
                raise
            for item in items:
                refs = (item.get("metadata") or {}).get("ownerReferences") or []
                if any(r.get("name") == name and r.get("uid") == uid for r in refs):
                    self.logger.debug(f"Including owned {_object_ref(item)}")
                    contexts.append(self.build_for_object(item, env_var_prefix=env_var_prefix))
        return contexts
