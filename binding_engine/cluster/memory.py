"""
In-memory ClusterReader over a fixed set of objects.

Used for offline resolution of manifest files and as the test double for
every stage that reads from the cluster.
"""

import copy
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

import yaml

from ..core.errors import FetchError, FetchErrorKind
from ..core.gvk import GroupVersionKind, GroupVersionResource, split_api_version
from .reader import ClusterReader

# plural -> kind for the types the engine reads itself
BUILTIN_KINDS = {
    ("", "secrets"): "Secret",
    ("", "configmaps"): "ConfigMap",
    ("", "services"): "Service",
    ("", "pods"): "Pod",
    ("apps", "deployments"): "Deployment",
    ("route.openshift.io", "routes"): "Route",
    ("apiextensions.k8s.io", "customresourcedefinitions"): "CustomResourceDefinition",
    ("operators.coreos.com", "clusterserviceversions"): "ClusterServiceVersion",
}


def load_manifests(paths: Iterable[Union[str, Path]]) -> List[Dict]:
    """
    Read every YAML document in ``paths``; ``kind: List`` documents are flattened.
    """
    objects: List[Dict] = []
    for path in paths:
        with open(path, "r") as f:
            for doc in yaml.safe_load_all(f):
                if not doc:
                    continue
                if doc.get("kind") == "List":
                    objects.extend(i for i in doc.get("items") or [] if i)
                else:
                    objects.append(doc)
    return objects


def parse_label_selector(selector: Optional[str]) -> Dict[str, str]:
    """
    Parse an equality-based label selector (``a=b,c==d``).

    Raises:
        ValueError: If a term is not an equality
    """
    terms: Dict[str, str] = {}
    if not selector:
        return terms
    for term in selector.split(","):
        term = term.strip()
        if not term:
            continue
        if "!=" in term or "=" not in term:
            raise ValueError(f"unsupported label selector term: {term!r}")
        key, _, value = term.replace("==", "=").partition("=")
        terms[key.strip()] = value.strip()
    return terms


class ManifestClusterReader(ClusterReader):
    """
    Serves reads from a list of object dicts.

    Kind <-> plural mapping comes from the built-in table, from any
    CustomResourceDefinition among the objects, and finally from naive
    pluralisation (``Kind`` -> ``kinds``).
    """

    def __init__(self, objects: Optional[Iterable[Dict]] = None):
        self._objects: List[Dict] = []
        self._kinds: Dict[tuple, str] = dict(BUILTIN_KINDS)
        for obj in objects or []:
            self.add(obj)

    @classmethod
    def from_files(cls, paths: Iterable[Union[str, Path]]) -> "ManifestClusterReader":
        return cls(load_manifests(paths))

    def add(self, obj: Dict) -> None:
        self._objects.append(copy.deepcopy(obj))
        if obj.get("kind") == "CustomResourceDefinition":
            spec = obj.get("spec") or {}
            names = spec.get("names") or {}
            if spec.get("group") and names.get("plural") and names.get("kind"):
                self._kinds[(spec["group"], names["plural"])] = names["kind"]

    def kind_for(self, gvr: GroupVersionResource) -> str:
        kind = self._kinds.get((gvr.group, gvr.resource))
        if kind:
            return kind
        for obj in self._objects:
            gvk = GroupVersionKind.from_object(obj)
            if gvk.group == gvr.group and self._plural(gvk) == gvr.resource:
                return gvk.kind
        raise FetchError(FetchErrorKind.NOT_FOUND, str(gvr), detail="no kind mapping")

    def resource_for(self, gvk: GroupVersionKind) -> GroupVersionResource:
        return GroupVersionResource(gvk.group, gvk.version, self._plural(gvk))

    def _plural(self, gvk: GroupVersionKind) -> str:
        for (group, plural), kind in self._kinds.items():
            if group == gvk.group and kind == gvk.kind:
                return plural
        return gvk.kind.lower() + "s"

    def _select(self, gvr: GroupVersionResource, namespace: Optional[str]):
        for obj in self._objects:
            group, version = split_api_version(obj.get("apiVersion", ""))
            if group != gvr.group or version != gvr.version:
                continue
            if self._plural(GroupVersionKind(group, version, obj.get("kind", ""))) != gvr.resource:
                continue
            meta = obj.get("metadata") or {}
            if namespace is not None and meta.get("namespace") != namespace:
                continue
            yield obj

    def get(self, gvr: GroupVersionResource, namespace: Optional[str], name: str) -> Dict:
        for obj in self._select(gvr, namespace):
            if (obj.get("metadata") or {}).get("name") == name:
                return copy.deepcopy(obj)
        raise FetchError(FetchErrorKind.NOT_FOUND, str(gvr), name)

    def list(
        self,
        gvr: GroupVersionResource,
        namespace: Optional[str],
        label_selector: Optional[str] = None,
    ) -> List[Dict]:
        try:
            wanted = parse_label_selector(label_selector)
        except ValueError as e:
            raise FetchError(FetchErrorKind.TRANSPORT, str(gvr), detail=str(e)) from e
        items = []
        for obj in self._select(gvr, namespace):
            labels = (obj.get("metadata") or {}).get("labels") or {}
            if all(labels.get(k) == v for k, v in wanted.items()):
                items.append(copy.deepcopy(obj))
        return items
