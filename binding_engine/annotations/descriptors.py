"""
Schema descriptor (OLM CRD description) to binding annotation conversion.

An operator's ClusterServiceVersion may describe the fields of the CRDs it
owns. Descriptors carrying ``binding:...`` x-descriptors act as default
binding annotations for every instance of that CRD.
"""

from typing import Dict, Iterable, List, Optional

from ..core.errors import ClassificationError
from .binding import ANNOTATION_PREFIX, discover_binding_type, discover_kind


def find_crd_description(
    csvs: Iterable[Dict], crd_name: str, version: str, kind: str
) -> Optional[Dict]:
    """
    Find the owned CRD description matching a CRD name and version.

    The first matching description across ``csvs`` wins.
    """
    for csv in csvs:
        crds = ((csv.get("spec") or {}).get("customresourcedefinitions") or {}).get("owned") or []
        for desc in crds:
            if desc.get("name") != crd_name or desc.get("version") != version:
                continue
            if desc.get("kind") and desc.get("kind") != kind:
                continue
            return desc
    return None


def _descriptor_annotation(root: str, path: str, x_descriptor: str, prefix: str):
    key = f"{prefix}/{root}.{path}"
    try:
        binding_type, rest = discover_binding_type(key, x_descriptor)
        _, item = discover_kind(key, x_descriptor, binding_type, rest)
    except ClassificationError:
        # kept verbatim; classification reports it later
        return key, x_descriptor
    if item:
        value = x_descriptor[: -(len(item) + 1)]
        return f"{key}-{item}", value
    return key, x_descriptor


def descriptor_annotations(
    crd_description: Optional[Dict], prefix: str = ANNOTATION_PREFIX
) -> Dict[str, str]:
    """
    Synthesize binding annotations from a CRD description.

    ``status.dbCredentials`` with x-descriptor ``binding:env:object:secret:user``
    becomes ``<prefix>/status.dbCredentials-user: binding:env:object:secret``.
    """
    annotations: Dict[str, str] = {}
    if not crd_description:
        return annotations

    groups = (
        ("spec", crd_description.get("specDescriptors") or []),
        ("status", crd_description.get("statusDescriptors") or []),
    )
    for root, descriptors in groups:
        for descriptor in descriptors:
            path = descriptor.get("path")
            if not path:
                continue
            x_descriptors: List[str] = descriptor.get("x-descriptors") or []
            for x_descriptor in x_descriptors:
                if not x_descriptor.startswith("binding:"):
                    continue
                key, value = _descriptor_annotation(root, path, x_descriptor, prefix)
                annotations[key] = value
    return annotations
