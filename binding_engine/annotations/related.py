"""
Related-resource fetcher.

A binding annotation points at a field of the owning object holding the name
of another object (a Secret, a ConfigMap, ...). This module turns that
reference into the fetched object.
"""

import logging
from typing import Dict, Optional

from ..cluster.reader import ClusterReader
from ..core.gvk import GroupVersionResource
from ..core.nested import get_string
from .binding import BindingSpec

logger = logging.getLogger(__name__)


def discover_related_name(owner: Dict, spec: BindingSpec) -> str:
    """
    Read the related object's name from the owning object.

    Raises:
        FieldAccessError: If the reference path is missing or not a string
    """
    return get_string(owner, spec.resource_reference_path)


def fetch_related(
    reader: ClusterReader,
    owner: Dict,
    spec: BindingSpec,
    gvr: GroupVersionResource,
    namespace: Optional[str] = None,
) -> Dict:
    """
    Fetch the object referenced by ``spec`` with a single namespaced get.

    Args:
        reader: Cluster read capability
        owner: Object carrying the binding annotation
        spec: Classified binding
        gvr: Resource type of the related object
        namespace: Defaults to the owner's namespace

    Raises:
        FieldAccessError: If the name can't be read from the owner
        FetchError: Propagated unchanged from the reader
    """
    name = discover_related_name(owner, spec)
    ns = namespace or (owner.get("metadata") or {}).get("namespace")
    logger.debug(f"fetching related {gvr} {ns}/{name} for {spec.key}")
    return reader.get(gvr, ns, name)


def related_output_prefix(reader: ClusterReader, gvr: GroupVersionResource) -> str:
    """Lower-cased Kind of a related resource type, used as output path root."""
    return reader.kind_for(gvr).lower()
