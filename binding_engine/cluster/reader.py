"""
ClusterReader abstract interface.

The only contract the engine has with the cluster: namespaced and
cluster-scoped reads, plus group/version/resource <-> kind mapping.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from ..core.gvk import GroupVersionKind, GroupVersionResource


class ClusterReader(ABC):
    """
    Read-only view of the cluster.

    All implementations must:
    - raise FetchError(NOT_FOUND) when an object or resource type is missing
    - raise FetchError(TRANSPORT) for any other failure
    - return plain dicts that callers may mutate freely
    - never retry
    """

    @abstractmethod
    def get(self, gvr: GroupVersionResource, namespace: Optional[str], name: str) -> Dict:
        """
        Fetch a single object.

        Args:
            gvr: Resource type of the object
            namespace: Namespace, or None for cluster-scoped resources
            name: Object name

        Raises:
            FetchError: If the object can't be read
        """
        ...

    @abstractmethod
    def list(
        self,
        gvr: GroupVersionResource,
        namespace: Optional[str],
        label_selector: Optional[str] = None,
    ) -> List[Dict]:
        """
        List objects of a resource type. Items always carry apiVersion and kind.

        Raises:
            FetchError: If the listing fails
        """
        ...

    @abstractmethod
    def kind_for(self, gvr: GroupVersionResource) -> str:
        """Map a resource type to its Kind."""
        ...

    @abstractmethod
    def resource_for(self, gvk: GroupVersionKind) -> GroupVersionResource:
        """Map a Kind to its resource type."""
        ...
