"""
Cluster read capability.

- ClusterReader: abstract read-only contract
- ManifestClusterReader: in-memory objects (manifest files, tests)
- KubernetesClusterReader: live cluster via the dynamic client, in
  binding_engine.cluster.kube
"""

from .reader import ClusterReader
from .memory import ManifestClusterReader, load_manifests

__all__ = ["ClusterReader", "ManifestClusterReader", "load_manifests"]
