"""
Group/version/kind and group/version/resource identities.
"""

from dataclasses import dataclass


def _api_version(group: str, version: str) -> str:
    return f"{group}/{version}" if group else version


def split_api_version(api_version: str):
    """Split ``group/version`` (or a bare core ``version``) into a pair."""
    if "/" in api_version:
        group, version = api_version.split("/", 1)
        return group, version
    return "", api_version


@dataclass(frozen=True)
class GroupVersionKind:
    group: str
    version: str
    kind: str

    @property
    def api_version(self) -> str:
        return _api_version(self.group, self.version)

    @classmethod
    def from_object(cls, obj: dict) -> "GroupVersionKind":
        group, version = split_api_version(obj.get("apiVersion", ""))
        return cls(group=group, version=version, kind=obj.get("kind", ""))

    def __str__(self) -> str:
        return f"{self.api_version}, Kind={self.kind}"


@dataclass(frozen=True)
class GroupVersionResource:
    group: str
    version: str
    resource: str

    @property
    def api_version(self) -> str:
        return _api_version(self.group, self.version)

    @classmethod
    def parse(cls, text: str) -> "GroupVersionResource":
        """
        Parse ``group/version/resource`` or ``version/resource`` (core group).

        Raises:
            ValueError: If the text has fewer than two segments
        """
        parts = [p for p in text.strip().split("/") if p]
        if len(parts) == 2:
            return cls(group="", version=parts[0], resource=parts[1])
        if len(parts) == 3:
            return cls(group=parts[0], version=parts[1], resource=parts[2])
        raise ValueError(f"invalid group/version/resource: {text!r}")

    def __str__(self) -> str:
        return f"{self.api_version}/{self.resource}"


SECRETS = GroupVersionResource("", "v1", "secrets")
CONFIG_MAPS = GroupVersionResource("", "v1", "configmaps")
SERVICES = GroupVersionResource("", "v1", "services")
ROUTES = GroupVersionResource("route.openshift.io", "v1", "routes")
CUSTOM_RESOURCE_DEFINITIONS = GroupVersionResource(
    "apiextensions.k8s.io", "v1", "customresourcedefinitions"
)
CLUSTER_SERVICE_VERSIONS = GroupVersionResource(
    "operators.coreos.com", "v1alpha1", "clusterserviceversions"
)
