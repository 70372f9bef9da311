"""
Engine settings.

Environment Variables:
    BINDING_ANNOTATION_PREFIX: Annotation key prefix - default: servicebindingoperator.redhat.io
    BINDING_DETECT_OWNED_RESOURCES: Include owned resources (0/1) - default: 0
    BINDING_OWNED_RESOURCE_TYPES: Comma separated group/version/resource list
        scanned for owned resources - default: v1/secrets,v1/configmaps,v1/services,route.openshift.io/v1/routes
    BINDING_DEFAULT_NAMESPACE: Namespace used when neither request nor selector sets one - default: default
"""

import os
from dataclasses import dataclass, field
from typing import Tuple

from .annotations.binding import ANNOTATION_PREFIX
from .core.gvk import CONFIG_MAPS, ROUTES, SECRETS, SERVICES, GroupVersionResource

DEFAULT_OWNED_RESOURCE_TYPES = (SECRETS, CONFIG_MAPS, SERVICES, ROUTES)


@dataclass
class BindingSettings:
    annotation_prefix: str = ANNOTATION_PREFIX
    detect_owned_resources: bool = False
    owned_resource_types: Tuple[GroupVersionResource, ...] = field(
        default_factory=lambda: DEFAULT_OWNED_RESOURCE_TYPES
    )
    default_namespace: str = "default"

    @staticmethod
    def from_env() -> "BindingSettings":
        """
        Read settings from the environment.

        Raises:
            ValueError: If BINDING_OWNED_RESOURCE_TYPES holds a malformed entry
        """
        annotation_prefix = os.getenv("BINDING_ANNOTATION_PREFIX", ANNOTATION_PREFIX)
        detect_owned_resources = os.getenv("BINDING_DETECT_OWNED_RESOURCES", "0") == "1"
        raw_types = os.getenv("BINDING_OWNED_RESOURCE_TYPES")
        if raw_types:
            owned_resource_types = tuple(
                GroupVersionResource.parse(t) for t in raw_types.split(",") if t.strip()
            )
        else:
            owned_resource_types = DEFAULT_OWNED_RESOURCE_TYPES
        default_namespace = os.getenv("BINDING_DEFAULT_NAMESPACE", "default")
        return BindingSettings(
            annotation_prefix=annotation_prefix,
            detect_owned_resources=detect_owned_resources,
            owned_resource_types=owned_resource_types,
            default_namespace=default_namespace,
        )
