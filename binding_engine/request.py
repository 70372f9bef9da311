"""
Binding request model.

A binding request names the backing services to resolve, the global env var
prefix, custom env var templates, and whether owned resources are included.
It is read from a ServiceBindingRequest-shaped mapping.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .core.errors import RequestError
from .core.gvk import GroupVersionKind


def _label_selector_text(raw: Any) -> Optional[str]:
    if raw is None or raw == "":
        return None
    if isinstance(raw, str):
        return raw
    if isinstance(raw, dict):
        if raw.get("matchExpressions"):
            raise RequestError("labelSelector matchExpressions are not supported, use matchLabels")
        if "matchLabels" in raw or "matchExpressions" in raw:
            labels = raw.get("matchLabels") or {}
        else:
            labels = raw
        return ",".join(f"{k}={labels[k]}" for k in sorted(labels))
    raise RequestError(f"labelSelector must be a string or mapping, got {type(raw).__name__}")


@dataclass(frozen=True)
class BackingServiceSelector:
    group: str
    version: str
    kind: str
    resource_ref: Optional[str] = None
    label_selector: Optional[str] = None
    namespace: Optional[str] = None
    env_var_prefix: Optional[str] = None

    @property
    def gvk(self) -> GroupVersionKind:
        return GroupVersionKind(self.group, self.version, self.kind)

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "BackingServiceSelector":
        """
        Raises:
            RequestError: If kind/version are missing or no object is named
        """
        if not isinstance(raw, dict):
            raise RequestError("backing service selector must be a mapping")
        kind = raw.get("kind")
        version = raw.get("version")
        if not kind or not version:
            raise RequestError(f"backing service selector needs kind and version: {raw}")
        selector = cls(
            group=raw.get("group") or "",
            version=version,
            kind=kind,
            resource_ref=raw.get("resourceRef") or None,
            label_selector=_label_selector_text(raw.get("labelSelector")),
            namespace=raw.get("namespace") or None,
            env_var_prefix=raw.get("envVarPrefix"),
        )
        if not selector.resource_ref and not selector.label_selector:
            raise RequestError(f"backing service selector needs resourceRef or labelSelector: {raw}")
        return selector


@dataclass(frozen=True)
class CustomEnvTemplate:
    name: str
    body: str


@dataclass
class BindingRequest:
    """
    Fields:
        name: Request name (for log correlation)
        namespace: Default namespace for selectors
        selectors: Backing services, resolved in order
        env_var_prefix: Global prefix; empty means none
        custom_env_vars: Templates evaluated after all services are resolved
        detect_binding_resources: Include owned resources; None defers to settings
    """
    name: str
    namespace: Optional[str]
    selectors: List[BackingServiceSelector] = field(default_factory=list)
    env_var_prefix: str = ""
    custom_env_vars: List[CustomEnvTemplate] = field(default_factory=list)
    detect_binding_resources: Optional[bool] = None

    @property
    def trace_id(self) -> str:
        return f"{self.namespace or '-'}/{self.name}"

    @classmethod
    def from_object(cls, obj: Dict[str, Any]) -> "BindingRequest":
        """
        Read a ServiceBindingRequest-shaped mapping.

        Both the legacy single ``backingServiceSelector`` and the
        ``backingServiceSelectors`` list are honoured, single first.

        Raises:
            RequestError: If the request has no usable selector
        """
        meta = obj.get("metadata") or {}
        spec = obj.get("spec") or {}

        raw_selectors = []
        if spec.get("backingServiceSelector"):
            raw_selectors.append(spec["backingServiceSelector"])
        raw_selectors.extend(spec.get("backingServiceSelectors") or [])
        if not raw_selectors:
            raise RequestError("binding request has no backing service selectors")

        templates = []
        for item in spec.get("customEnvVar") or []:
            if not item.get("name"):
                raise RequestError(f"custom env var without a name: {item}")
            templates.append(CustomEnvTemplate(name=item["name"], body=item.get("value") or ""))

        detect = spec.get("detectBindingResources")
        return cls(
            name=meta.get("name") or "",
            namespace=meta.get("namespace"),
            selectors=[BackingServiceSelector.from_dict(s) for s in raw_selectors],
            env_var_prefix=spec.get("envVarPrefix") or "",
            custom_env_vars=templates,
            detect_binding_resources=None if detect is None else bool(detect),
        )
