"""
Service binding resolution engine.

Derives environment variables and volume keys for a workload from binding
annotations on backing service custom resources:

- annotations: classify binding annotations and resolve them with handlers
- servicecontext: per-service annotation processing and owned resources
- retriever: final env var names, custom templates and volume keys
- cluster: read-only cluster access (live or from manifests)
"""

from .config import BindingSettings
from .pipeline import resolve_binding
from .request import BackingServiceSelector, BindingRequest, CustomEnvTemplate
from .retriever import BindingPayload, Retriever
from .servicecontext import ServiceContext, ServiceContextBuilder

__version__ = "0.1.0"

__all__ = [
    "BindingSettings",
    "resolve_binding",
    "BackingServiceSelector",
    "BindingRequest",
    "CustomEnvTemplate",
    "BindingPayload",
    "Retriever",
    "ServiceContext",
    "ServiceContextBuilder",
]
