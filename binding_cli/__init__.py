"""
Binding CLI - resolve service bindings offline or against a live cluster

Commands:
- binding resolve - Resolve a ServiceBindingRequest into env vars and volume keys
- binding classify - Show how each annotation on a manifest is classified
- binding version - Show version information
"""

__version__ = "0.1.0"
