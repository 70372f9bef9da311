"""
Test suite for the binding resolution engine.

Focus areas:
- Path resolution and decoding
- Annotation classification
- Handler results and merge semantics
- Service context precedence and owned resources
- Env var composition and custom templates
"""
