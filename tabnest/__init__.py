"""Core (renderer-agnostic) tab layout logic.

This package contains:
- filter signatures (equality-only comparison of row filters)
- content items and combinable collections
- pagination splitting
- the tab hierarchy builder
- the tree serializer (event stream for renderers)
"""
