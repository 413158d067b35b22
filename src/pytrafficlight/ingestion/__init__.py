"""Ingestion layer.

This package turns raw payload maps delivered by an event source into
normalized signal fields: defensive decoding first, then vocabulary
mapping.
"""

__all__: list[str] = []
