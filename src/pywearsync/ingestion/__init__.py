"""Ingestion layer.

Adapters that turn events received from the producer device into
normalized snapshots for the state store.
"""

__all__: list[str] = []
