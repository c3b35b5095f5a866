"""
Document Store Module for the Document Date Annotator.

This module provides:
    - The DocumentStore contract (fetch / save / max_id)
    - An in-memory backend seeded from YAML

Author: ML Engineering Team
"""

from .base import DocumentStore
from .memory_store import InMemoryDocumentStore


def create_store() -> DocumentStore:
    """
    Create the store backend named by ``store.backend``.

    Raises:
        ValueError: If the backend is unknown.
    """
    from config import get_config

    backend = get_config("store.backend", "memory")
    if backend == "memory":
        return InMemoryDocumentStore.from_config()
    raise ValueError(f"Unknown store backend: {backend}")


__all__ = ['DocumentStore', 'InMemoryDocumentStore', 'create_store']
