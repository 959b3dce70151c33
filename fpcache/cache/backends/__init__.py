"""
Fingerprint Cache — Store Backends

Exports available store adapter implementations.

Redis adapter is lazy-loaded via factory.py to avoid import overhead.
"""

from .memory import MemoryStoreAdapter

__all__ = [
    "MemoryStoreAdapter",
]
