"""
In-process caching for the player directory: snapshot entries with an
optional TTL and coalescing of concurrent bulk fetches.
"""
from .core import CacheEntry
from .coalescer import RequestCoalescer

__all__ = [
    "CacheEntry",
    "RequestCoalescer",
]
