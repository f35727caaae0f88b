"""
Recipe caching package.

Provides the in-memory TTL store used to answer repeated reads without a
network round trip. Entries expire lazily and are evicted explicitly by
key or by key prefix.
"""

from .ttl_cache import TTLCache

__all__ = ["TTLCache"]
