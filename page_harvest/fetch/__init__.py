"""
Page fetching and caching.

This package handles HTTP fetching, the on-disk page cache, and the
resolver that combines them.
"""

from .cache import CacheIndex, CacheStore, cache_key, url_from_key
from .fetcher import FetchResult, fetch_url
from .resolver import PageResolver, ResolveStats

__all__ = [
    "fetch_url",
    "FetchResult",
    "CacheStore",
    "CacheIndex",
    "cache_key",
    "url_from_key",
    "PageResolver",
    "ResolveStats",
]
