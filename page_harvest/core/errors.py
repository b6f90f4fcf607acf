"""
Exception hierarchy for the harvest pipeline.

Network failures are not exceptions: the fetcher reports them through a
failed FetchResult. Cache errors are contained by the resolver. Only
PersistError and PageUnavailable are meant to reach the caller of a run.
"""

from __future__ import annotations


class HarvestError(Exception):
    """Base class for all pipeline errors."""


class CacheError(HarvestError):
    """Base class for cache store failures.

    Attributes:
        key: The cache key involved in the failed operation
    """

    def __init__(self, key: str, message: str):
        super().__init__(message)
        self.key = key


class CacheEntryNotFound(CacheError):
    """Raised when reading a key that has no cache entry."""

    def __init__(self, key: str):
        super().__init__(key, f"No cache entry for key {key}")


class CacheReadError(CacheError):
    """Raised when an existing cache entry cannot be read or decoded."""


class CacheWriteError(CacheError):
    """Raised when a cache entry cannot be written."""


class NoMatch(HarvestError):
    """Raised when a selector or pattern finds nothing for a field.

    Attributes:
        query: The selector or regular expression that did not match
    """

    def __init__(self, query: str, field: str | None = None):
        self.query = query
        self.field = field
        where = f" for field '{field}'" if field else ""
        super().__init__(f"No match{where}: {query}")


class PersistError(HarvestError):
    """Raised when an output artifact cannot be written."""


class PageUnavailable(HarvestError):
    """Raised when none of the requested pages could be obtained.

    Attributes:
        urls: The URLs that were requested
    """

    def __init__(self, urls: list[str]):
        self.urls = list(urls)
        super().__init__(f"No page content available for: {', '.join(self.urls)}")
