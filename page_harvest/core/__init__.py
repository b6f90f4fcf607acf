"""
Core domain types and errors.

This package contains the data types and the exception hierarchy shared
by every pipeline stage.
"""

from .errors import (
    CacheEntryNotFound,
    CacheError,
    CacheReadError,
    CacheWriteError,
    HarvestError,
    NoMatch,
    PageUnavailable,
    PersistError,
)
from .types import HarvestResult, Record

__all__ = [
    "HarvestError",
    "CacheError",
    "CacheEntryNotFound",
    "CacheReadError",
    "CacheWriteError",
    "NoMatch",
    "PersistError",
    "PageUnavailable",
    "HarvestResult",
    "Record",
]
