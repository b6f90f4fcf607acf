"""
Output artifact generation.

This package persists extracted records as named JSON artifacts.
"""

from .persister import ResultStore

__all__ = ["ResultStore"]
