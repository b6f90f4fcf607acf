"""Markup parsing into queryable documents."""

from .document import Document, parse

__all__ = ["Document", "parse"]
