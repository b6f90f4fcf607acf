"""
Record extraction from parsed documents.

Extractors are plain callables mapping a Document to a list of records;
this package provides the contract, a declarative implementation, and the
built-in extractors.
"""

from .base import (
    AttrField,
    Extractor,
    FieldSpec,
    NestedField,
    PatternField,
    RecordExtractor,
    TextField,
)
from .readable import ReadableText, extract_text, make_article_extractor
from .sites import EXTRACTOR_NAMES, get_extractor, hacker_news_links, pokedex_entry

__all__ = [
    "Extractor",
    "FieldSpec",
    "TextField",
    "AttrField",
    "PatternField",
    "NestedField",
    "RecordExtractor",
    "ReadableText",
    "extract_text",
    "make_article_extractor",
    "hacker_news_links",
    "pokedex_entry",
    "get_extractor",
    "EXTRACTOR_NAMES",
]
