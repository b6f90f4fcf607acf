"""
Extractor contract and a declarative record extractor.

An extractor is any callable taking a Document and returning a list of
records. Site-specific extractors can be plain functions; RecordExtractor
covers the common case of "one record per matched element" with fields
filled by CSS selection or by pattern matching.

Missing-field policy (RecordExtractor.missing):
- "null": the field is stored as None (default)
- "omit": the field is left out of the record
- "skip": the whole record is dropped
- "raise": NoMatch propagates to the caller
"""

from __future__ import annotations

from dataclasses import dataclass, field
import re
from typing import Any, Callable, Mapping, Protocol

from bs4 import Tag

from ..core.errors import NoMatch
from ..core.types import Record
from ..parse.document import Document

MISSING_POLICIES = ("null", "omit", "skip", "raise")


class Extractor(Protocol):
    def __call__(self, document: Document) -> list[Record]: ...


class FieldSpec:
    """Base class for record fields."""

    selector: str | None = None

    def _scope(self, document: Document, element: Tag) -> Tag:
        if self.selector is None:
            return element
        found = document.select_one(self.selector, within=element)
        if found is None:
            raise NoMatch(self.selector)
        return found

    def extract(self, document: Document, element: Tag) -> Any:
        raise NotImplementedError


@dataclass
class TextField(FieldSpec):
    """Text content of the element (or of a sub-element)."""

    selector: str | None = None
    strip: bool = True

    def extract(self, document: Document, element: Tag) -> str:
        text = document.text_of(self._scope(document, element))
        return text.strip() if self.strip else text


@dataclass
class AttrField(FieldSpec):
    """An attribute value, optionally resolved against the page URL."""

    attr: str = "href"
    selector: str | None = None
    absolute: bool = False

    def extract(self, document: Document, element: Tag) -> str:
        node = self._scope(document, element)
        value = node.get(self.attr)
        if value is None:
            raise NoMatch(f"{self.selector or node.name}[{self.attr}]")
        if isinstance(value, list):
            value = " ".join(value)
        return document.absolute_url(value) if self.absolute else value


@dataclass
class PatternField(FieldSpec):
    """First capture group of a regex over the element's text content."""

    pattern: str = ""
    selector: str | None = None
    flags: int = 0
    convert: Callable[[str], Any] | None = None

    def extract(self, document: Document, element: Tag) -> Any:
        value = document.search(re.compile(self.pattern, self.flags), self._scope(document, element))
        return self.convert(value) if self.convert else value


@dataclass
class NestedField(FieldSpec):
    """A nested record built from its own fields."""

    fields: Mapping[str, FieldSpec] = field(default_factory=dict)
    selector: str | None = None

    def extract(self, document: Document, element: Tag) -> Record:
        scope = self._scope(document, element)
        return {name: spec.extract(document, scope) for name, spec in self.fields.items()}


class RecordExtractor:
    """Build one record per element matched by selector, in document order.

    Args:
        selector: CSS selector for record containers; None uses the whole document
        fields: Mapping of output field name to FieldSpec
        missing: Missing-field policy, one of MISSING_POLICIES
    """

    def __init__(
        self,
        selector: str | None,
        fields: Mapping[str, FieldSpec],
        missing: str = "null",
    ):
        if missing not in MISSING_POLICIES:
            raise ValueError(f"Unsupported missing-field policy: {missing}")
        self.selector = selector
        self.fields = dict(fields)
        self.missing = missing

    def __call__(self, document: Document) -> list[Record]:
        if self.selector is None:
            containers = [document.root]
        else:
            containers = document.select(self.selector)

        records: list[Record] = []
        for element in containers:
            record = self._build(document, element)
            if record is not None:
                records.append(record)
        return records

    def _build(self, document: Document, element: Tag) -> Record | None:
        record: Record = {}
        for name, spec in self.fields.items():
            try:
                record[name] = spec.extract(document, element)
            except NoMatch as exc:
                if self.missing == "raise":
                    raise NoMatch(exc.query, field=name) from exc
                if self.missing == "skip":
                    return None
                if self.missing == "null":
                    record[name] = None
        return record
