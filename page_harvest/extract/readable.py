"""
Readable article text for pages without a fixed layout.

Methods are tried in the configured order until one yields text:
- trafilatura: boilerplate removal tuned for news and blog articles
- readability: readability-lxml main-content summary, flattened with bs4
- bs4: every visible text line of the page

The article extractor emits a single {url, title, text, method} record per
page, where method names the strategy that produced the text.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Callable, Optional

from bs4 import BeautifulSoup
import trafilatura
from readability import Document as ReadabilityDocument

from ..core.types import Record
from ..logging_utils import log_event
from ..parse.document import Document

logger = logging.getLogger(__name__)

TextMethod = Callable[[str], Optional[str]]


@dataclass
class ReadableText:
    """Text pulled out of a page.

    Attributes:
        text: Non-empty text with surrounding whitespace removed
        method: Name of the method that produced it
    """
    text: str
    method: str


def extract_text(html: str, primary: str, fallback: list[str]) -> ReadableText | None:
    """Run the methods named by primary, then fallback, until one yields text.

    Unknown method names are skipped. Duplicates of primary in fallback are
    ignored. Returns None for blank markup or when every method comes back
    empty.
    """
    if not html.strip():
        return None
    for name in _method_order(primary, fallback):
        method = METHODS.get(name)
        if method is None:
            log_event(
                logger,
                f"Unknown text method {name}",
                level=logging.DEBUG,
                event="text_method_unknown",
                method=name,
            )
            continue
        text = method(html)
        if text and text.strip():
            return ReadableText(text=text.strip(), method=name)
    return None


def make_article_extractor(primary: str = "trafilatura", fallback: list[str] | None = None):
    chain = list(fallback) if fallback is not None else ["readability", "bs4"]

    def article_text(document: Document) -> list[Record]:
        found = extract_text(document.markup, primary, chain)
        if found is None:
            log_event(logger, f"No readable text in {document.url}", event="article_empty", url=document.url)
            return []
        return [
            {
                "url": document.url,
                "title": document.title,
                "text": found.text,
                "method": found.method,
            }
        ]

    return article_text


def _method_order(primary: str, fallback: list[str]) -> list[str]:
    order = [primary]
    for name in fallback:
        if name not in order:
            order.append(name)
    return order


def _with_trafilatura(html: str) -> str | None:
    return trafilatura.extract(html, include_comments=False)


def _with_readability(html: str) -> str | None:
    # summary() returns an HTML fragment of the main content
    return _with_bs4(ReadabilityDocument(html).summary())


def _with_bs4(html: str) -> str | None:
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(["script", "style", "noscript", "template"]):
        tag.decompose()
    lines = (line.strip() for line in soup.get_text(separator="\n").splitlines())
    return "\n".join(line for line in lines if line) or None


METHODS: dict[str, TextMethod] = {
    "trafilatura": _with_trafilatura,
    "readability": _with_readability,
    "bs4": _with_bs4,
}
