"""
HTML document parsing and querying.

Pages are parsed with BeautifulSoup's built-in "html.parser", which
recovers from malformed markup instead of failing. An empty string yields
an empty document. The Document wrapper exposes the two query styles the
extractors rely on:

1. CSS selection: ordered lists of matching elements
2. Pattern search: a regular expression over an element's text content
"""

from __future__ import annotations

import re
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

from ..core.errors import NoMatch

PARSER = "html.parser"


class Document:
    """A parsed page.

    Attributes:
        markup: The raw text the document was parsed from
        url: The URL the page came from, if known
        soup: The underlying BeautifulSoup tree
    """

    def __init__(self, markup: str, url: str | None = None):
        self.markup = markup
        self.url = url
        self.soup = BeautifulSoup(markup, PARSER)

    @property
    def root(self) -> Tag:
        return self.soup

    @property
    def title(self) -> str:
        node = self.soup.title
        return node.get_text(strip=True) if node else ""

    def select(self, selector: str, within: Tag | None = None) -> list[Tag]:
        """Return elements matching a CSS selector in document order."""
        scope = within if within is not None else self.soup
        return list(scope.select(selector))

    def select_one(self, selector: str, within: Tag | None = None) -> Tag | None:
        scope = within if within is not None else self.soup
        return scope.select_one(selector)

    def text_of(self, element: Tag | None = None, separator: str = "") -> str:
        """Return the text content of an element (the whole document by default)."""
        scope = element if element is not None else self.soup
        return scope.get_text(separator=separator)

    def search(self, pattern: str | re.Pattern[str], element: Tag | None = None, flags: int = 0) -> str:
        """Search an element's text content with a regular expression.

        Text nodes are joined with newlines so values separated only by
        markup (e.g. ``Name: Pikachu<br/>Number: 25``) stay apart.

        Returns:
            The first capture group, or the whole match if the pattern has no group

        Raises:
            NoMatch: If the pattern does not match
        """
        regex = pattern if isinstance(pattern, re.Pattern) else re.compile(pattern, flags)
        match = regex.search(self.text_of(element, separator="\n"))
        if match is None:
            raise NoMatch(regex.pattern)
        if regex.groups:
            return match.group(1)
        return match.group(0)

    def absolute_url(self, href: str) -> str:
        """Resolve a link against the document URL."""
        if not self.url:
            return href
        return urljoin(self.url, href)


def parse(text: str, url: str | None = None) -> Document:
    """Parse page text into a Document.

    Raises:
        TypeError: If text is not a string (e.g. the page fetch failed)
    """
    if not isinstance(text, str):
        raise TypeError(f"parse() expects page text, got {type(text).__name__}")
    return Document(text, url=url)
