"""
Built-in extractors for known page layouts and the name registry.

hacker_news_links: front-page story links ({title, url} per "a.titlelink"); title
    is the anchor text exactly as it appears, whitespace included
pokedex_entry: free-text "Name: ...<br/>Number: ..." blocks, matched by pattern;
    a missing field is stored as None
article: readable article text ({url, title, text, method})
"""

from __future__ import annotations

from ..config import ExtractConfig
from .base import AttrField, Extractor, PatternField, RecordExtractor, TextField
from .readable import make_article_extractor

hacker_news_links = RecordExtractor(
    "a.titlelink",
    {
        "title": TextField(strip=False),
        "url": AttrField("href"),
    },
)

pokedex_entry = RecordExtractor(
    None,
    {
        "name": PatternField(r"Name:\s*(.+)"),
        "num": PatternField(r"Number:\s*(\d+)"),
    },
    missing="null",
)

EXTRACTOR_NAMES = ("hacker-news", "pokedex", "article")


def get_extractor(name: str, cfg: ExtractConfig | None = None) -> Extractor:
    """Return the built-in extractor registered under name.

    Raises:
        ValueError: If name is not a known extractor
    """
    if name == "hacker-news":
        return hacker_news_links
    if name == "pokedex":
        return pokedex_entry
    if name == "article":
        cfg = cfg or ExtractConfig()
        return make_article_extractor(cfg.primary, cfg.fallback)
    raise ValueError(f"Unknown extractor: {name}. Choose from {', '.join(EXTRACTOR_NAMES)}")
