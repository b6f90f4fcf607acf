"""
page-harvest - fetch, cache, extract and persist structured web data.

Pages are fetched over HTTP (or served from a local content-addressed
cache), parsed into a queryable Document, turned into records by a
pluggable extractor, and saved as a named JSON artifact.

Main entry point is the CLI via `page-harvest run` command.

Example:
    $ page-harvest run https://news.ycombinator.com/ -n hacker-news-links --ignore-cache
"""

__all__ = [
    "__version__",
    "harvest",
    "harvest_many",
    "run_pipeline",
    "PageResolver",
    "CacheStore",
    "ResultStore",
    "Document",
    "parse",
    "RecordExtractor",
]
__version__ = "0.1.0"

from .extract.base import RecordExtractor
from .fetch.cache import CacheStore
from .fetch.resolver import PageResolver
from .output.persister import ResultStore
from .parse.document import Document, parse
from .runner import harvest, harvest_many, run_pipeline
