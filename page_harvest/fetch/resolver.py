"""
Page source resolution: cache first, network second.

The resolver combines the fetcher and the cache store. Cache writes are
fire-and-forget: the fetched text is returned as soon as the response
arrives while the write runs as a tracked background task. A write failure
is logged and otherwise ignored. Pending writes are awaited by drain(),
which also runs when the resolver is used as an async context manager.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
import logging

import httpx

from ..config import FetchConfig
from ..core.errors import CacheEntryNotFound, CacheReadError, CacheWriteError
from ..logging_utils import log_event
from ..parse.document import Document, parse
from .cache import CacheStore
from .fetcher import build_client, fetch_url

logger = logging.getLogger(__name__)


@dataclass
class ResolveStats:
    """Counters collected while resolving pages.

    Attributes:
        cache_hits: Pages served from the cache
        fetched: Successful network fetches
        failed: Failed network fetches
        cache_writes: Completed cache writes
        cache_write_failures: Cache writes that failed and were ignored
    """
    cache_hits: int = 0
    fetched: int = 0
    failed: int = 0
    cache_writes: int = 0
    cache_write_failures: int = 0


class PageResolver:
    """Return page content for URLs, from cache when possible.

    Args:
        fetch_config: HTTP settings for the fetcher
        cache: Cache store, or None to disable caching entirely
        client: Optional shared httpx client; one is created on enter otherwise
    """

    def __init__(
        self,
        fetch_config: FetchConfig,
        cache: CacheStore | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self.fetch_config = fetch_config
        self.cache = cache
        self.stats = ResolveStats()
        self._client = client
        self._owns_client = False
        self._pending: dict[str, asyncio.Task[None]] = {}

    async def __aenter__(self) -> PageResolver:
        if self._client is None:
            cfg = self.fetch_config
            self._client = build_client(
                cfg.timeout_seconds, cfg.user_agent, cfg.trust_env, cfg.follow_redirects
            )
            self._owns_client = True
        return self

    async def __aexit__(self, *exc_info) -> None:
        try:
            await self.drain()
        finally:
            if self._owns_client and self._client is not None:
                await self._client.aclose()
                self._client = None
                self._owns_client = False

    async def resolve(self, url: str, ignore_cache: bool = False) -> str | None:
        """Return the text of a page, or None if it could not be fetched.

        With ignore_cache the cache is neither read nor written.
        """
        log_event(logger, f"Getting data for {url}", level=logging.DEBUG, event="resolve", url=url)
        use_cache = self.cache is not None and not ignore_cache

        if use_cache:
            key = self.cache.key_for(url)
            pending = self._pending.get(key)
            if pending is not None:
                await asyncio.wait({pending})
            cached = await self._read_cached(url, key)
            if cached is not None:
                return cached

        cfg = self.fetch_config
        result = await fetch_url(
            url,
            timeout=cfg.timeout_seconds,
            user_agent=cfg.user_agent,
            trust_env=cfg.trust_env,
            follow_redirects=cfg.follow_redirects,
            client=self._client,
        )
        if not result.ok:
            self.stats.failed += 1
            return None

        self.stats.fetched += 1
        log_event(logger, f"I fetched {url} fresh", event="fetch_ok", url=url, status_code=result.status_code)
        if use_cache:
            self._schedule_write(url, key, result.text)
        return result.text

    async def resolve_document(self, url: str, ignore_cache: bool = False) -> Document | None:
        """Resolve a page and parse it; None when the page is unavailable."""
        text = await self.resolve(url, ignore_cache=ignore_cache)
        if text is None:
            return None
        return parse(text, url=url)

    async def drain(self) -> None:
        """Wait for all pending cache writes to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending.values()))

    async def _read_cached(self, url: str, key: str) -> str | None:
        if not await self.cache.exists(key):
            return None
        try:
            text = await self.cache.read(key)
        except CacheEntryNotFound:
            return None
        except CacheReadError as exc:
            log_event(
                logger,
                f"Cache read failed for {url}, fetching fresh",
                level=logging.WARNING,
                event="cache_read_failed",
                url=url,
                error=str(exc),
            )
            return None
        self.stats.cache_hits += 1
        log_event(logger, f"I read {url} from cache", event="cache_hit", url=url)
        return text

    def _schedule_write(self, url: str, key: str, text: str) -> None:
        task = asyncio.create_task(self._write_cached(url, key, text))
        self._pending[key] = task
        task.add_done_callback(lambda done: self._forget(key, done))

    def _forget(self, key: str, task: asyncio.Task[None]) -> None:
        if self._pending.get(key) is task:
            del self._pending[key]

    async def _write_cached(self, url: str, key: str, text: str) -> None:
        try:
            await self.cache.write(key, text)
        except CacheWriteError as exc:
            self.stats.cache_write_failures += 1
            log_event(
                logger,
                f"Cache write failed for {url}",
                level=logging.WARNING,
                event="cache_write_failed",
                url=url,
                error=str(exc),
            )
            return
        self.stats.cache_writes += 1
