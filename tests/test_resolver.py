"""Tests for cache-first page resolution."""

from __future__ import annotations

import asyncio
from pathlib import Path

from page_harvest.config import FetchConfig
from page_harvest.core.errors import CacheReadError, CacheWriteError
from page_harvest.fetch import resolver as resolver_module
from page_harvest.fetch.cache import CacheStore
from page_harvest.fetch.fetcher import FetchResult
from page_harvest.fetch.resolver import PageResolver
from page_harvest.parse.document import Document

URL = "https://example.com/page"


class FakeFetch:
    """Stand-in for fetch_url that counts calls."""

    def __init__(self, text: str | None = "<html><body>fresh</body></html>", error: str | None = None):
        self.text = text
        self.error = error
        self.calls: list[str] = []

    async def __call__(self, url, **kwargs):
        self.calls.append(url)
        if self.error:
            return FetchResult(url=url, status_code=None, text=None, error=self.error)
        return FetchResult(url=url, status_code=200, text=self.text, error=None)


def _resolver(tmp_path: Path) -> PageResolver:
    return PageResolver(FetchConfig(), cache=CacheStore(tmp_path / ".cache"))


def test_second_resolve_is_a_cache_hit(tmp_path, monkeypatch):
    fake = FakeFetch()
    monkeypatch.setattr(resolver_module, "fetch_url", fake)
    resolver = _resolver(tmp_path)

    async def scenario():
        async with resolver:
            first = await resolver.resolve(URL)
            second = await resolver.resolve(URL)
        return first, second

    first, second = asyncio.run(scenario())

    assert first == second == "<html><body>fresh</body></html>"
    assert fake.calls == [URL]
    assert resolver.stats.fetched == 1
    assert resolver.stats.cache_hits == 1
    assert resolver.stats.cache_writes == 1


def test_cache_survives_across_resolvers(tmp_path, monkeypatch):
    fake = FakeFetch()
    monkeypatch.setattr(resolver_module, "fetch_url", fake)

    async def resolve_once():
        async with _resolver(tmp_path) as resolver:
            return await resolver.resolve(URL)

    assert asyncio.run(resolve_once()) == asyncio.run(resolve_once())
    assert len(fake.calls) == 1


def test_ignore_cache_always_fetches_and_never_reads(tmp_path, monkeypatch):
    fake = FakeFetch(text="fresh text")
    monkeypatch.setattr(resolver_module, "fetch_url", fake)
    resolver = _resolver(tmp_path)
    key = resolver.cache.key_for(URL)
    resolver.cache.path_for(key).parent.mkdir(parents=True)
    resolver.cache.path_for(key).write_text("stale cache text", encoding="utf-8")

    async def fail_read(key):
        raise AssertionError("cache must not be read")

    monkeypatch.setattr(resolver.cache, "read", fail_read)

    async def scenario():
        async with resolver:
            return [await resolver.resolve(URL, ignore_cache=True) for _ in range(2)]

    assert asyncio.run(scenario()) == ["fresh text", "fresh text"]
    assert len(fake.calls) == 2
    # the stale entry is left untouched
    assert resolver.cache.path_for(key).read_text(encoding="utf-8") == "stale cache text"


def test_fetch_failure_returns_none_and_creates_no_entry(tmp_path, monkeypatch):
    fake = FakeFetch(error="GET https://example.com/page failed: ConnectError: refused")
    monkeypatch.setattr(resolver_module, "fetch_url", fake)
    resolver = _resolver(tmp_path)

    async def scenario():
        async with resolver:
            return await resolver.resolve(URL)

    assert asyncio.run(scenario()) is None
    assert not resolver.cache.path_for(resolver.cache.key_for(URL)).exists()
    assert resolver.stats.failed == 1


def test_fetch_failure_does_not_overwrite_existing_entry(tmp_path, monkeypatch):
    fake = FakeFetch(error="boom")
    monkeypatch.setattr(resolver_module, "fetch_url", fake)
    resolver = _resolver(tmp_path)
    path = resolver.cache.path_for(resolver.cache.key_for(URL))
    path.parent.mkdir(parents=True)
    path.write_text("kept", encoding="utf-8")

    async def scenario():
        async with resolver:
            return await resolver.resolve(URL, ignore_cache=True)

    assert asyncio.run(scenario()) is None
    assert path.read_text(encoding="utf-8") == "kept"


def test_cache_read_failure_falls_back_to_fresh_fetch(tmp_path, monkeypatch):
    fake = FakeFetch(text="fresh")
    monkeypatch.setattr(resolver_module, "fetch_url", fake)
    resolver = _resolver(tmp_path)
    key = resolver.cache.key_for(URL)
    resolver.cache.path_for(key).parent.mkdir(parents=True)
    resolver.cache.path_for(key).write_text("corrupt", encoding="utf-8")

    async def broken_read(key):
        raise CacheReadError(key, "disk error")

    monkeypatch.setattr(resolver.cache, "read", broken_read)

    async def scenario():
        async with resolver:
            return await resolver.resolve(URL)

    assert asyncio.run(scenario()) == "fresh"
    assert fake.calls == [URL]
    assert resolver.stats.cache_hits == 0


def test_cache_write_failure_is_not_fatal(tmp_path, monkeypatch):
    fake = FakeFetch(text="fresh")
    monkeypatch.setattr(resolver_module, "fetch_url", fake)
    resolver = _resolver(tmp_path)

    async def broken_write(key, text):
        raise CacheWriteError(key, "disk full")

    monkeypatch.setattr(resolver.cache, "write", broken_write)

    async def scenario():
        async with resolver:
            return await resolver.resolve(URL)

    assert asyncio.run(scenario()) == "fresh"
    assert resolver.stats.cache_write_failures == 1
    assert resolver.stats.cache_writes == 0


def test_resolver_without_cache_always_fetches(monkeypatch):
    fake = FakeFetch()
    monkeypatch.setattr(resolver_module, "fetch_url", fake)
    resolver = PageResolver(FetchConfig(), cache=None)

    async def scenario():
        async with resolver:
            await resolver.resolve(URL)
            await resolver.resolve(URL)

    asyncio.run(scenario())
    assert len(fake.calls) == 2


def test_resolve_document_parses_page(tmp_path, monkeypatch):
    fake = FakeFetch(text="<html><head><title>Hi</title></head><body></body></html>")
    monkeypatch.setattr(resolver_module, "fetch_url", fake)

    async def scenario():
        async with _resolver(tmp_path) as resolver:
            return await resolver.resolve_document(URL)

    document = asyncio.run(scenario())
    assert isinstance(document, Document)
    assert document.url == URL
    assert document.title == "Hi"


def test_resolve_document_short_circuits_on_failure(tmp_path, monkeypatch):
    monkeypatch.setattr(resolver_module, "fetch_url", FakeFetch(error="boom"))

    async def scenario():
        async with _resolver(tmp_path) as resolver:
            return await resolver.resolve_document(URL)

    assert asyncio.run(scenario()) is None


def test_resolve_returns_before_cache_write_and_next_resolve_waits(tmp_path, monkeypatch):
    fake = FakeFetch(text="fresh")
    monkeypatch.setattr(resolver_module, "fetch_url", fake)
    resolver = _resolver(tmp_path)
    path = resolver.cache.path_for(resolver.cache.key_for(URL))
    real_write = resolver.cache.write

    async def scenario():
        release = asyncio.Event()

        async def held_write(key, text):
            await release.wait()
            return await real_write(key, text)

        monkeypatch.setattr(resolver.cache, "write", held_write)
        async with resolver:
            first = await resolver.resolve(URL)
            assert first == "fresh"
            assert not release.is_set()
            assert not path.exists()
            assert resolver.stats.cache_writes == 0

            second = asyncio.create_task(resolver.resolve(URL))
            for _ in range(3):
                await asyncio.sleep(0)
            assert not second.done()

            release.set()
            assert await second == "fresh"
        return first

    asyncio.run(scenario())

    assert fake.calls == [URL]
    assert resolver.stats.cache_hits == 1
    assert resolver.stats.cache_writes == 1
    assert path.read_text(encoding="utf-8") == "fresh"


def test_drain_waits_for_pending_writes(tmp_path, monkeypatch):
    monkeypatch.setattr(resolver_module, "fetch_url", FakeFetch(text="fresh"))
    resolver = _resolver(tmp_path)
    path = resolver.cache.path_for(resolver.cache.key_for(URL))

    async def scenario():
        async with resolver:
            await resolver.resolve(URL)
            await resolver.drain()
            return path.exists()

    assert asyncio.run(scenario()) is True
