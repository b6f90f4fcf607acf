"""Smoke tests for the Typer CLI."""

from __future__ import annotations

import asyncio
import json

from typer.testing import CliRunner

from page_harvest.cli import app
from page_harvest.fetch import resolver as resolver_module
from page_harvest.fetch.cache import CacheStore
from page_harvest.fetch.fetcher import FetchResult

runner = CliRunner()

_HTML = '<a class="titlelink" href="https://one.example.com/">One</a>'


def _fake_fetch(pages):
    async def fake_fetch(url, **kwargs):
        if url in pages:
            return FetchResult(url=url, status_code=200, text=pages[url], error=None)
        return FetchResult(url=url, status_code=None, text=None, error="boom")

    return fake_fetch


def test_run_writes_artifact(tmp_path, monkeypatch):
    monkeypatch.setattr(resolver_module, "fetch_url", _fake_fetch({"https://news.example.com/": _HTML}))

    result = runner.invoke(
        app,
        [
            "run",
            "https://news.example.com/",
            "--name",
            "hn",
            "--cache-dir",
            str(tmp_path / ".cache"),
            "--results-dir",
            str(tmp_path / "data"),
        ],
    )

    assert result.exit_code == 0, result.output
    data = json.loads((tmp_path / "data" / "hn.json").read_text(encoding="utf-8"))
    assert data == [{"title": "One", "url": "https://one.example.com/"}]


def test_run_exits_nonzero_when_page_unavailable(tmp_path, monkeypatch):
    monkeypatch.setattr(resolver_module, "fetch_url", _fake_fetch({}))

    result = runner.invoke(
        app,
        [
            "run",
            "https://down.example.com/",
            "--name",
            "hn",
            "--cache-dir",
            str(tmp_path / ".cache"),
            "--results-dir",
            str(tmp_path / "data"),
        ],
    )

    assert result.exit_code == 1
    assert not (tmp_path / "data" / "hn.json").exists()


def test_cached_lists_urls(tmp_path):
    store = CacheStore(tmp_path)
    asyncio.run(store.write(store.key_for("https://cached.example.com/"), "page"))

    result = runner.invoke(app, ["cached", "--cache-dir", str(tmp_path)])

    assert result.exit_code == 0
    assert "https://cached.example.com/" in result.output


def test_extractors_lists_names():
    result = runner.invoke(app, ["extractors"])

    assert result.exit_code == 0
    assert "hacker-news" in result.output
