"""
Content-addressed page cache on the local filesystem.

Each cached page lives at <root>/<key>.html where key is the URL-safe
base64 encoding of the URL's UTF-8 bytes. The encoding is reversible, so
distinct URLs always map to distinct files. Base64 grows the URL by 4/3:
URLs longer than roughly 186 bytes exceed the usual 255-byte filename
limit and cannot be cached (the write fails with CacheWriteError). Keys are
case sensitive, so two keys differing only in case collide on
case-insensitive filesystems.

Entries are written to a temporary file in the cache root and renamed into
place, so a partially written page is never visible under its entry name.
All file I/O runs in a worker thread to keep the event loop responsive.
"""

from __future__ import annotations

import asyncio
import base64
import binascii
import json
import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from ..core.errors import CacheEntryNotFound, CacheReadError, CacheWriteError
from ..logging_utils import log_event

logger = logging.getLogger(__name__)

SUFFIX = ".html"


def cache_key(url: str) -> str:
    """Return the filename-safe cache key for a URL.

    Example:
        >>> cache_key("https://news.ycombinator.com/")
        'aHR0cHM6Ly9uZXdzLnljb21iaW5hdG9yLmNvbS8='
    """
    return base64.urlsafe_b64encode(url.encode("utf-8")).decode("ascii")


def url_from_key(key: str) -> str:
    """Decode a cache key back to the URL it was derived from."""
    try:
        return base64.urlsafe_b64decode(key.encode("ascii")).decode("utf-8")
    except (binascii.Error, UnicodeError) as exc:
        raise ValueError(f"Not a cache key: {key}") from exc


class CacheIndex:
    """Tracks cache operations in a JSONL index file.

    Each cache operation (hit, write, read error) is logged as a JSON line
    with timestamp, URL, file path and error info.

    Attributes:
        cache_dir: Directory where cache files and index are stored
        enabled: Whether index writing is enabled
        path: Full path to the index file
    """

    def __init__(self, cache_dir: Path, enabled: bool = True, filename: str = "index.jsonl"):
        self.cache_dir = cache_dir
        self.enabled = enabled
        self.path = cache_dir / filename

    def append(self, payload: dict[str, Any]) -> None:
        """Append an entry to the cache index.

        Adds a timestamp if not present and writes the entry as a JSON line.

        Args:
            payload: Dictionary containing cache operation details including
                     url, key, kind, path, error, etc.
        """
        if not self.enabled:
            return
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        payload = dict(payload)
        payload.setdefault("timestamp", datetime.now(timezone.utc).isoformat())
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(payload, ensure_ascii=True))
            handle.write("\n")


class CacheStore:
    """Maps cache keys to raw page bodies stored under a root directory.

    The store never expires or evicts entries; they disappear only through
    external deletion.
    """

    def __init__(self, root: Path, index: CacheIndex | None = None):
        self.root = Path(root)
        self.index = index

    def key_for(self, url: str) -> str:
        return cache_key(url)

    def path_for(self, key: str) -> Path:
        return self.root / f"{key}{SUFFIX}"

    async def exists(self, key: str) -> bool:
        return await asyncio.to_thread(self.path_for(key).is_file)

    async def read(self, key: str) -> str:
        """Read a cached page.

        Raises:
            CacheEntryNotFound: If no entry exists for key
            CacheReadError: If the entry exists but cannot be read or decoded
        """
        return await asyncio.to_thread(self._read_sync, key)

    async def write(self, key: str, text: str) -> Path:
        """Write a page under key, replacing any existing entry.

        Raises:
            CacheWriteError: If the entry cannot be written
        """
        return await asyncio.to_thread(self._write_sync, key, text)

    async def urls(self) -> list[str]:
        """Return the URLs of all cached pages, sorted."""
        return await asyncio.to_thread(self._urls_sync)

    def _read_sync(self, key: str) -> str:
        path = self.path_for(key)
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise CacheEntryNotFound(key) from exc
        except (OSError, UnicodeDecodeError) as exc:
            self._append_index(key, "read_error", error=f"{type(exc).__name__}: {exc}")
            raise CacheReadError(key, f"Cannot read cache entry {path}: {exc}") from exc
        self._append_index(key, "hit")
        return text

    def _write_sync(self, key: str, text: str) -> Path:
        path = self.path_for(key)
        tmp_name: str | None = None
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.root, prefix=".tmp-", suffix=".part")
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(text)
            os.chmod(tmp_name, 0o644)
            os.replace(tmp_name, path)
            tmp_name = None
        except (OSError, UnicodeError) as exc:
            raise CacheWriteError(key, f"Cannot write cache entry {path}: {exc}") from exc
        finally:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
        self._append_index(key, "write", content_len=len(text))
        return path

    def _urls_sync(self) -> list[str]:
        if not self.root.is_dir():
            return []
        urls = []
        for path in self.root.glob(f"*{SUFFIX}"):
            try:
                urls.append(url_from_key(path.stem))
            except ValueError:
                continue
        return sorted(urls)

    def _append_index(self, key: str, kind: str, **fields: Any) -> None:
        if self.index is None:
            return
        try:
            url = url_from_key(key)
        except ValueError:
            url = None
        try:
            self.index.append(
                {"url": url, "key": key, "kind": kind, "path": str(self.path_for(key)), **fields}
            )
        except OSError as exc:
            log_event(
                logger,
                "Cache index append failed",
                level=logging.WARNING,
                event="cache_index_failed",
                path=str(self.index.path),
                error=f"{type(exc).__name__}: {exc}",
            )
