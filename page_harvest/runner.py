"""
Main pipeline orchestration.

This module coordinates the workflow for one or more URLs:
1. Resolve page content (cache or network)
2. Parse it into a Document
3. Run the extractor over the Document
4. Persist the records as a named JSON artifact

Pages that cannot be obtained are skipped; a run with no page content at
all fails with PageUnavailable and writes nothing.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Sequence

from rich.console import Console

from .config import AppConfig
from .core.errors import PageUnavailable
from .core.types import HarvestResult, Record
from .extract.base import Extractor
from .extract.sites import get_extractor
from .fetch.cache import CacheIndex, CacheStore
from .fetch.resolver import PageResolver, ResolveStats
from .logging_utils import log_event, setup_logging
from .output.persister import ResultStore

logger = logging.getLogger(__name__)


def run_pipeline(
    urls: Sequence[str],
    extractor_name: str,
    name: str,
    cfg: AppConfig,
    ignore_cache: bool = False,
    console: Console | None = None,
) -> HarvestResult:
    """Run the complete pipeline synchronously.

    Sets up logging, looks up the named extractor and processes all URLs
    into a single artifact.

    Args:
        urls: Page URLs, processed and saved in this order
        extractor_name: Name of a built-in extractor (see EXTRACTOR_NAMES)
        name: Artifact name; records go to <results_dir>/<name>.json
        cfg: Application configuration
        ignore_cache: Always fetch fresh and leave the cache untouched
        console: Rich console for log output and the summary line (creates
            default if None)

    Returns:
        HarvestResult for the saved artifact

    Raises:
        ValueError: If the extractor name is unknown
        PageUnavailable: If no page could be obtained
        PersistError: If the artifact could not be written
    """
    console = console or Console()
    setup_logging(cfg, console)
    extractor = get_extractor(extractor_name, cfg.extract)
    result = asyncio.run(harvest_many(urls, extractor, name, cfg, ignore_cache=ignore_cache))
    _render_stats(result, console)
    return result


async def harvest(
    url: str,
    extractor: Extractor,
    name: str,
    cfg: AppConfig,
    ignore_cache: bool = False,
) -> HarvestResult:
    """Fetch one page, extract its records and save them under name."""
    return await harvest_many([url], extractor, name, cfg, ignore_cache=ignore_cache)


async def harvest_many(
    urls: Sequence[str],
    extractor: Extractor,
    name: str,
    cfg: AppConfig,
    ignore_cache: bool = False,
) -> HarvestResult:
    """Fetch pages concurrently, extract records and save one artifact.

    Records are concatenated in the order the URLs were given, each page
    contributing its records in document order.
    """
    if not urls:
        raise ValueError("At least one URL is required")
    store = ResultStore(cfg.output.path, indent=cfg.output.indent)
    # reject bad artifact names before any network traffic
    store.path_for(name)

    log_event(
        logger,
        "Pipeline start",
        event="pipeline_start",
        urls=list(urls),
        artifact=name,
        ignore_cache=ignore_cache,
    )

    async with _build_resolver(cfg) as resolver:
        documents = await asyncio.gather(
            *(resolver.resolve_document(url, ignore_cache=ignore_cache) for url in urls)
        )
    stats = resolver.stats

    records: list[Record] = []
    skipped: list[str] = []
    for url, document in zip(urls, documents):
        if document is None:
            skipped.append(url)
            log_event(logger, f"Skipping {url}", level=logging.WARNING, event="page_skipped", url=url)
            continue
        page_records = extractor(document)
        log_event(
            logger,
            f"Extracted {len(page_records)} records from {url}",
            event="extracted",
            url=url,
            total=len(page_records),
        )
        records.extend(page_records)

    if len(skipped) == len(urls):
        raise PageUnavailable(list(urls))

    path = await store.save(name, records)
    log_event(
        logger,
        "Pipeline complete",
        event="pipeline_complete",
        output=str(path),
        total=len(records),
        skipped=len(skipped),
    )
    return HarvestResult(name=name, path=path, records=records, stats=stats, skipped=skipped)


def _build_resolver(cfg: AppConfig) -> PageResolver:
    """Build the resolver; caching is disabled when cfg.cache.enabled is False."""
    cache = None
    if cfg.cache.enabled:
        index = None
        if cfg.cache.write_index:
            index = CacheIndex(cfg.cache.path, enabled=True, filename=cfg.cache.index_filename)
        cache = CacheStore(cfg.cache.path, index=index)
    return PageResolver(cfg.fetch, cache=cache)


def _render_stats(result: HarvestResult, console: Console) -> None:
    stats = result.stats or ResolveStats()
    console.print(
        "[bold]Harvest summary[/bold]: "
        f"records={len(result.records)}, fetched={stats.fetched}, failed={stats.failed}, "
        f"cache_hits={stats.cache_hits}, skipped={len(result.skipped)}"
    )
