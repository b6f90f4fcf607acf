"""
Command-line interface for page-harvest.

Uses Typer to provide a thin wrapper around run_pipeline with options for
the main configuration settings. Supports loading .env files.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer
from rich.console import Console

from .config import load_config
from .core.errors import PageUnavailable, PersistError
from .extract.sites import EXTRACTOR_NAMES
from .fetch.cache import CacheStore
from .runner import run_pipeline

try:
    from dotenv import load_dotenv
except Exception:  # noqa: BLE001
    load_dotenv = None

app = typer.Typer(add_completion=False)
console = Console()


@app.command()
def run(
    urls: list[str] = typer.Argument(..., help="Page URLs to harvest."),
    name: str = typer.Option(..., "--name", "-n", help="Artifact name (<results-dir>/<name>.json)."),
    extractor: str = typer.Option("hacker-news", "--extractor", "-e", help="Built-in extractor name."),
    config: Path | None = typer.Option(None, "--config", "-c", exists=True),
    ignore_cache: bool = typer.Option(
        False, "--ignore-cache", help="Always fetch fresh and leave the cache untouched."
    ),
    cache_dir: Path | None = typer.Option(None, "--cache-dir", help="Cache root directory."),
    results_dir: Path | None = typer.Option(None, "--results-dir", help="Results directory."),
    log_level: str | None = typer.Option(None, "--log-level", help="Logging level."),
    log_file: bool | None = typer.Option(
        None, "--log-file/--no-log-file", help="Enable or disable file logging."
    ),
):
    """Fetch pages, extract records and save them as a JSON artifact."""
    if load_dotenv is not None:
        load_dotenv()

    cfg = load_config(str(config) if config else None)

    if cache_dir is not None:
        cfg.cache.dir = str(cache_dir)
    if results_dir is not None:
        cfg.output.results_dir = str(results_dir)
    if log_level:
        cfg.logging.level = log_level
    if log_file is not None:
        cfg.logging.file = log_file

    try:
        result = run_pipeline(urls, extractor, name, cfg, ignore_cache=ignore_cache, console=console)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    except (PageUnavailable, PersistError) as exc:
        console.print(f"[red]Harvest failed[/red]: {exc}")
        raise typer.Exit(code=1) from exc
    console.print(f"Artifact written: {result.path}")


@app.command()
def cached(
    cache_dir: Path = typer.Option(Path(".cache"), "--cache-dir", help="Cache root directory."),
):
    """List the URLs stored in the page cache."""
    for url in asyncio.run(CacheStore(cache_dir).urls()):
        console.print(url, markup=False, highlight=False)


@app.command()
def extractors():
    """List the built-in extractor names."""
    for extractor_name in EXTRACTOR_NAMES:
        console.print(extractor_name)


if __name__ == "__main__":
    app()
