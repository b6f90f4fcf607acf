"""
Core data types for the harvest pipeline.

- Record: one structured value produced by an extractor
- HarvestResult: outcome of a full fetch/extract/persist run
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict

if TYPE_CHECKING:
    from ..fetch.resolver import ResolveStats

Record = Dict[str, Any]


@dataclass
class HarvestResult:
    """Outcome of one pipeline run.

    Attributes:
        name: Artifact name the records were saved under
        path: Path of the written JSON artifact
        records: The extracted records, in page and document order
        stats: Resolver counters for the run (cache hits, fetches, failures)
        skipped: URLs that produced no content and were skipped
    """
    name: str
    path: Path
    records: list[Record] = field(default_factory=list)
    stats: ResolveStats | None = None
    skipped: list[str] = field(default_factory=list)
