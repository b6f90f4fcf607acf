"""
JSON persistence of extracted records.

Each artifact is written to <root>/<name>.json and replaces any earlier
artifact of the same name. Unlike cache writes, persistence failures are
fatal: they surface as PersistError.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Sequence

from ..core.errors import PersistError
from ..core.types import Record
from ..logging_utils import log_event

logger = logging.getLogger(__name__)


class ResultStore:
    """Writes and reads named record artifacts under a results directory."""

    def __init__(self, root: Path, indent: int | None = 2):
        self.root = Path(root)
        self.indent = indent

    def path_for(self, name: str) -> Path:
        if not name or name in {".", ".."} or "/" in name or "\\" in name:
            raise ValueError(f"Invalid artifact name: {name!r}")
        return self.root / f"{name}.json"

    async def save(self, name: str, records: Sequence[Record]) -> Path:
        """Serialize records to <root>/<name>.json, overwriting.

        Raises:
            ValueError: If name is empty or contains a path separator
            PersistError: If the records cannot be serialized or written
        """
        path = self.path_for(name)
        try:
            payload = json.dumps(list(records), ensure_ascii=False, indent=self.indent)
        except (TypeError, ValueError) as exc:
            raise PersistError(f"Cannot serialize records for {name}: {exc}") from exc
        await asyncio.to_thread(self._write_sync, path, payload)
        log_event(
            logger,
            f"Saved {len(records)} records to {path}",
            event="artifact_saved",
            artifact=name,
            path=str(path),
            total=len(records),
        )
        return path

    async def load(self, name: str) -> list[Any]:
        """Read an artifact back.

        Raises:
            PersistError: If the artifact is missing or not valid JSON
        """
        path = self.path_for(name)
        return await asyncio.to_thread(self._load_sync, path)

    def _write_sync(self, path: Path, payload: str) -> None:
        tmp_name: str | None = None
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.root, prefix=".tmp-", suffix=".part")
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
            os.chmod(tmp_name, 0o644)
            os.replace(tmp_name, path)
            tmp_name = None
        except (OSError, UnicodeError) as exc:
            raise PersistError(f"Cannot write {path}: {exc}") from exc
        finally:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)

    def _load_sync(self, path: Path) -> list[Any]:
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise PersistError(f"Cannot read {path}: {exc}") from exc
