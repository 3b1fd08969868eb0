"""Flat-file record store: one JSON array per file.

Used for both ``activities.json`` and ``tasks.json``. Every operation
re-reads or rewrites the whole file. There is no locking, so concurrent
writers race and the last one wins.
"""

from __future__ import annotations

import json
import logging
import os
import uuid
from pathlib import Path
from typing import Any, Iterable

logger = logging.getLogger("mission_control.store")

ACTIVITIES_FILE = "activities.json"
TASKS_FILE = "tasks.json"


class JsonArrayStore:
    """A JSON array persisted to a single file."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> list[dict[str, Any]]:
        """Return the stored records. Missing, unreadable or corrupt files read as empty."""
        if not self._path.exists():
            return []
        try:
            with open(self._path, encoding="utf-8") as fh:
                data = json.load(fh)
        except (json.JSONDecodeError, UnicodeDecodeError, OSError) as exc:
            logger.warning("Unreadable record file %s, treating as empty: %s", self._path, exc)
            return []
        if not isinstance(data, list):
            logger.warning("Record file %s does not hold a JSON array, treating as empty", self._path)
            return []
        records = [r for r in data if isinstance(r, dict)]
        if len(records) != len(data):
            logger.warning("Skipping %d non-object entries in %s", len(data) - len(records), self._path)
        return records

    def save(self, records: Iterable[dict[str, Any]]) -> None:
        """Overwrite the file with *records*, creating parent directories first."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_name(f".{self._path.name}.{uuid.uuid4().hex[:8]}.tmp")
        try:
            with open(tmp, "w", encoding="utf-8") as fh:
                json.dump(list(records), fh, indent=2, ensure_ascii=False)
            os.replace(tmp, self._path)
        finally:
            tmp.unlink(missing_ok=True)
        logger.debug("Saved %s", self._path)
