"""JSON file persistence for the current task index."""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path

from .logging import get_logger

INDEX_KEY = "currentTaskIndex"

logger = get_logger("progress")


class ProgressStore:
    """File access layer for learner progress."""

    def __init__(self, path: Path | str, task_count: int) -> None:
        """Initialize store for a catalog of `task_count` tasks."""
        self.path = Path(path)
        self.task_count = task_count

    @property
    def exists(self) -> bool:
        """Return whether a progress record is on disk."""
        return self.path.exists()

    def load(self) -> int:
        """Return the saved index, or 0 when absent, malformed, or out of range."""
        if not self.path.exists():
            return 0
        try:
            raw: object = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Could not read progress record", path=str(self.path), error=str(exc))
            return 0

        index = raw.get(INDEX_KEY) if isinstance(raw, dict) else None
        if isinstance(index, bool) or not isinstance(index, int):
            logger.warning("Malformed progress record", path=str(self.path))
            return 0
        if not (0 <= index < self.task_count):
            logger.warning("Progress index out of range", index=index, task_count=self.task_count)
            return 0
        return index

    def save(self, index: int) -> None:
        """Atomically replace the record with `index`."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump({INDEX_KEY: index}, handle)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def clear(self) -> None:
        """Remove the record if present."""
        self.path.unlink(missing_ok=True)
