"""Load the declarative task catalog from bundled or local JSON."""

from __future__ import annotations

import json
from importlib import resources
from pathlib import Path
from typing import Any

from .models import Task

CONTENT_PACKAGE = "cmdtutor.content"
CATALOG_FILE = "tasks.json"


def _task_from_dict(position: int, raw: dict[str, Any]) -> Task:
    """Build a task from raw JSON content."""
    if "description" not in raw:
        raise ValueError(f"Task {position} has no description.")
    expected = str(raw.get("expectedCommand", "")).strip()
    if not expected:
        raise ValueError(f"Task {position} has no expectedCommand.")

    check_command = raw.get("checkCommand")
    if check_command is not None:
        check_command = str(check_command).strip() or None
    output_includes = raw.get("outputIncludes")
    if output_includes is not None:
        output_includes = str(output_includes)

    return Task(
        description=str(raw["description"]),
        expected_command=expected,
        check_command=check_command,
        output_includes=output_includes,
        strict_command_match=bool(raw.get("strictCommandMatch", False)),
        non_zero_okay=bool(raw.get("nonZeroOkay", False)),
        explanation=str(raw.get("explanation", "")),
    )


def _tasks_from_list(raw: object) -> list[Task]:
    """Build the ordered task list from a decoded catalog."""
    if not isinstance(raw, list):
        raise ValueError("Task catalog root must be a JSON list.")
    tasks: list[Task] = []
    for position, item in enumerate(raw, start=1):
        if not isinstance(item, dict):
            raise ValueError(f"Task {position} must be a JSON object.")
        tasks.append(_task_from_dict(position, item))
    return tasks


def load_tasks() -> list[Task]:
    """Load the bundled catalog."""
    entry = resources.files(CONTENT_PACKAGE).joinpath(CATALOG_FILE)
    return _tasks_from_list(json.loads(entry.read_text(encoding="utf-8-sig")))


def load_tasks_from_file(path: Path) -> list[Task]:
    """Load a catalog from a local file."""
    return _tasks_from_list(json.loads(Path(path).read_text(encoding="utf-8-sig")))
