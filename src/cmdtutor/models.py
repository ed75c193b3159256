"""Core domain models for the shell command tutor."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class Task:
    """One exercise in the catalog."""

    description: str
    expected_command: str
    check_command: str | None = None
    output_includes: str | None = None
    strict_command_match: bool = False
    non_zero_okay: bool = False
    explanation: str = ""

    @property
    def is_output_based(self) -> bool:
        """Return whether captured output decides the verdict."""
        return bool(self.output_includes)


@dataclass
class SessionContext:
    """Mutable per-session state shared by the interpreter and the harness."""

    cwd: Path
    task_index: int = 0
