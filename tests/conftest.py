from __future__ import annotations

import sys
from collections.abc import Callable
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from cmdtutor.executor import CommandResult, OutputMode, ShellRunner  # noqa: E402
from cmdtutor.models import Task  # noqa: E402
from cmdtutor.service import TutorService  # noqa: E402


class RecordingRunner(ShellRunner):
    """Runner double that records calls and returns scripted results."""

    def __init__(self, results: dict[str, CommandResult] | None = None) -> None:
        self.results = dict(results or {})
        self.calls: list[tuple[str, Path, OutputMode]] = []

    def run(self, command: str, cwd: Path, mode: OutputMode = OutputMode.CAPTURE) -> CommandResult:
        self.calls.append((command, cwd, mode))
        return self.results.get(command, CommandResult(command=command, returncode=0))

    @property
    def commands(self) -> list[str]:
        return [call[0] for call in self.calls]


@pytest.fixture
def recording_runner() -> RecordingRunner:
    return RecordingRunner()


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    path = tmp_path / "workspace"
    path.mkdir()
    return path


@pytest.fixture
def progress_path(tmp_path: Path) -> Path:
    return tmp_path / "state" / "progress.json"


@pytest.fixture
def make_service(workspace: Path, progress_path: Path) -> Callable[..., TutorService]:
    def factory(tasks: list[Task], runner: ShellRunner | None = None) -> TutorService:
        return TutorService(progress_path=progress_path, workspace=workspace, tasks=tasks, runner=runner)

    return factory


@pytest.fixture
def three_tasks() -> list[Task]:
    return [
        Task(description="Make foo", expected_command="mkdir foo"),
        Task(description="List", expected_command="ls", output_includes="foo"),
        Task(
            description="Remove missing",
            expected_command="rm -rf nonexistent",
            output_includes="",
            non_zero_okay=True,
        ),
    ]
