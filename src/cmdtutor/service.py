"""Application service for task progression and command attempts."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from .commands import CommandKind, parse_command
from .content_loader import load_tasks
from .executor import CommandResult, OutputMode, ShellRunner
from .logging import get_logger
from .models import SessionContext, Task
from .progress import ProgressStore
from .validation import Verdict, judge
from .workspace import clear_workspace, ensure_workspace

logger = get_logger("service")


class InvalidTargetError(ValueError):
    """Raised when a fast-forward target is out of range or not ahead."""


@dataclass(frozen=True)
class AttemptOutcome:
    """Result of running one typed command against the current task."""

    result: CommandResult
    verdict: Verdict
    completed: bool = False


@dataclass(frozen=True)
class SkipOutcome:
    """Result of skipping one task by running its expected command."""

    task_number: int
    task: Task
    result: CommandResult
    completed: bool


@dataclass(frozen=True)
class ReplayStep:
    """One expected command replayed during fast-forward."""

    task_number: int
    task: Task
    result: CommandResult


@dataclass(frozen=True)
class DirectoryChange:
    """Result of a successful `cd`."""

    path: Path
    advanced: bool
    completed: bool


class TutorService:
    """Coordinates the task catalog, session state, and persisted progress."""

    def __init__(
        self,
        progress_path: Path | str,
        workspace: Path,
        tasks: list[Task] | None = None,
        runner: ShellRunner | None = None,
    ) -> None:
        """Initialize service; the catalog defaults to the bundled tasks."""
        self.tasks = tasks if tasks is not None else load_tasks()
        self.workspace = Path(workspace)
        self.progress = ProgressStore(progress_path, len(self.tasks))
        self.runner = runner if runner is not None else ShellRunner()
        self.session = SessionContext(cwd=self.workspace)

    @property
    def task_count(self) -> int:
        return len(self.tasks)

    @property
    def task_number(self) -> int:
        """1-based number of the current task."""
        return self.session.task_index + 1

    @property
    def completed(self) -> bool:
        return self.session.task_index >= self.task_count

    @property
    def current_task(self) -> Task | None:
        if self.completed:
            return None
        return self.tasks[self.session.task_index]

    def prepare_workspace(self) -> bool:
        """Create the workspace if needed and start the session inside it."""
        created = ensure_workspace(self.workspace)
        self.session.cwd = self.workspace
        return created

    def resume(self) -> int:
        """Restore the saved index into the session and return it."""
        self.session.task_index = self.progress.load()
        return self.session.task_index

    def save(self) -> None:
        """Persist the current index, e.g. before leaving the session."""
        if not self.completed:
            self.progress.save(self.session.task_index)

    def advance(self) -> bool:
        """Move to the next task; return whether the catalog is now complete."""
        return self._move_to(self.session.task_index + 1)

    def _move_to(self, index: int) -> bool:
        self.session.task_index = index
        if self.completed:
            self.progress.clear()
            logger.info("All tasks completed", task_count=self.task_count)
            return True
        self.progress.save(index)
        return False

    def _require_task(self) -> Task:
        task = self.current_task
        if task is None:
            raise RuntimeError("All tasks are already completed.")
        return task

    def attempt(self, command: str) -> AttemptOutcome:
        """Run a typed command and advance when it satisfies the current task."""
        task = self._require_task()
        result = self.runner.run(command, self.session.cwd, OutputMode.CAPTURE)
        verdict = judge(task, command, result, self._check_state)
        if not verdict.accepted:
            return AttemptOutcome(result=result, verdict=verdict)
        logger.info("Task accepted", task_number=self.task_number, command=command)
        return AttemptOutcome(result=result, verdict=verdict, completed=self.advance())

    def _check_state(self, check_command: str) -> CommandResult:
        return self.runner.run(check_command, self.session.cwd, OutputMode.SILENT)

    def skip(self) -> SkipOutcome:
        """Run the expected command for its side effects, then advance regardless."""
        task = self._require_task()
        number = self.task_number
        result = self._replay(task, OutputMode.INHERIT)
        if not result.ok:
            logger.warning("Skipped task command failed", task_number=number, error=result.message)
        logger.info("Task skipped", task_number=number)
        return SkipOutcome(task_number=number, task=task, result=result, completed=self.advance())

    def check_target(self, target: int) -> None:
        """Raise InvalidTargetError unless 1-based `target` is a later task."""
        if not (1 <= target <= self.task_count):
            raise InvalidTargetError(f"Invalid task number. Choose a task from 1 to {self.task_count}, e.g. go 4.")
        if self.session.task_index >= target - 1:
            raise InvalidTargetError(f"You're already at or past Task {target}.")

    def fast_forward(
        self,
        target: int,
        on_step: Callable[[ReplayStep], None] | None = None,
    ) -> list[ReplayStep]:
        """Replay every task before 1-based `target` in order, then jump to it.

        Per-step failures are reported but never stop the replay.
        """
        self.check_target(target)
        start = self.session.task_index
        end = target - 1
        steps: list[ReplayStep] = []
        for index in range(start, end):
            task = self.tasks[index]
            result = self._replay(task, OutputMode.SILENT)
            if not result.ok:
                logger.warning("Replay step failed", task_number=index + 1, error=result.message)
            step = ReplayStep(task_number=index + 1, task=task, result=result)
            steps.append(step)
            if on_step is not None:
                on_step(step)

        self._move_to(end)
        logger.info("Fast-forwarded", from_task=start + 1, to_task=target)
        return steps

    def _replay(self, task: Task, mode: OutputMode) -> CommandResult:
        """Run an expected command; `cd` is applied to the session instead of a subshell."""
        parsed = parse_command(task.expected_command)
        if parsed.kind is not CommandKind.CD:
            return self.runner.run(task.expected_command, self.session.cwd, mode)
        try:
            self._change_cwd(parsed.argument)
        except OSError as exc:
            return CommandResult(command=task.expected_command, returncode=1, stderr=str(exc))
        return CommandResult(command=task.expected_command, returncode=0)

    def change_directory(self, target: str) -> DirectoryChange:
        """Change the session directory; success completes a pending task."""
        path = self._change_cwd(target)
        if self.current_task is None:
            return DirectoryChange(path=path, advanced=False, completed=True)
        logger.info("Task accepted", task_number=self.task_number, command=f"cd {target}")
        return DirectoryChange(path=path, advanced=True, completed=self.advance())

    def _change_cwd(self, target: str) -> Path:
        path = (self.session.cwd / Path(target).expanduser()).resolve()
        if not path.exists():
            raise FileNotFoundError(f"Directory not found: {target}")
        if not path.is_dir():
            raise NotADirectoryError(f"Not a directory: {target}")
        self.session.cwd = path
        return path

    def reset(self) -> None:
        """Clear the workspace and progress and return to the first task.

        Raises OSError if the workspace cannot be cleared; state is unchanged then.
        """
        ensure_workspace(self.workspace)
        clear_workspace(self.workspace)
        self.progress.clear()
        self.session.task_index = 0
        self.session.cwd = self.workspace
        logger.info("Progress reset")
