import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

from rich.markup import escape

import cmdtutor.main as main
from cmdtutor import executor
from cmdtutor.executor import CommandResult
from cmdtutor.models import Task
from cmdtutor.service import TutorService


def _feed(lines: list[str]) -> Callable[[str], str]:
    """Return an input function that ends the session with EOF once lines run out."""
    pending = iter(lines)

    def input_fn(_: str) -> str:
        try:
            return next(pending)
        except StopIteration:
            raise EOFError from None

    return input_fn


def _play(monkeypatch: Any, service: TutorService, lines: list[str]) -> tuple[int, list[str]]:
    monkeypatch.setattr(main, "_service", lambda: service)
    outputs: list[str] = []
    code = main.tutor_shell(input_fn=_feed(lines), print_fn=outputs.append)
    return code, outputs


def _contains(outputs: list[str], text: str) -> bool:
    return any(text in line for line in outputs)


def test_run_enters_tutor_shell(monkeypatch: Any) -> None:
    monkeypatch.setattr(main, "tutor_shell", lambda: 0)
    assert main.run([]) == 0


def test_main_entry_exits_with_run_code(monkeypatch: Any) -> None:
    monkeypatch.setattr(main, "run", lambda: 0)
    try:
        main.main_entry()
        raise AssertionError("Expected SystemExit.")
    except SystemExit as exc:
        assert exc.code == 0


def test_scenario_completes_catalog(monkeypatch: Any, make_service, three_tasks, progress_path: Path) -> None:
    service = make_service(three_tasks)
    code, outputs = _play(monkeypatch, service, ["mkdir foo", "ls", "rm -rf nonexistent"])
    assert code == 0
    assert _contains(outputs, "Found existing 'workspace' folder.")
    assert _contains(outputs, "Task 1/3: Make foo")
    assert _contains(outputs, "Task 3/3: Remove missing")
    assert _contains(outputs, "Congratulations! You've completed all tasks.")
    assert not progress_path.exists()


def test_creates_missing_workspace(monkeypatch: Any, tmp_path: Path, three_tasks) -> None:
    service = TutorService(tmp_path / "progress.json", tmp_path / "fresh", tasks=three_tasks)
    code, outputs = _play(monkeypatch, service, ["exit"])
    assert code == 0
    assert _contains(outputs, "Created 'fresh' folder.")
    assert (tmp_path / "fresh").is_dir()


def test_exit_saves_and_relaunch_resumes(
    monkeypatch: Any, workspace: Path, progress_path: Path, three_tasks
) -> None:
    first = TutorService(progress_path, workspace, tasks=three_tasks)
    code, outputs = _play(monkeypatch, first, ["mkdir foo", "exit"])
    assert code == 0
    assert _contains(outputs, "Progress saved.")
    assert json.loads(progress_path.read_text(encoding="utf-8")) == {"currentTaskIndex": 1}

    second = TutorService(progress_path, workspace, tasks=three_tasks)
    _, outputs = _play(monkeypatch, second, [])
    assert _contains(outputs, "Resuming from Task 2")
    assert _contains(outputs, "Task 2/3: List")
    assert progress_path.exists()


def test_interrupt_at_prompt_behaves_like_exit(monkeypatch: Any, make_service, three_tasks, progress_path) -> None:
    service = make_service(three_tasks)
    monkeypatch.setattr(main, "_service", lambda: service)

    def interrupt(_: str) -> str:
        raise KeyboardInterrupt

    outputs: list[str] = []
    assert main.tutor_shell(input_fn=interrupt, print_fn=outputs.append) == 0
    assert _contains(outputs, "Progress saved.")
    assert progress_path.exists()


def test_show_and_explain(monkeypatch: Any, make_service) -> None:
    tasks = [
        Task(description="a", expected_command="pwd", explanation="Prints [the] directory."),
        Task(description="b", expected_command="ls"),
    ]
    service = make_service(tasks)
    _, outputs = _play(monkeypatch, service, ["show", "explain", "skip", "explain"])
    assert _contains(outputs, "The correct command is: [bold]pwd[/bold]")
    assert _contains(outputs, "Now try running it below:")
    assert _contains(outputs, "Explanation for 'pwd':")
    assert _contains(outputs, "Prints \\[the] directory.")
    assert _contains(outputs, "No explanation available for this task yet.")
    assert service.task_number == 2


def test_rejected_attempts_report_reason(monkeypatch: Any, make_service) -> None:
    tasks = [
        Task(description="list", expected_command="ls", output_includes="foo"),
        Task(description="mk", expected_command="mkdir bar", check_command="test -d bar"),
    ]
    service = make_service(tasks)
    _, outputs = _play(monkeypatch, service, ["ls", "ls missing-dir"])
    assert _contains(outputs, "Output did not match expected result.")
    assert _contains(outputs, "Command failed:")
    assert _contains(outputs, "Try again:")
    assert service.task_number == 1


def test_failed_check_reports_validation(monkeypatch: Any, make_service) -> None:
    tasks = [Task(description="mk", expected_command="mkdir bar", check_command="test -d bar")]
    service = make_service(tasks)
    _, outputs = _play(monkeypatch, service, ["mkdir -p other"])
    assert _contains(outputs, "Validation failed:")
    assert not _contains(outputs, "Output did not match")
    assert service.task_number == 1


def test_non_attempt_prints_output_and_reprompts(monkeypatch: Any, make_service) -> None:
    tasks = [Task(description="mk", expected_command="mkdir bar")]
    service = make_service(tasks)
    _, outputs = _play(monkeypatch, service, ["echo hello [x]"])
    assert "hello \\[x]" in outputs
    assert not _contains(outputs, "Try again:")
    assert service.task_number == 1


def test_strict_task_rejects_other_commands(monkeypatch: Any, make_service) -> None:
    tasks = [Task(description="strict", expected_command="ls missing.txt", strict_command_match=True)]
    service = make_service(tasks)
    _, outputs = _play(monkeypatch, service, ["ls"])
    assert _contains(outputs, "That's not the expected command.")
    assert _contains(outputs, "ls missing.txt")
    assert service.task_number == 1


def test_cd_success_and_failure(monkeypatch: Any, make_service, workspace: Path) -> None:
    (workspace / "sub").mkdir()
    tasks = [Task(description="go in", expected_command="cd sub"), Task(description="next", expected_command="ls")]
    service = make_service(tasks)
    _, outputs = _play(monkeypatch, service, ["cd missing", "cd sub"])
    assert _contains(outputs, "Directory not found: missing")
    assert _contains(outputs, "Changed directory to:")
    assert _contains(outputs, "Task completed successfully.")
    assert service.session.cwd == (workspace / "sub").resolve()
    assert service.task_number == 2


def test_go_fast_forwards_and_rejects_bad_targets(monkeypatch: Any, make_service, recording_runner) -> None:
    tasks = [Task(description=f"t{i}", expected_command=f"echo {i}") for i in range(1, 5)]
    recording_runner.results["echo 2"] = CommandResult(command="echo 2", returncode=4)
    service = make_service(tasks, recording_runner)
    _, outputs = _play(monkeypatch, service, ["go x", "go 9", "go 3", "go 2", "go 3"])
    assert _contains(outputs, "Invalid task number. Use: go 4")
    assert _contains(outputs, "Invalid task number. Choose a task from 1 to 4")
    assert _contains(outputs, "Fast-forwarding from Task 1 to Task 3...")
    assert _contains(outputs, "Skipped Task 2 due to error:")
    assert _contains(outputs, "Task 3/4: t3")
    assert _contains(outputs, "You're already at or past Task 2.")
    assert _contains(outputs, "You're already at or past Task 3.")
    assert recording_runner.commands == ["echo 1", "echo 2"]
    assert service.task_number == 3


def test_skip_reports_expected_failure(monkeypatch: Any, make_service, recording_runner, progress_path) -> None:
    tasks = [Task(description="fails", expected_command="false", non_zero_okay=True)]
    recording_runner.results["false"] = CommandResult(command="false", returncode=1)
    service = make_service(tasks, recording_runner)
    code, outputs = _play(monkeypatch, service, ["skip"])
    assert code == 0
    assert _contains(outputs, "Skipping Task 1...")
    assert _contains(outputs, "Task 1 exited with code 1, but that's expected.")
    assert _contains(outputs, "Congratulations!")
    assert not progress_path.exists()


def test_reset_clears_and_restarts(monkeypatch: Any, make_service, three_tasks, workspace, progress_path) -> None:
    service = make_service(three_tasks)
    _, outputs = _play(monkeypatch, service, ["mkdir foo", "reset", "exit"])
    assert _contains(outputs, "All data cleared. Starting from the beginning...")
    assert list(workspace.iterdir()) == []
    assert json.loads(progress_path.read_text(encoding="utf-8")) == {"currentTaskIndex": 0}


def test_reset_failure_is_reported(monkeypatch: Any, make_service, three_tasks) -> None:
    service = make_service(three_tasks)

    def fail() -> None:
        raise PermissionError("denied")

    monkeypatch.setattr(service, "reset", fail)
    code, outputs = _play(monkeypatch, service, ["reset"])
    assert code == 0
    assert _contains(outputs, "Failed to reset")
    assert _contains(outputs, "Task 1/3: Make foo")


def test_empty_catalog_finishes_immediately(monkeypatch: Any, make_service) -> None:
    service = make_service([])
    code, outputs = _play(monkeypatch, service, ["ls"])
    assert code == 0
    assert _contains(outputs, "Congratulations!")


def test_blank_line_is_ignored(monkeypatch: Any, make_service, recording_runner) -> None:
    service = make_service([Task(description="t", expected_command="ls")], recording_runner)
    _play(monkeypatch, service, ["", "   "])
    assert recording_runner.calls == []


def test_go_reads_only_the_first_token(monkeypatch: Any, make_service, recording_runner) -> None:
    tasks = [Task(description=f"t{i}", expected_command=f"echo {i}") for i in range(1, 5)]
    service = make_service(tasks, recording_runner)
    _, outputs = _play(monkeypatch, service, ["go 3 please"])
    assert not _contains(outputs, "Invalid task number")
    assert _contains(outputs, "Task 3/4: t3")
    assert service.task_number == 3


def test_interrupted_command_returns_to_prompt(monkeypatch: Any, make_service, progress_path: Path) -> None:
    def interrupted(*args: Any, **kwargs: Any) -> Any:
        raise KeyboardInterrupt

    monkeypatch.setattr(executor.subprocess, "run", interrupted)
    service = make_service([Task(description="wait", expected_command="sleep 5")])
    code, outputs = _play(monkeypatch, service, ["sleep 5", "exit"])
    assert code == 0
    assert _contains(outputs, "Command failed: Interrupted")
    assert _contains(outputs, "Try again:")
    assert _contains(outputs, "Progress saved.")
    assert service.task_number == 1
    assert json.loads(progress_path.read_text(encoding="utf-8")) == {"currentTaskIndex": 0}


def test_console_leaves_emoji_codes_alone(capsys: Any) -> None:
    main._print(escape(":smile: [done]"))
    assert ":smile: [done]" in capsys.readouterr().out
