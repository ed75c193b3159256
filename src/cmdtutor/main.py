"""CLI entrypoint for the interactive shell command tutor."""

from __future__ import annotations

import argparse
from collections.abc import Callable
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from .commands import CommandKind, ParsedCommand, parse_command
from .completion import install_completer
from .config import get_settings
from .content_loader import load_tasks, load_tasks_from_file
from .executor import CommandResult
from .logging import setup_logging
from .models import Task
from .service import InvalidTargetError, ReplayStep, TutorService

InputFn = Callable[[str], str]
PrintFn = Callable[[str], None]
PROMPT = "> "
HINTS = (
    "[yellow]Type your command below and press Enter.[/yellow]",
    "[dim]Type 'show' to reveal the correct command.[/dim]",
    "[dim]Type 'explain' to learn what the current command does.[/dim]",
    "[dim]Type 'skip' to skip the current task, or 'go <n>' to jump ahead to task n.[/dim]",
    "[dim]Type 'reset' to clear all progress and start fresh.[/dim]",
    "[dim]Type 'exit' anytime to quit. Your progress is saved.[/dim]",
    "[dim]You can also run any command to inspect your environment (list files, check your location).[/dim]",
)

_console = Console(highlight=False, emoji=False)


def _print(text: str) -> None:
    """Print one line of rich markup."""
    _console.print(text)


def _service() -> TutorService:
    """Create app service from settings, with the workspace under the invocation directory."""
    settings = get_settings()
    tasks = load_tasks_from_file(settings.catalog_path) if settings.catalog_path is not None else load_tasks()
    workspace = Path.cwd() / settings.workspace_name
    return TutorService(progress_path=settings.progress_path, workspace=workspace, tasks=tasks)


def run(argv: list[str] | None = None) -> int:
    """Run the CLI application."""
    parser = argparse.ArgumentParser(prog="cmdtutor", description="Learn shell commands by running them")
    _ = parser.parse_args(argv)
    setup_logging(get_settings().log_level)
    return tutor_shell()


def tutor_shell(input_fn: InputFn = input, print_fn: PrintFn = _print) -> int:
    """Run the interactive task loop until exit or completion."""
    service = _service()
    workspace_name = escape(service.workspace.name)
    if service.prepare_workspace():
        print_fn(f"[green]Created '{workspace_name}' folder.[/green]")
    else:
        print_fn(f"[blue]Found existing '{workspace_name}' folder.[/blue]")
    print_fn(f"[green]Working inside: {escape(str(service.session.cwd))}[/green]")
    if input_fn is input:
        install_completer(lambda: service.session.cwd)

    if service.resume() > 0:
        print_fn(f"[blue]Resuming from Task {service.task_number}[/blue]")
    if service.completed:
        _congratulate(print_fn)
        return 0

    _show_task(service, print_fn)
    while True:
        try:
            line = input_fn(PROMPT)
        except (EOFError, KeyboardInterrupt):
            line = "exit"
        if not _handle_line(service, parse_command(line), print_fn):
            return 0


def _handle_line(service: TutorService, command: ParsedCommand, print_fn: PrintFn) -> bool:
    """Dispatch one parsed input line; return whether the session continues."""
    if command.kind is CommandKind.EXIT:
        service.save()
        print_fn("\n[blue]Progress saved. See you next time![/blue]")
        return False
    if command.kind is CommandKind.RESET:
        _reset_flow(service, print_fn)
        return True
    if command.kind is CommandKind.SHOW:
        _show_answer_flow(service, print_fn)
        return True
    if command.kind is CommandKind.SKIP:
        return _skip_flow(service, print_fn)
    if command.kind is CommandKind.EXPLAIN:
        _explain_flow(service, print_fn)
        return True
    if command.kind is CommandKind.CD:
        return _cd_flow(service, command.argument, print_fn)
    if command.kind is CommandKind.GO:
        _go_flow(service, command.argument, print_fn)
        return True
    if command.kind is CommandKind.EMPTY:
        return True
    return _attempt_flow(service, command.argument, print_fn)


def _show_task(service: TutorService, print_fn: PrintFn) -> None:
    """Print the current task and the keyword hints."""
    task = service.current_task
    if task is None:
        return
    heading = f"Task {service.task_number}/{service.task_count}: {escape(task.description)}"
    print_fn(f"\n[bold green]{heading}[/bold green]")
    _print_hints(print_fn)


def _print_hints(print_fn: PrintFn) -> None:
    for hint in HINTS:
        print_fn(hint)


def _retry(print_fn: PrintFn) -> None:
    print_fn("\n[yellow]Try again:[/yellow]")
    _print_hints(print_fn)


def _congratulate(print_fn: PrintFn) -> None:
    print_fn("\n[bold green]Congratulations! You've completed all tasks.[/bold green]")


def _after_advance(service: TutorService, completed: bool, print_fn: PrintFn) -> bool:
    """Show the next task or finish; return whether the session continues."""
    if completed:
        _congratulate(print_fn)
        return False
    _show_task(service, print_fn)
    return True


def _reset_flow(service: TutorService, print_fn: PrintFn) -> None:
    """Clear workspace files and progress, then restart from task 1."""
    try:
        service.reset()
    except OSError as exc:
        print_fn(f"[red]Failed to reset ({escape(str(exc))}). You may need to delete files manually.[/red]")
        _show_task(service, print_fn)
        return
    print_fn("[red]Cleared all files in the workspace.[/red]")
    print_fn("[red]Progress reset.[/red]")
    print_fn("\n[blue]All data cleared. Starting from the beginning...[/blue]")
    _show_task(service, print_fn)


def _show_answer_flow(service: TutorService, print_fn: PrintFn) -> None:
    task = service.current_task
    if task is None:
        return
    print_fn(f"[cyan]The correct command is: [bold]{escape(task.expected_command)}[/bold][/cyan]")
    print_fn("[yellow]Now try running it below:[/yellow]")
    _print_hints(print_fn)


def _explain_flow(service: TutorService, print_fn: PrintFn) -> None:
    task = service.current_task
    if task is None:
        return
    if task.explanation:
        print_fn(f"[cyan]Explanation for '{escape(task.expected_command)}':[/cyan]")
        print_fn(escape(task.explanation))
    else:
        print_fn("[yellow]No explanation available for this task yet.[/yellow]")


def _skip_flow(service: TutorService, print_fn: PrintFn) -> bool:
    """Run the expected command so its effects exist, then move on."""
    task = service.current_task
    if task is None:
        return False
    print_fn(f"[yellow]Skipping Task {service.task_number}...[/yellow]")
    print_fn(f"[dim]Running: {escape(task.expected_command)}[/dim]")
    outcome = service.skip()
    if not outcome.result.ok:
        _report_replay_failure(outcome.task_number, outcome.task, outcome.result, print_fn)
    return _after_advance(service, outcome.completed, print_fn)


def _report_replay_failure(task_number: int, task: Task, result: CommandResult, print_fn: PrintFn) -> None:
    if task.non_zero_okay:
        print_fn(f"[dim]Task {task_number} exited with code {result.returncode}, but that's expected.[/dim]")
    else:
        print_fn(f"[red]Skipped Task {task_number} due to error: {escape(result.message)}[/red]")


def _cd_flow(service: TutorService, target: str, print_fn: PrintFn) -> bool:
    """Change the session directory; a successful cd completes the current task."""
    try:
        change = service.change_directory(target)
    except OSError:
        print_fn(f"[red]Directory not found: {escape(target)}[/red]")
        _retry(print_fn)
        return True
    print_fn(f"[green]Changed directory to: {escape(str(change.path))}[/green]")
    if not change.advanced:
        _retry(print_fn)
        return True
    print_fn("[green]Task completed successfully.[/green]")
    return _after_advance(service, change.completed, print_fn)


def _go_flow(service: TutorService, argument: str, print_fn: PrintFn) -> None:
    """Fast-forward to a later task by replaying the expected commands before it."""
    tokens = argument.split()
    try:
        if not tokens:
            raise ValueError("missing task number")
        target = int(tokens[0])
        service.check_target(target)
    except InvalidTargetError as exc:
        print_fn(f"[red]{escape(str(exc))}[/red]")
        _retry(print_fn)
        return
    except ValueError:
        print_fn("[red]Invalid task number. Use: go 4[/red]")
        _retry(print_fn)
        return

    print_fn(f"[blue]Fast-forwarding from Task {service.task_number} to Task {target}...[/blue]")

    def on_step(step: ReplayStep) -> None:
        print_fn(f"[dim]Running: {escape(step.task.expected_command)}[/dim]")
        if not step.result.ok:
            _report_replay_failure(step.task_number, step.task, step.result, print_fn)

    service.fast_forward(target, on_step=on_step)
    _show_task(service, print_fn)


def _attempt_flow(service: TutorService, command: str, print_fn: PrintFn) -> bool:
    """Run a typed command and judge it against the current task."""
    task = service.current_task
    if task is None:
        return False
    outcome = service.attempt(command)
    result = outcome.result
    if result.stdout.strip():
        print_fn(escape(result.stdout.strip()))
    if result.stderr.strip():
        print_fn(f"[yellow]{escape(result.stderr.strip())}[/yellow]")

    verdict = outcome.verdict
    if verdict.accepted:
        print_fn("[green]Task completed successfully.[/green]")
        return _after_advance(service, outcome.completed, print_fn)

    if verdict.attempted:
        check = verdict.check_result
        if check is not None and not check.ok:
            print_fn(f"[red]Validation failed: {escape(check.message)}[/red]")
        if not result.ok:
            detail = result.stderr.strip() or result.message
            print_fn(f"[red]Command failed: {escape(detail)}[/red]")
        elif check is None or check.ok:
            print_fn("[red]Output did not match expected result.[/red]")
        _retry(print_fn)
        return True

    if task.strict_command_match:
        print_fn(
            "[red]That's not the expected command. This task requires: "
            f"[bold]{escape(task.expected_command)}[/bold][/red]"
        )
        print_fn("[dim]Type 'show' to reveal the correct command.[/dim]")
    return True


def main_entry() -> None:
    """Console script entrypoint."""
    raise SystemExit(run())


if __name__ == "__main__":  # pragma: no cover
    main_entry()
