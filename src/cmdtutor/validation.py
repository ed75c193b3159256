"""Attempt detection and pass/fail verdicts for typed commands."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from .executor import CommandResult
from .models import Task

CheckFn = Callable[[str], CommandResult]


@dataclass(frozen=True)
class Verdict:
    """Validation outcome for one typed command."""

    attempted: bool
    accepted: bool
    output_valid: bool | None = None
    state_valid: bool = True
    check_result: CommandResult | None = None


def is_attempt(task: Task, typed: str) -> bool:
    """Return whether `typed` targets `task`.

    Strict tasks only accept the literal expected command. Otherwise any
    command whose first token occurs in the expected command counts.
    """
    if typed == task.expected_command:
        return True
    if task.strict_command_match:
        return False
    tokens = typed.split()
    return bool(tokens) and tokens[0] in task.expected_command


def output_matches(expected: str, output: str) -> bool:
    """Match trimmed combined output; an empty expectation requires empty output."""
    if expected == "":
        return output == ""
    return expected in output


def judge(task: Task, typed: str, result: CommandResult, check: CheckFn) -> Verdict:
    """Decide whether `result` of running `typed` satisfies `task`.

    `check` runs the task's check command and is only called for attempts.
    An attempt that could not be started or was interrupted is rejected.
    """
    if not is_attempt(task, typed):
        return Verdict(attempted=False, accepted=False)
    if result.error is not None:
        # The command never ran to completion.
        return Verdict(attempted=True, accepted=False)

    output_valid = None
    if task.output_includes is not None:
        output_valid = output_matches(task.output_includes, result.combined_output)

    check_result = None
    state_valid = True
    if task.check_command:
        check_result = check(task.check_command)
        state_valid = check_result.ok

    if task.is_output_based:
        accepted = (result.ok or task.non_zero_okay) and bool(output_valid)
    else:
        # An empty expectation still forbids output on state-based tasks.
        accepted = state_valid and output_valid is not False

    return Verdict(
        attempted=True,
        accepted=accepted,
        output_valid=output_valid,
        state_valid=state_valid,
        check_result=check_result,
    )
