"""Resolve one input line into a reserved keyword or a shell attempt."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class CommandKind(Enum):
    """Kinds of input the interpreter dispatches on."""

    EXIT = "exit"
    RESET = "reset"
    SHOW = "show"
    SKIP = "skip"
    EXPLAIN = "explain"
    CD = "cd"
    GO = "go"
    EMPTY = "empty"
    ATTEMPT = "attempt"


KEYWORDS = {
    "exit": CommandKind.EXIT,
    "reset": CommandKind.RESET,
    "show": CommandKind.SHOW,
    "skip": CommandKind.SKIP,
    "explain": CommandKind.EXPLAIN,
}


@dataclass(frozen=True)
class ParsedCommand:
    """One input line after keyword resolution."""

    kind: CommandKind
    argument: str = ""


def parse_command(line: str) -> ParsedCommand:
    """Classify a line; first match wins, anything unreserved is an attempt."""
    trimmed = line.strip()
    if not trimmed:
        return ParsedCommand(CommandKind.EMPTY)
    lowered = trimmed.lower()

    keyword = KEYWORDS.get(lowered)
    if keyword is not None:
        return ParsedCommand(keyword)
    if trimmed.startswith("cd "):
        return ParsedCommand(CommandKind.CD, trimmed[3:].strip())
    if lowered.startswith("go "):
        return ParsedCommand(CommandKind.GO, trimmed[3:].strip())
    return ParsedCommand(CommandKind.ATTEMPT, trimmed)
