"""Shell command execution with captured, silent, or inherited output."""

from __future__ import annotations

import signal
import subprocess
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from .logging import get_logger

SPAWN_FAILED = -1

logger = get_logger("executor")


class OutputMode(str, Enum):
    """How a child command's stdout/stderr are handled."""

    CAPTURE = "capture"
    SILENT = "silent"
    INHERIT = "inherit"


@dataclass(frozen=True)
class CommandResult:
    """Outcome of one shell command."""

    command: str
    returncode: int
    stdout: str = ""
    stderr: str = ""
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.returncode == 0

    @property
    def combined_output(self) -> str:
        """Trimmed stdout followed by trimmed stderr."""
        return self.stdout.strip() + self.stderr.strip()

    @property
    def message(self) -> str:
        """Human-readable failure description, empty on success."""
        if self.error is not None:
            return self.error
        if self.returncode == 0:
            return ""
        text = f"Command '{self.command}' exited with code {self.returncode}"
        details = self.stderr.strip()
        return f"{text}: {details}" if details else text


class ShellRunner:
    """Run command strings through the system shell, one at a time."""

    def run(self, command: str, cwd: Path, mode: OutputMode = OutputMode.CAPTURE) -> CommandResult:
        """Run `command` in `cwd` and wait for it to exit.

        Commands go through a shell so catalog entries may use built-ins,
        redirection, and operators. Spawn failures and Ctrl-C are returned, not
        raised. `subprocess.run` kills the child before an interrupt reaches us.
        """
        logger.debug("Running command", command=command, cwd=str(cwd), mode=mode.value)
        if mode is OutputMode.CAPTURE:
            streams = {"stdout": subprocess.PIPE, "stderr": subprocess.PIPE}
        elif mode is OutputMode.SILENT:
            streams = {"stdout": subprocess.DEVNULL, "stderr": subprocess.DEVNULL}
        else:
            streams = {"stdout": None, "stderr": None}

        try:
            completed = subprocess.run(
                command,
                shell=True,
                cwd=cwd,
                stdin=subprocess.DEVNULL if mode is not OutputMode.INHERIT else None,
                check=False,
                **streams,
            )
        except OSError as exc:
            logger.warning("Command could not be started", command=command, error=str(exc))
            return CommandResult(command=command, returncode=SPAWN_FAILED, error=str(exc))
        except KeyboardInterrupt:
            logger.warning("Command interrupted", command=command)
            return CommandResult(command=command, returncode=-signal.SIGINT, error="Interrupted")

        return CommandResult(
            command=command,
            returncode=completed.returncode,
            stdout=_decode(completed.stdout),
            stderr=_decode(completed.stderr),
        )


def _decode(data: bytes | None) -> str:
    if data is None:
        return ""
    return data.decode("utf-8", errors="replace")
