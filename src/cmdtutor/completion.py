"""Tab completion of directory entries for the interactive prompt."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path


def complete_entries(line: str, cwd: Path) -> list[str]:
    """Return entries of `cwd` starting with the last token of `line`, or all entries."""
    try:
        entries = sorted(entry.name for entry in cwd.iterdir())
    except OSError:
        return []
    last = line.split(" ")[-1]
    hits = [name for name in entries if name.startswith(last)]
    return hits if hits else entries


def install_completer(get_cwd: Callable[[], Path]) -> bool:
    """Bind Tab to directory completion; return False when readline is unavailable."""
    try:
        import readline
    except ImportError:
        return False

    matches: list[str] = []

    def completer(text: str, state: int) -> str | None:
        if state == 0:
            matches[:] = complete_entries(readline.get_line_buffer(), get_cwd())
        return matches[state] if state < len(matches) else None

    readline.set_completer_delims(" ")
    readline.set_completer(completer)
    if "libedit" in (readline.__doc__ or ""):
        readline.parse_and_bind("bind ^I rl_complete")
    else:
        readline.parse_and_bind("tab: complete")
    return True
