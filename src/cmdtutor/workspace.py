"""Create and clear the tutor's working directory."""

from __future__ import annotations

import shutil
from pathlib import Path


def ensure_workspace(path: Path) -> bool:
    """Create the workspace directory if missing; return whether it was created."""
    if path.is_dir():
        return False
    path.mkdir(parents=True)
    return True


def clear_workspace(path: Path) -> None:
    """Remove every entry inside the workspace, keeping the directory itself."""
    for entry in path.iterdir():
        if entry.is_dir() and not entry.is_symlink():
            shutil.rmtree(entry)
        else:
            entry.unlink()
