"""cmdtutor: learn shell commands by running them."""

from __future__ import annotations

import tomllib
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

__all__ = ["__version__"]


def _source_checkout_version() -> str | None:
    """Read [project].version when running from a source checkout."""
    for base in Path(__file__).resolve().parents:
        pyproject = base / "pyproject.toml"
        if not pyproject.is_file():
            continue
        with pyproject.open("rb") as handle:
            project = tomllib.load(handle).get("project", {})
        if project.get("name") == "cmdtutor":
            return str(project.get("version"))
    return None


def _installed_version() -> str:
    try:
        return version("cmdtutor")
    except PackageNotFoundError:
        return "0+unknown"


__version__ = _source_checkout_version() or _installed_version()
