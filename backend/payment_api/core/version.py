"""Version reported by /health and the OpenAPI document."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import Final

import tomllib

DISTRIBUTION_NAME: Final[str] = "payment-system-backend"
PYPROJECT_PATH: Final[Path] = Path(__file__).resolve().parents[3] / "pyproject.toml"
UNKNOWN_VERSION: Final[str] = "0.0.0"


def pyproject_version(path: Path = PYPROJECT_PATH) -> str | None:
    """Read ``[project].version`` from a source checkout, if there is one."""
    try:
        with path.open("rb") as fp:
            project = tomllib.load(fp).get("project", {})
    except FileNotFoundError:
        return None

    value = project.get("version") if isinstance(project, dict) else None
    return value if isinstance(value, str) else None


def resolve_app_version(
    distribution: str = DISTRIBUTION_NAME,
    path: Path = PYPROJECT_PATH,
) -> str:
    # Installed metadata wins; an editable checkout without metadata falls
    # back to pyproject.toml.
    try:
        return version(distribution)
    except PackageNotFoundError:
        return pyproject_version(path) or UNKNOWN_VERSION


APP_VERSION: Final[str] = resolve_app_version()

__all__ = ["APP_VERSION", "DISTRIBUTION_NAME", "pyproject_version", "resolve_app_version"]
