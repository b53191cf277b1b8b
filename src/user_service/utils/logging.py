from pathlib import Path
from importlib import metadata as importlib_metadata
from typing import Any
import tomllib

DISTRIBUTION_NAME = "user-service"


def find_pyproject(start: Path, max_up: int = 5) -> Path | None:
    p = start
    for _ in range(max_up):
        candidate = p / "pyproject.toml"
        if candidate.exists():
            return candidate
        if p.parent == p:
            break
        p = p.parent
    return None


def get_pyproject_value(key: str, start: str | Path | None = None, max_up: int = 5, default: Any = None) -> Any:
    """
    Return the value for dot-separated `key` (e.g. "project.version") from the
    nearest pyproject.toml above `start`, or `default` when the file or key is missing.
    """
    start_path = Path(start).resolve() if start is not None else Path(__file__).resolve().parent
    pyproject = find_pyproject(start_path, max_up=max_up)
    if not pyproject or not key:
        return default

    try:
        with pyproject.open("rb") as f:
            cur = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError):
        return default

    for part in key.split("."):
        if isinstance(cur, dict) and part in cur:
            cur = cur[part]
        else:
            return default
    return cur


def get_project_name(start: Path | str | None = None, default: str | None = None) -> str | None:
    return get_pyproject_value("project.name", start=start, default=default)


def get_project_version(start: Path | str | None = None, default: str = "unknown") -> str:
    """
    Installed distribution version first (works in containers without the
    source tree), then project.version from pyproject.toml, then `default`.
    """
    try:
        return importlib_metadata.version(DISTRIBUTION_NAME)
    except importlib_metadata.PackageNotFoundError:
        pass

    value = get_pyproject_value("project.version", start=start, default=None)
    return value if value is not None else default


__all__ = [
    "find_pyproject",
    "get_pyproject_value",
    "get_project_name",
    "get_project_version",
]
