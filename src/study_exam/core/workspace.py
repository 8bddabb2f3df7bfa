"""Per-user data directory used for configuration and logs."""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Mapping

WORKSPACE_ENV = "STUDY_EXAM_HOME"
DEFAULT_WORKSPACE = Path.home() / ".study-exam-data"

_SUBDIRS = ("config", "logs")


class WorkspaceError(RuntimeError):
    """Raised when the workspace layout cannot be prepared."""


@dataclass(frozen=True)
class WorkspaceLayout:
    """Resolved workspace root and its managed subdirectories."""

    home: Path
    directories: Mapping[str, Path]

    def path_for(self, key: str) -> Path:
        try:
            return self.directories[key]
        except KeyError as exc:
            raise KeyError(f"Unknown workspace directory '{key}'.") from exc


def ensure_workspace(
    *,
    env: Mapping[str, str] | None = None,
    path: Path | None = None,
    create: bool = True,
) -> WorkspaceLayout:
    """Resolve (and by default create) the workspace directories.

    The home is taken from ``path``, then ``STUDY_EXAM_HOME``, then
    ``~/.study-exam-data``. When the default home is not writable a
    temp-directory fallback is used instead; explicit overrides never fall
    back.
    """

    env_map = os.environ if env is None else env
    home, explicit = _resolve_home(env_map, path)

    candidates = [home]
    if create and not explicit:
        candidates.append(_fallback_home())

    error: PermissionError | None = None
    for candidate in candidates:
        try:
            return _build_layout(candidate, create=create)
        except PermissionError as exc:
            error = exc
    raise WorkspaceError(f"Unable to prepare workspace at {home}") from error


def _resolve_home(
    env: Mapping[str, str], override: Path | None
) -> tuple[Path, bool]:
    if override is not None:
        return Path(override).expanduser().absolute(), True
    custom = (env.get(WORKSPACE_ENV) or "").strip()
    if custom:
        return Path(custom).expanduser().absolute(), True
    return DEFAULT_WORKSPACE, False


def _fallback_home() -> Path:
    return Path(tempfile.gettempdir()) / "study-exam-data"


def _build_layout(home: Path, *, create: bool) -> WorkspaceLayout:
    if home.exists() and not home.is_dir():
        raise WorkspaceError(
            f"Configured workspace exists and is not a directory: {home}"
        )
    directories = {name: home / name for name in _SUBDIRS}
    if create:
        for directory in (home, *directories.values()):
            _ensure_dir(directory)
    return WorkspaceLayout(
        home=home, directories=MappingProxyType(directories)
    )


def _ensure_dir(path: Path) -> None:
    if path.exists() and not path.is_dir():
        raise WorkspaceError(
            f"Expected directory but found a non-directory entry: {path}"
        )
    path.mkdir(parents=True, exist_ok=True)
    try:
        path.chmod(0o700)
    except (PermissionError, NotImplementedError):
        pass
