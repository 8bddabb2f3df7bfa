"""TOML helpers shared by study-exam configuration loaders."""

from __future__ import annotations

import copy
import tomllib
from pathlib import Path
from typing import Any, Mapping

__all__ = [
    "TomlConfigError",
    "load_toml",
    "merge_defaults",
    "write_toml_template",
]


class TomlConfigError(RuntimeError):
    """Raised when a TOML document cannot be read, merged or written."""


def load_toml(path: Path) -> dict[str, Any]:
    """Parse ``path`` as TOML.

    IO and syntax problems are reported as :class:`TomlConfigError` so
    callers can wrap them in their own error type.
    """

    try:
        with Path(path).open("rb") as handle:
            return tomllib.load(handle)
    except FileNotFoundError as exc:
        raise TomlConfigError(f"Config file not found: {path}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise TomlConfigError(f"Invalid TOML in {path}: {exc}") from exc


def merge_defaults(
    defaults: Mapping[str, Any],
    override: Mapping[str, Any],
    *,
    prefix: str = "",
) -> dict[str, Any]:
    """Return a copy of ``defaults`` with ``override`` applied on top.

    Only keys already present in ``defaults`` may be overridden; tables must
    stay tables.
    """

    merged = copy.deepcopy(dict(defaults))
    for key, value in override.items():
        dotted = f"{prefix}{key}"
        if key not in merged:
            raise TomlConfigError(f"Unknown configuration key '{dotted}'.")
        current = merged[key]
        if isinstance(current, Mapping):
            if not isinstance(value, Mapping):
                raise TomlConfigError(
                    f"Expected table for '{dotted}', "
                    f"found {type(value).__name__}."
                )
            merged[key] = merge_defaults(current, value, prefix=f"{dotted}.")
        else:
            merged[key] = value
    return merged


def write_toml_template(
    path: Path,
    *,
    template: str,
    overwrite: bool = False,
    mode: int = 0o600,
) -> Path:
    """Write ``template`` to ``path`` unless it exists and ``overwrite`` is off."""

    if path.exists() and not overwrite:
        raise TomlConfigError(f"Config already exists: {path}")
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(template, encoding="utf-8")
    try:
        path.chmod(mode)
    except PermissionError:  # pragma: no cover - depends on filesystem
        pass
    return path
