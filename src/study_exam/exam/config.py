"""Configuration loader for exam sessions.

Settings resolve with precedence CLI > environment > ``exam.toml`` >
built-in defaults. The TOML file is optional unless one was explicitly
requested through ``--config`` or ``STUDY_EXAM_CONFIG``.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional
from urllib.parse import urlparse

from pydantic import ValidationError

from study_exam.core import config as core_config
from study_exam.core import workspace as workspace_mod

from .models import Difficulty, QuizRequest

CONFIG_FILENAME = "exam.toml"
CONFIG_ENV = "STUDY_EXAM_CONFIG"
ENV_PREFIX = "STUDY_EXAM_"

DEFAULT_ENDPOINT = "http://localhost:3001/generate-quiz"

CONFIG_TEMPLATE = """\
# study-exam configuration

[exam]
# Subject the generator should write questions about.
topic = "Computer Science Fundamentals"
# One of: easy, medium, hard
difficulty = "medium"
count = 5
# Right-to-left languages (e.g. "Arabic") are laid out right-aligned.
language = "English"

[server]
endpoint = "http://localhost:3001/generate-quiz"
timeout_seconds = 30.0

[logging]
level = "INFO"
verbose = false
"""


class ExamConfigError(RuntimeError):
    """Raised when configuration parsing or validation fails."""


@dataclass(frozen=True)
class ExamConfig:
    """Fully resolved settings for one exam run."""

    request: QuizRequest
    endpoint: str
    timeout_seconds: float
    log_level: str
    verbose: bool


@dataclass(frozen=True)
class ConfigOverrides:
    """CLI-sourced overrides applied on top of env/file options."""

    topic: Optional[str] = None
    difficulty: Optional[str] = None
    count: Optional[int] = None
    language: Optional[str] = None
    endpoint: Optional[str] = None
    timeout_seconds: Optional[float] = None
    log_level: Optional[str] = None
    verbose: Optional[bool] = None


@dataclass(frozen=True)
class LoadResult:
    """Resolved configuration plus the workspace it was loaded from."""

    config: ExamConfig
    layout: workspace_mod.WorkspaceLayout
    config_path: Optional[Path]


def _default_table() -> dict[str, dict[str, Any]]:
    return {
        "exam": {
            "topic": "Computer Science Fundamentals",
            "difficulty": Difficulty.MEDIUM.value,
            "count": 5,
            "language": "English",
        },
        "server": {
            "endpoint": DEFAULT_ENDPOINT,
            "timeout_seconds": 30.0,
        },
        "logging": {"level": "INFO", "verbose": False},
    }


def load_config(
    *,
    config_path: Optional[Path] = None,
    overrides: Optional[ConfigOverrides] = None,
    env: Optional[Mapping[str, str]] = None,
    workspace_path: Optional[Path] = None,
) -> LoadResult:
    """Resolve an :class:`ExamConfig` from CLI, env, TOML and defaults."""

    overrides = overrides or ConfigOverrides()
    env_map = os.environ if env is None else env

    try:
        layout = workspace_mod.ensure_workspace(env=env_map, path=workspace_path)
    except workspace_mod.WorkspaceError as exc:
        raise ExamConfigError(str(exc)) from exc

    requested = _resolve_config_path(config_path, env_map, layout)
    table = _default_table()
    loaded_path: Optional[Path] = None
    if requested.exists():
        try:
            table = core_config.merge_defaults(
                table, core_config.load_toml(requested)
            )
        except core_config.TomlConfigError as exc:
            raise ExamConfigError(str(exc)) from exc
        loaded_path = requested
    elif config_path is not None or _env_string(env_map, "CONFIG"):
        raise ExamConfigError(f"Config file not found: {requested}")

    exam = table["exam"]
    server = table["server"]
    logging_table = table["logging"]

    request = _build_request(
        topic=_pick(overrides.topic, _env_string(env_map, "TOPIC"), exam["topic"]),
        difficulty=_pick(
            overrides.difficulty,
            _env_string(env_map, "DIFFICULTY"),
            exam["difficulty"],
        ),
        count=_pick(overrides.count, _env_int(env_map, "COUNT"), exam["count"]),
        language=_pick(
            overrides.language,
            _env_string(env_map, "LANGUAGE"),
            exam["language"],
        ),
    )
    endpoint = _require_endpoint(
        _pick(
            overrides.endpoint,
            _env_string(env_map, "ENDPOINT"),
            server["endpoint"],
        )
    )
    timeout = _require_timeout(
        _pick(
            overrides.timeout_seconds,
            _env_float(env_map, "TIMEOUT"),
            server["timeout_seconds"],
        )
    )
    log_level = _require_level(
        _pick(
            overrides.log_level,
            _env_string(env_map, "LOG_LEVEL"),
            logging_table["level"],
        )
    )
    verbose = _pick(overrides.verbose, logging_table["verbose"])
    if not isinstance(verbose, bool):
        raise ExamConfigError("'logging.verbose' must be a boolean.")

    config = ExamConfig(
        request=request,
        endpoint=endpoint,
        timeout_seconds=timeout,
        log_level=log_level,
        verbose=verbose,
    )
    return LoadResult(config=config, layout=layout, config_path=loaded_path)


def write_template(path: Path, *, overwrite: bool = False) -> Path:
    """Write the default ``exam.toml`` to ``path``."""

    try:
        return core_config.write_toml_template(
            path, template=CONFIG_TEMPLATE, overwrite=overwrite
        )
    except core_config.TomlConfigError as exc:
        raise ExamConfigError(str(exc)) from exc


def _resolve_config_path(
    config_path: Optional[Path],
    env_map: Mapping[str, str],
    layout: workspace_mod.WorkspaceLayout,
) -> Path:
    if config_path is not None:
        return Path(config_path).expanduser()
    env_candidate = _env_string(env_map, "CONFIG")
    if env_candidate:
        return Path(env_candidate).expanduser()
    return layout.path_for("config") / CONFIG_FILENAME


def _build_request(**fields: Any) -> QuizRequest:
    try:
        return QuizRequest(**fields)
    except ValidationError as exc:
        first = exc.errors()[0]
        location = ".".join(str(part) for part in first["loc"]) or "exam"
        raise ExamConfigError(
            f"Invalid 'exam.{location}': {first['msg']}"
        ) from exc


def _require_endpoint(value: object) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ExamConfigError("'server.endpoint' must be a non-empty string.")
    endpoint = value.strip()
    try:
        parsed = urlparse(endpoint)
    except ValueError as exc:
        raise ExamConfigError(
            f"'server.endpoint' is not a valid URL: {exc}"
        ) from exc
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        raise ExamConfigError(
            f"'server.endpoint' must be an http(s) URL, got '{endpoint}'."
        )
    return endpoint


def _require_timeout(value: object) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ExamConfigError("'server.timeout_seconds' must be a number.")
    if value <= 0:
        raise ExamConfigError("'server.timeout_seconds' must be positive.")
    return float(value)


def _require_level(value: object) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ExamConfigError("'logging.level' must be a non-empty string.")
    return value.strip().upper()


def _env_string(
    env_map: Mapping[str, str], key: str
) -> Optional[str]:
    value = env_map.get(f"{ENV_PREFIX}{key}")
    if value is None:
        return None
    value = value.strip()
    return value or None


def _env_int(env_map: Mapping[str, str], key: str) -> Optional[int]:
    value = _env_string(env_map, key)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError as exc:
        raise ExamConfigError(
            f"{ENV_PREFIX}{key} must be an integer, got '{value}'."
        ) from exc


def _env_float(env_map: Mapping[str, str], key: str) -> Optional[float]:
    value = _env_string(env_map, key)
    if value is None:
        return None
    try:
        return float(value)
    except ValueError as exc:
        raise ExamConfigError(
            f"{ENV_PREFIX}{key} must be a number, got '{value}'."
        ) from exc


def _pick(*candidates: object) -> object:
    for candidate in candidates:
        if candidate is not None:
            return candidate
    return None
