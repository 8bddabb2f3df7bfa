"""Logging helpers shared by the study-exam commands."""

from __future__ import annotations

import json
import logging
import tempfile
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.logging import RichHandler

__all__ = [
    "JsonLogFormatter",
    "configure_logger",
]

_FILE_MARKER = "_study_exam_file"
_CONSOLE_MARKER = "_study_exam_console"

# Attributes every LogRecord carries; anything else came in through ``extra``.
_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime"}


class JsonLogFormatter(logging.Formatter):
    """Render log records as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        extras = {
            key: _jsonable(value)
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRS
        }
        if extras:
            payload["extra"] = extras
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        if record.stack_info:
            payload["stack"] = record.stack_info
        return json.dumps(payload, ensure_ascii=False)


def configure_logger(
    name: str,
    *,
    log_dir: Path,
    level: str = "INFO",
    verbose: bool = False,
    console: Console | None = None,
    max_bytes: int = 2 * 1024 * 1024,
    backup_count: int = 3,
    filename: str | None = None,
) -> tuple[logging.Logger, Path]:
    """Attach a JSON file handler (and optionally a Rich console handler).

    Repeated calls for the same logger reuse the installed handlers, so the
    CLI can be invoked many times in one process without duplicating output.
    Returns the logger together with the path of the active log file.
    """

    logger = logging.getLogger(name)
    logger.propagate = False
    logger.setLevel(logging.DEBUG)

    file_level = logging.DEBUG if verbose else _coerce_level(level)
    log_name = filename or f"{name.rsplit('.', 1)[-1]}.log"

    handler = _find_handler(logger, _FILE_MARKER)
    if handler is None:
        handler, log_path = _open_file_handler(
            log_dir, log_name, max_bytes=max_bytes, backup_count=backup_count
        )
        logger.addHandler(handler)
    else:
        log_path = Path(handler.baseFilename)  # type: ignore[attr-defined]
    handler.setLevel(file_level)

    console_handler = _find_handler(logger, _CONSOLE_MARKER)
    if verbose and console_handler is None:
        console_handler = RichHandler(
            console=console or Console(stderr=True),
            show_path=False,
            markup=False,
        )
        console_handler.setLevel(logging.DEBUG)
        setattr(console_handler, _CONSOLE_MARKER, True)
        logger.addHandler(console_handler)
    elif not verbose and console_handler is not None:
        logger.removeHandler(console_handler)
        console_handler.close()

    return logger, log_path


def _coerce_level(level: str) -> int:
    numeric = logging.getLevelName(str(level).strip().upper())
    return numeric if isinstance(numeric, int) else logging.INFO


def _find_handler(logger: logging.Logger, marker: str) -> logging.Handler | None:
    for handler in logger.handlers:
        if getattr(handler, marker, False):
            return handler
    return None


def _open_file_handler(
    log_dir: Path,
    filename: str,
    *,
    max_bytes: int,
    backup_count: int,
) -> tuple[RotatingFileHandler, Path]:
    for directory in (log_dir, _fallback_log_dir()):
        try:
            path = _prepare_log_file(directory, filename)
            handler = RotatingFileHandler(
                path,
                maxBytes=max_bytes,
                backupCount=backup_count,
                encoding="utf-8",
            )
        except PermissionError:
            continue
        handler.setFormatter(JsonLogFormatter())
        setattr(handler, _FILE_MARKER, True)
        return handler, path
    raise PermissionError(
        f"Unable to open a log file in {log_dir} or {_fallback_log_dir()}"
    )


def _prepare_log_file(directory: Path, filename: str) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    _chmod_quietly(directory, 0o700)
    path = directory / filename
    path.touch(exist_ok=True)
    _chmod_quietly(path, 0o600)
    return path


def _chmod_quietly(path: Path, mode: int) -> None:
    try:
        path.chmod(mode)
    except PermissionError:  # pragma: no cover - depends on filesystem
        return


def _jsonable(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, Path):
        return str(value)
    if hasattr(value, "value") and isinstance(
        getattr(value, "value"), (str, int)
    ):
        return value.value
    if isinstance(value, dict):
        return {str(key): _jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_jsonable(item) for item in value]
    return repr(value)


def _fallback_log_dir() -> Path:
    return Path(tempfile.gettempdir()) / "study-exam-logs"
