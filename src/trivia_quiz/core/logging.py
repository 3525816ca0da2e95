"""Logging setup: JSON lines on disk, short warnings on stderr."""

from __future__ import annotations

import json
import logging
import sys
import tempfile
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path, PurePath
from typing import Any, Mapping

__all__ = [
    "JsonLogFormatter",
    "configure_logger",
]

_RESERVED = frozenset(
    logging.LogRecord(
        "reserved", logging.INFO, __file__, 0, "", None, None
    ).__dict__
) | {"message", "asctime", "taskName"}


class JsonLogFormatter(logging.Formatter):
    """One JSON object per line; ``extra=`` fields nest under ``"extra"``."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        payload: dict[str, Any] = {
            "timestamp": created.isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        extras = _record_extras(record)
        if extras:
            payload["extra"] = extras
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=True)


def _record_extras(record: logging.LogRecord) -> dict[str, Any]:
    return {
        key: _jsonable(value)
        for key, value in vars(record).items()
        if key not in _RESERVED and not key.startswith("_")
    }


def configure_logger(
    name: str,
    *,
    log_dir: Path,
    level: str = "INFO",
    verbose: bool = False,
    max_bytes: int = 1024 * 1024,
    backup_count: int = 3,
    filename: str = "trivia.log",
) -> tuple[logging.Logger, Path]:
    """Configure the namespaced logger and return it with its log file path.

    The file handler records ``level`` and above as JSON. A stderr handler
    always shows warnings so ingestion problems reach the player; with
    ``verbose`` it shows everything.
    """

    logger = logging.getLogger(name)
    logger.propagate = False
    logger.setLevel(logging.DEBUG)

    file_level = logging.DEBUG if verbose else _coerce_level(level)
    file_handler, file_path = _ensure_file_handler(
        logger,
        log_dir=log_dir,
        filename=filename,
        max_bytes=max_bytes,
        backup_count=backup_count,
    )
    file_handler.setLevel(file_level)

    console_level = logging.DEBUG if verbose else logging.WARNING
    _ensure_console_handler(logger).setLevel(console_level)
    return logger, file_path


def _coerce_level(level: str) -> int:
    numeric = logging.getLevelName(level.upper())
    if isinstance(numeric, int):
        return numeric
    return logging.INFO


def _ensure_file_handler(
    logger: logging.Logger,
    *,
    log_dir: Path,
    filename: str,
    max_bytes: int,
    backup_count: int,
) -> tuple[logging.Handler, Path]:
    for handler in logger.handlers:
        if getattr(handler, "_trivia_file", False):
            return handler, Path(handler.baseFilename)  # type: ignore[attr-defined]

    path = log_dir / filename
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
    except PermissionError:
        fallback = Path(tempfile.gettempdir()) / "trivia-quiz-logs"
        fallback.mkdir(parents=True, exist_ok=True)
        path = fallback / filename
        handler = RotatingFileHandler(
            path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
    handler.setFormatter(JsonLogFormatter())
    handler._trivia_file = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    return handler, path


def _ensure_console_handler(logger: logging.Logger) -> logging.Handler:
    for handler in logger.handlers:
        if getattr(handler, "_trivia_console", False):
            return handler
    console = logging.StreamHandler(stream=sys.stderr)
    console.setFormatter(logging.Formatter("%(levelname)s %(message)s"))
    console._trivia_console = True  # type: ignore[attr-defined]
    logger.addHandler(console)
    return console


def _jsonable(value: Any) -> Any:
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, PurePath):
        return value.as_posix()
    if isinstance(value, Mapping):
        return {str(key): _jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_jsonable(item) for item in value]
    return repr(value)
