"""Configuration loader for the trivia quiz."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, MutableMapping, Optional

from trivia_quiz.core import config as core_config
from trivia_quiz.core import workspace as workspace_mod
from trivia_quiz.ingest.sources import DEFAULT_FILE, DEFAULT_TIMEOUT, DEFAULT_URL

CONFIG_FILENAME = "trivia.toml"
CONFIG_ENV = "TRIVIA_QUIZ_CONFIG"
ENV_PREFIX = "TRIVIA_QUIZ_"

SOURCE_CHOICES = ("ask", "file", "network")
ASSEMBLER_CHOICES = ("auto", "tagged", "blocks")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class TriviaConfigError(RuntimeError):
    """Raised when configuration parsing or validation fails."""


@dataclass(frozen=True)
class TriviaConfig:
    """Fully resolved settings for one quiz run."""

    source: str
    question_file: Path
    assembler: str
    url: str
    timeout_seconds: float
    limit: Optional[int]
    show_correct_answer: bool
    log_level: str
    verbose: bool


@dataclass(frozen=True)
class ConfigOverrides:
    """CLI-sourced overrides applied on top of file/env options."""

    source: Optional[str] = None
    question_file: Optional[Path] = None
    url: Optional[str] = None
    assembler: Optional[str] = None
    log_level: Optional[str] = None
    verbose: Optional[bool] = None


@dataclass(frozen=True)
class LoadResult:
    config: TriviaConfig
    layout: workspace_mod.WorkspaceLayout
    config_path: Optional[Path]


def load_config(
    *,
    config_path: Optional[Path] = None,
    overrides: Optional[ConfigOverrides] = None,
    env: Optional[Mapping[str, str]] = None,
    workspace_path: Optional[Path] = None,
) -> LoadResult:
    """Load configuration applying precedence CLI > env > TOML > defaults."""

    overrides = overrides or ConfigOverrides()
    env_map = os.environ if env is None else env

    try:
        layout = workspace_mod.ensure_workspace(
            env=env_map, path=workspace_path
        )
    except workspace_mod.WorkspaceError as exc:
        raise TriviaConfigError(str(exc)) from exc

    requested_path = _resolve_config_path(
        config_path=config_path,
        env_map=env_map,
        default_path=layout.path_for("config") / CONFIG_FILENAME,
    )

    table = _default_table()
    loaded_path: Optional[Path] = None
    if requested_path.exists():
        loaded_path = requested_path
        try:
            core_config.merge_defaults(
                table, core_config.load_toml(requested_path)
            )
        except core_config.TomlConfigError as exc:
            raise TriviaConfigError(str(exc)) from exc
    elif config_path is not None or (env_map.get(CONFIG_ENV) or "").strip():
        raise TriviaConfigError(f"Config file not found: {requested_path}")

    source_table = table["source"]
    network_table = table["network"]

    source = _require_choice(
        _pick_first(
            overrides.source,
            _env(env_map, "SOURCE"),
            source_table["default"],
        ),
        field="source.default",
        choices=SOURCE_CHOICES,
    )
    assembler = _require_choice(
        _pick_first(
            overrides.assembler,
            _env(env_map, "ASSEMBLER"),
            source_table["assembler"],
        ),
        field="source.assembler",
        choices=ASSEMBLER_CHOICES,
    )
    question_file = _pick_first(
        overrides.question_file,
        _env(env_map, "FILE"),
        source_table["file"],
    )
    url = _require_string(
        _pick_first(overrides.url, _env(env_map, "URL"), network_table["url"]),
        field="network.url",
    )
    log_level = _require_choice(
        _pick_first(
            overrides.log_level,
            _env(env_map, "LOG_LEVEL"),
            table["logging"]["level"],
        ),
        field="logging.level",
        choices=LOG_LEVELS,
    )
    verbose = _require_bool(
        _pick_first(overrides.verbose, table["logging"]["verbose"]),
        field="logging.verbose",
    )

    config = TriviaConfig(
        source=source,
        question_file=Path(
            _require_string(question_file, field="source.file")
        ).expanduser(),
        assembler=assembler,
        url=url,
        timeout_seconds=_require_positive_number(
            network_table["timeout_seconds"], field="network.timeout_seconds"
        ),
        limit=_coerce_limit(network_table["limit"]),
        show_correct_answer=_require_bool(
            table["quiz"]["show_correct_answer"],
            field="quiz.show_correct_answer",
        ),
        log_level=log_level,
        verbose=verbose,
    )
    return LoadResult(config=config, layout=layout, config_path=loaded_path)


def _default_table() -> MutableMapping[str, MutableMapping[str, Any]]:
    return {
        "source": {
            "default": "ask",
            "file": str(DEFAULT_FILE),
            "assembler": "auto",
        },
        "network": {
            "url": DEFAULT_URL,
            "timeout_seconds": DEFAULT_TIMEOUT,
            "limit": 10,
        },
        "quiz": {"show_correct_answer": True},
        "logging": {"level": "INFO", "verbose": False},
    }


def _resolve_config_path(
    *,
    config_path: Optional[Path],
    env_map: Mapping[str, str],
    default_path: Path,
) -> Path:
    if config_path is not None:
        return config_path.expanduser()
    env_candidate = (env_map.get(CONFIG_ENV) or "").strip()
    if env_candidate:
        return Path(env_candidate).expanduser()
    return default_path


def _env(env_map: Mapping[str, str], key: str) -> Optional[str]:
    raw = env_map.get(f"{ENV_PREFIX}{key}")
    if raw is None:
        return None
    value = raw.strip()
    return value or None


def _pick_first(*candidates: object) -> object:
    for candidate in candidates:
        if candidate is not None:
            return candidate
    return None


def _require_string(value: object, *, field: str) -> str:
    if isinstance(value, Path):
        return str(value)
    if not isinstance(value, str) or not value.strip():
        raise TriviaConfigError(f"'{field}' must be a non-empty string.")
    return value.strip()


def _require_choice(
    value: object, *, field: str, choices: tuple[str, ...]
) -> str:
    text = _require_string(value, field=field)
    normalized = text.upper() if field == "logging.level" else text.lower()
    if normalized not in choices:
        expected = ", ".join(choices)
        raise TriviaConfigError(
            f"'{field}' must be one of: {expected} (got '{text}')."
        )
    return normalized


def _require_bool(value: object, *, field: str) -> bool:
    if not isinstance(value, bool):
        raise TriviaConfigError(f"'{field}' must be a boolean.")
    return value


def _require_positive_number(value: object, *, field: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TriviaConfigError(f"'{field}' must be a number.")
    if value <= 0:
        raise TriviaConfigError(f"'{field}' must be greater than zero.")
    return float(value)


def _coerce_limit(value: object) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise TriviaConfigError("'network.limit' must be a positive integer.")
    return value
