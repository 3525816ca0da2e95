"""TOML helpers shared by the trivia config loader."""

from __future__ import annotations

from importlib import resources
from pathlib import Path
from typing import Any, Mapping, MutableMapping

try:  # Python >= 3.11 ships ``tomllib`` in the stdlib.
    import tomllib
except ModuleNotFoundError as exc:  # pragma: no cover - interpreter guard
    raise RuntimeError("Python 3.11+ is required for tomllib support.") from exc

__all__ = [
    "TEMPLATE_PACKAGE",
    "TEMPLATE_FILENAME",
    "TomlConfigError",
    "load_toml",
    "merge_defaults",
    "read_template",
    "write_template",
]

TEMPLATE_PACKAGE = "trivia_quiz"
TEMPLATE_FILENAME = "template.toml"


class TomlConfigError(RuntimeError):
    """Raised when TOML config IO or validation fails."""


def load_toml(path: Path) -> Mapping[str, Any]:
    """Load a TOML document from ``path``.

    Both a missing file and invalid TOML raise :class:`TomlConfigError`.
    """

    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except FileNotFoundError as exc:
        raise TomlConfigError(f"Config file not found: {path}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise TomlConfigError(f"Failed to parse config TOML: {exc}") from exc


def merge_defaults(
    base: MutableMapping[str, Any],
    override: Mapping[str, Any],
    *,
    path: str = "",
) -> None:
    """Overlay ``override`` onto the defaults table ``base`` in place.

    Keys absent from ``base`` are rejected, and a table in ``base`` may only
    be replaced by another table.
    """

    for key, value in override.items():
        dotted = f"{path}{key}"
        if key not in base:
            raise TomlConfigError(f"Unknown configuration key '{dotted}'.")
        current = base[key]
        if not isinstance(current, MutableMapping):
            base[key] = value
        elif isinstance(value, Mapping):
            merge_defaults(current, value, path=f"{dotted}.")
        else:
            raise TomlConfigError(
                f"Expected table for '{dotted}', found {type(value).__name__}."
            )


def read_template() -> str:
    """Return the packaged ``template.toml`` contents."""

    try:
        resource = resources.files(TEMPLATE_PACKAGE).joinpath(
            TEMPLATE_FILENAME
        )
        return resource.read_text(encoding="utf-8")
    except FileNotFoundError as exc:  # pragma: no cover - package state
        raise TomlConfigError("Config template resource not found.") from exc


def write_template(
    path: Path,
    *,
    overwrite: bool = False,
    mode: int = 0o600,
) -> Path:
    """Copy the packaged template to ``path``; existing files need ``overwrite``."""

    if path.exists() and not overwrite:
        raise TomlConfigError(f"Config already exists: {path}")
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(read_template(), encoding="utf-8")
    try:
        path.chmod(mode)
    except PermissionError:  # pragma: no cover - depends on filesystem
        pass
    return path
