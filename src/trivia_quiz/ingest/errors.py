"""Fatal ingestion errors."""

from __future__ import annotations

from pathlib import Path

__all__ = [
    "IngestionError",
    "SourceNotFoundError",
    "SourceReadError",
    "MarkupDecodeError",
    "NetworkSourceError",
    "ResponseDecodeError",
]


class IngestionError(RuntimeError):
    """Base class for errors that end the run before the quiz starts."""


class SourceNotFoundError(IngestionError):
    """Raised when the question file does not exist."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"{path.name} not found. Exiting.")


class SourceReadError(IngestionError):
    """Raised when the question file exists but cannot be read."""

    def __init__(self, path: Path, reason: OSError) -> None:
        self.path = path
        detail = reason.strerror or reason.__class__.__name__
        super().__init__(f"Could not read {path}: {detail}. Exiting.")


class MarkupDecodeError(IngestionError):
    """Raised when the markup stream is not well-formed."""


class NetworkSourceError(IngestionError):
    """Raised when the trivia endpoint cannot be reached or answers non-2xx."""


class ResponseDecodeError(IngestionError):
    """Raised when the trivia endpoint returns an unusable body."""
