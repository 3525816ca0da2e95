"""Shared testing helpers for the trivia_quiz test suite."""

from .keys import ScriptedKeySource  # noqa: F401
from .recording import RecordingLogger  # noqa: F401

__all__ = [
    "RecordingLogger",
    "ScriptedKeySource",
]
