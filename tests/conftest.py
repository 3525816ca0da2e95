from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Callable, Iterable, Iterator

import pytest

TESTS_DIR = Path(__file__).resolve().parent
if str(TESTS_DIR) not in sys.path:
    sys.path.insert(0, str(TESTS_DIR))

# Ensure src/ is importable when the package is not installed
ROOT = TESTS_DIR.parent
for extra in (ROOT / "src",):
    path_str = str(extra)
    if path_str not in sys.path:
        sys.path.insert(0, path_str)

from fixtures import RecordingLogger, ScriptedKeySource  # noqa: E402

from trivia_quiz.models import Question  # noqa: E402

_TRIVIA_ENV = (
    "TRIVIA_QUIZ_CONFIG",
    "TRIVIA_QUIZ_SOURCE",
    "TRIVIA_QUIZ_FILE",
    "TRIVIA_QUIZ_URL",
    "TRIVIA_QUIZ_ASSEMBLER",
    "TRIVIA_QUIZ_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def _isolated_workspace(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> Iterator[Path]:
    """Keep config and logs inside the per-test tmp directory."""

    home = tmp_path / "trivia-home"
    monkeypatch.setenv("TRIVIA_QUIZ_HOME", str(home))
    for name in _TRIVIA_ENV:
        monkeypatch.delenv(name, raising=False)
    yield home
    logger = logging.getLogger("trivia_quiz")
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


@pytest.fixture
def recording_logger() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def scripted_keys() -> Callable[[Iterable[object]], ScriptedKeySource]:
    """Factory building a key source that replays the given keys."""

    return ScriptedKeySource  # type: ignore[return-value]


@pytest.fixture
def identity_permute() -> Callable[[int], list[int]]:
    """Permutation strategy that keeps the correct answer last."""

    return lambda size: list(range(size))


@pytest.fixture
def capital_question() -> Question:
    return Question(
        text="What is the capital of France?",
        answer="Paris",
        wrong_answers=("London", "Berlin", "Madrid"),
    )
