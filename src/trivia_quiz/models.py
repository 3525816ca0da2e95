"""Question model shared by ingestion and the quiz engine."""

from __future__ import annotations

from dataclasses import dataclass

# Options are chosen with the keys 1-9.
MAX_OPTIONS = 9


@dataclass(frozen=True)
class Question:
    """A fully assembled multiple-choice question."""

    text: str
    answer: str
    wrong_answers: tuple[str, ...] = ()

    @property
    def option_count(self) -> int:
        return len(self.wrong_answers) + 1
