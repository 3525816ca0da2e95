"""Round-by-round quiz engine: shuffling, key resolution and scoring.

The engine never touches the terminal directly. Keys come from a
:class:`~trivia_quiz.quiz.keys.KeySource`, output goes to a :class:`QuizView`
and answer order comes from an injected ``permute(size)`` callable, so a
whole quiz can be driven from a scripted key list in tests.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from ..models import Question
from .keys import KeyEvent, KeySource

__all__ = [
    "Permutation",
    "random_permutation",
    "OptionLayout",
    "build_layout",
    "resolve_key",
    "ScoreTally",
    "RoundPhase",
    "RoundResult",
    "QuizView",
    "QuizEngine",
]

Permutation = Callable[[int], Sequence[int]]

_LOGGER = logging.getLogger(__name__)
_SYSTEM_RANDOM = random.SystemRandom()


def random_permutation(
    size: int, rng: random.Random | None = None
) -> list[int]:
    """Return a uniformly shuffled list of ``range(size)``."""

    order = list(range(size))
    (rng or _SYSTEM_RANDOM).shuffle(order)
    return order


@dataclass(frozen=True)
class OptionLayout:
    """Display order for one round.

    ``order[position]`` is the option shown at ``position``; the highest
    index stands for the correct answer.
    """

    order: tuple[int, ...]
    correct_position: int

    @property
    def correct_slot(self) -> int:
        return len(self.order) - 1

    def option_text(self, question: Question, position: int) -> str:
        slot = self.order[position]
        if slot == self.correct_slot:
            return question.answer
        return question.wrong_answers[slot]

    def options(self, question: Question) -> list[str]:
        return [
            self.option_text(question, position)
            for position in range(len(self.order))
        ]


def build_layout(
    question: Question, permute: Permutation = random_permutation
) -> OptionLayout:
    size = question.option_count
    order = tuple(permute(size))
    if sorted(order) != list(range(size)):
        raise ValueError(
            f"permute({size}) returned {order!r}, not a permutation."
        )
    return OptionLayout(order=order, correct_position=order.index(size - 1))


def resolve_key(event: KeyEvent, option_count: int) -> int | None:
    """Map a keypress to a zero-based display position, if it names one."""

    char = event.char
    if len(char) != 1 or char not in "123456789":
        return None
    position = int(char) - 1
    if position >= option_count:
        return None
    return position


@dataclass
class ScoreTally:
    correct: int = 0
    incorrect: int = 0

    @property
    def total(self) -> int:
        return self.correct + self.incorrect

    def record(self, is_correct: bool) -> None:
        if is_correct:
            self.correct += 1
        else:
            self.incorrect += 1


class RoundPhase(Enum):
    AWAITING_INPUT = "awaiting_input"
    SCORED = "scored"
    DONE = "done"


@dataclass(frozen=True)
class RoundResult:
    question: Question
    layout: OptionLayout
    chosen_position: int
    is_correct: bool

    @property
    def correct_position(self) -> int:
        return self.layout.correct_position

    @property
    def chosen_text(self) -> str:
        return self.layout.option_text(self.question, self.chosen_position)


class QuizView(Protocol):
    def show_question(
        self,
        question: Question,
        layout: OptionLayout,
        number: int,
        total: int,
    ) -> None: ...

    def show_result(self, result: RoundResult) -> None: ...

    def show_summary(self, tally: ScoreTally) -> None: ...


class QuizEngine:
    """Play questions one at a time and keep the running score."""

    def __init__(
        self,
        key_source: KeySource,
        view: QuizView,
        *,
        permute: Permutation = random_permutation,
        logger: logging.Logger | None = None,
    ) -> None:
        self._keys = key_source
        self._view = view
        self._permute = permute
        self._log = logger or _LOGGER
        self.tally = ScoreTally()
        self.phase = RoundPhase.AWAITING_INPUT

    def play_round(
        self, question: Question, number: int = 1, total: int = 1
    ) -> RoundResult:
        self.phase = RoundPhase.AWAITING_INPUT
        layout = build_layout(question, self._permute)
        self._view.show_question(question, layout, number, total)

        chosen = self._await_choice(len(layout.order))
        self._keys.drain()

        result = RoundResult(
            question=question,
            layout=layout,
            chosen_position=chosen,
            is_correct=chosen == layout.correct_position,
        )
        self.tally.record(result.is_correct)
        self.phase = RoundPhase.SCORED
        self._log.debug(
            "Round %d scored",
            number,
            extra={"correct": result.is_correct, "chosen": chosen + 1},
        )
        self._view.show_result(result)
        return result

    def run(self, questions: Iterable[Question]) -> ScoreTally:
        items = list(questions)
        for number, question in enumerate(items, start=1):
            self.play_round(question, number, len(items))
        self.phase = RoundPhase.DONE
        self._view.show_summary(self.tally)
        return self.tally

    def _await_choice(self, option_count: int) -> int:
        while True:
            position = resolve_key(self._keys.next_key_event(), option_count)
            if position is not None:
                return position
