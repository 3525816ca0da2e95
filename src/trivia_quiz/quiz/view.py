"""Rich rendering for the quiz and the source menu."""

from __future__ import annotations

from typing import Literal

from rich.console import Console
from rich.text import Text

from ..models import Question
from .engine import OptionLayout, RoundResult, ScoreTally
from .keys import KeySource

__all__ = ["SourceChoice", "RichQuizView", "choose_source"]

SourceChoice = Literal["file", "network"]

_MENU_KEYS: dict[str, SourceChoice] = {"1": "file", "2": "network"}


class RichQuizView:
    """Print prompts, options and outcomes to a Rich console."""

    def __init__(
        self, console: Console, *, show_correct_answer: bool = True
    ) -> None:
        self.console = console
        self.show_correct_answer = show_correct_answer

    def show_question(
        self,
        question: Question,
        layout: OptionLayout,
        number: int,
        total: int,
    ) -> None:
        self.console.print(
            Text(f"Question {number}/{total}", style="dim"), highlight=False
        )
        self.console.print(
            Text(f" === {question.text} ==="),
            highlight=False,
        )
        for position, option in enumerate(layout.options(question), start=1):
            self.console.print(Text(f"{position}: {option}"), highlight=False)

    def show_result(self, result: RoundResult) -> None:
        if result.is_correct:
            self.console.print(Text("Correct!", style="green"))
        else:
            line = Text("Wrong!", style="red")
            if self.show_correct_answer and result.question.answer:
                line.append(f" The answer was {result.question.answer}.")
            self.console.print(line, highlight=False)
        self.console.print()

    def show_summary(self, tally: ScoreTally) -> None:
        self.console.print(
            Text.assemble(
                "That's it! You answered ",
                (str(tally.correct), "green"),
                " questions correctly and ",
                (str(tally.incorrect), "red"),
                " incorrectly.",
            ),
            highlight=False,
        )


def choose_source(console: Console, keys: KeySource) -> SourceChoice:
    """Ask for the question source until ``1`` or ``2`` is pressed."""

    console.print("Where should the questions come from?")
    console.print(Text("1: questions file"), highlight=False)
    console.print(Text("2: online trivia"), highlight=False)
    while True:
        choice = _MENU_KEYS.get(keys.next_key_event().char)
        if choice is not None:
            keys.drain()
            return choice
