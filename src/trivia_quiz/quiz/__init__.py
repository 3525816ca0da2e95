from .engine import (
    OptionLayout,
    QuizEngine,
    RoundPhase,
    RoundResult,
    ScoreTally,
    build_layout,
    random_permutation,
    resolve_key,
)
from .keys import KeyEvent, KeySource, TerminalKeySource
from .view import RichQuizView, choose_source

__all__ = [
    "OptionLayout",
    "QuizEngine",
    "RoundPhase",
    "RoundResult",
    "ScoreTally",
    "build_layout",
    "random_permutation",
    "resolve_key",
    "KeyEvent",
    "KeySource",
    "TerminalKeySource",
    "RichQuizView",
    "choose_source",
]
