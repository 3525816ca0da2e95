"""Terminal trivia quiz."""

from .models import Question

__all__ = ["Question"]
