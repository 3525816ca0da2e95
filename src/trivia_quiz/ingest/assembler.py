"""Assemble fragments or decoded records into validated questions."""

from __future__ import annotations

import html
import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Literal

from ..models import MAX_OPTIONS, Question
from .markup import Fragment

__all__ = [
    "AssemblerMode",
    "assemble",
    "assemble_questions",
    "assemble_blocks",
    "questions_from_records",
]

AssemblerMode = Literal["auto", "tagged", "blocks"]

_LOGGER = logging.getLogger(__name__)

QUESTION_TAG = "question"
ROOT_TAG = "questions"
PROMPT_TAG = "prompt"
CORRECT_TAG = "correctAnswer"
INCORRECT_TAGS = frozenset({"incorrectAnswer", "incorrectAnswers"})
FIELD_TAGS = frozenset({PROMPT_TAG, CORRECT_TAG}) | INCORRECT_TAGS


@dataclass
class _Draft:
    text: str = ""
    answer: str = ""
    wrong_answers: list[str] = field(default_factory=list)

    def apply(self, fragment: Fragment) -> None:
        if fragment.tag == PROMPT_TAG:
            self.text = fragment.text
        elif fragment.tag == CORRECT_TAG:
            self.answer = fragment.text
        else:
            self.wrong_answers.append(fragment.text)

    def finalize(self, log: logging.Logger) -> Question | None:
        text = self.text.strip()
        if not text:
            log.warning("Dropping question without a prompt.")
            return None
        wrong = tuple(self.wrong_answers)
        if len(wrong) + 1 > MAX_OPTIONS:
            log.warning(
                "Question %r has %d options; keeping the first %d.",
                text,
                len(wrong) + 1,
                MAX_OPTIONS,
            )
            wrong = wrong[: MAX_OPTIONS - 1]
        return Question(text=text, answer=self.answer, wrong_answers=wrong)


def assemble(
    fragments: Iterable[Fragment],
    *,
    mode: AssemblerMode = "auto",
    logger: logging.Logger | None = None,
) -> list[Question]:
    """Assemble ``fragments`` with the algorithm selected by ``mode``.

    ``auto`` picks the tag-delimited algorithm when any ``question``
    fragment is present and falls back to prompt-delimited blocks otherwise.
    """

    items = list(fragments)
    if mode == "auto":
        tagged = any(fragment.tag == QUESTION_TAG for fragment in items)
        mode = "tagged" if tagged else "blocks"
    if mode == "tagged":
        return assemble_questions(items, logger=logger)
    if mode == "blocks":
        return assemble_blocks(items, logger=logger)
    raise ValueError(f"Unknown assembler mode: {mode!r}")


def assemble_questions(
    fragments: Iterable[Fragment],
    *,
    logger: logging.Logger | None = None,
) -> list[Question]:
    """Build questions delimited by closing ``question`` fragments.

    Fragments arrive as elements close, so a question opens with its first
    field and is finalized by the ``question`` fragment itself. Unexpected
    tags are logged and skipped without touching the draft in progress.
    """

    log = logger or _LOGGER
    questions: list[Question] = []
    draft: _Draft | None = None

    for fragment in fragments:
        tag = fragment.tag
        if tag == QUESTION_TAG:
            if draft is None:
                log.warning("Unexpected tag <%s>: no question open.", tag)
                continue
            question = draft.finalize(log)
            if question is not None:
                questions.append(question)
            draft = None
        elif tag in FIELD_TAGS:
            if fragment.path and QUESTION_TAG not in fragment.path:
                log.warning(
                    "Unexpected tag <%s> outside of a question; skipped.",
                    tag,
                )
                continue
            if draft is None:
                draft = _Draft()
            draft.apply(fragment)
        elif tag == ROOT_TAG or _is_inline(fragment):
            continue
        else:
            log.warning("Unexpected tag <%s>; skipped.", tag)

    if draft is not None:
        log.warning("Dropping unterminated question at end of input.")
    return questions


def assemble_blocks(
    fragments: Iterable[Fragment],
    *,
    logger: logging.Logger | None = None,
) -> list[Question]:
    """Build questions from blocks that each start at a ``prompt`` fragment.

    The first block starts at the first fragment and the last one runs to the
    end of the sequence. Structural ``question``/``questions`` fragments are
    ignored, as is inline markup inside a field; any other unknown tag is
    logged and skipped.
    """

    log = logger or _LOGGER
    blocks: list[_Draft] = []
    current: _Draft | None = None

    for fragment in fragments:
        tag = fragment.tag
        if tag in (QUESTION_TAG, ROOT_TAG) or _is_inline(fragment):
            continue
        if tag not in FIELD_TAGS:
            log.warning("Unexpected tag <%s>; skipped.", tag)
            continue
        if tag == PROMPT_TAG or current is None:
            current = _Draft()
            blocks.append(current)
        current.apply(fragment)

    questions = []
    for block in blocks:
        question = block.finalize(log)
        if question is not None:
            questions.append(question)
    return questions


def questions_from_records(
    records: Sequence[object],
    *,
    logger: logging.Logger | None = None,
) -> list[Question]:
    """Convert decoded trivia records into questions.

    Accepts ``question`` as a string or as a mapping with ``text``, plus the
    camelCase and snake_case spellings of the answer fields.
    """

    log = logger or _LOGGER
    questions: list[Question] = []
    for index, record in enumerate(records):
        if not isinstance(record, Mapping):
            log.warning("Skipping record %d: not an object.", index)
            continue
        draft = _Draft(
            text=_record_prompt(record),
            answer=_clean(
                _first(record, "correctAnswer", "correct_answer") or ""
            ),
            wrong_answers=[
                _clean(item)
                for item in _as_list(
                    _first(record, "incorrectAnswers", "incorrect_answers")
                )
                if item is not None
            ],
        )
        question = draft.finalize(log)
        if question is not None:
            questions.append(question)
    return questions


def _is_inline(fragment: Fragment) -> bool:
    # Markup such as <b> inside a field; its text is already in the field.
    return fragment.tag not in FIELD_TAGS and fragment.parent in FIELD_TAGS


def _record_prompt(record: Mapping[str, object]) -> str:
    raw = _first(record, "question", "prompt", "text")
    if isinstance(raw, Mapping):
        raw = raw.get("text")
    return _clean(raw or "")


def _first(record: Mapping[str, object], *keys: str) -> object:
    for key in keys:
        value = record.get(key)
        if value is not None:
            return value
    return None


def _as_list(value: object) -> list[object]:
    if value is None:
        return []
    if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
        return [value]
    return list(value)


def _clean(value: object) -> str:
    return html.unescape(str(value)).strip()
