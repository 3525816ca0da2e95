from __future__ import annotations

import io

import pytest

from trivia_quiz.ingest.errors import MarkupDecodeError
from trivia_quiz.ingest.markup import (
    Characters,
    EndElement,
    Fragment,
    ParserState,
    StartElement,
    iter_markup_events,
    parse_fragments,
)

SAMPLE = b"""<?xml version="1.0"?>
<questions>
  <question>
    <prompt>
      What is 2 + 2?
    </prompt>
    <correctAnswer>4</correctAnswer>
    <incorrectAnswer>3</incorrectAnswer>
    <incorrectAnswer>5</incorrectAnswer>
  </question>
</questions>
"""


def _fragments(data: bytes, **kwargs) -> list[Fragment]:
    return list(parse_fragments(iter_markup_events(io.BytesIO(data), **kwargs)))


def test_fragments_follow_closing_order() -> None:
    fragments = _fragments(SAMPLE)

    assert [f.tag for f in fragments] == [
        "prompt",
        "correctAnswer",
        "incorrectAnswer",
        "incorrectAnswer",
        "question",
        "questions",
    ]
    assert fragments[0].text == "What is 2 + 2?"
    assert fragments[0].path == ("questions", "question")
    assert fragments[0].parent == "question"
    assert fragments[4].tag == "question"
    assert fragments[4].path == ("questions",)
    assert fragments[5].path == ()


def test_small_chunks_produce_the_same_fragments() -> None:
    assert _fragments(SAMPLE, chunk_size=3) == _fragments(SAMPLE)


def test_text_segments_are_appended() -> None:
    data = b"<prompt>Tom &amp; Jerry &lt;3</prompt>"
    assert _fragments(data) == [Fragment("prompt", "Tom & Jerry <3")]

    events = [
        StartElement("prompt"),
        Characters("Tom "),
        Characters("& "),
        Characters("Jerry"),
        EndElement("prompt"),
    ]
    assert list(parse_fragments(events)) == [Fragment("prompt", "Tom & Jerry")]


def test_namespace_prefix_is_dropped() -> None:
    data = b'<t:prompt xmlns:t="urn:trivia">Hi</t:prompt>'
    assert _fragments(data) == [Fragment("prompt", "Hi")]


def test_closing_tag_without_open_warns_and_emits_nothing(
    recording_logger,
) -> None:
    fragments = list(
        parse_fragments([EndElement("prompt")], logger=recording_logger)
    )

    assert fragments == []
    assert recording_logger.warnings == [
        "Unexpected closing tag </prompt> ignored."
    ]


def test_mismatched_closing_tag_is_skipped(recording_logger) -> None:
    events = [
        StartElement("question"),
        StartElement("prompt"),
        Characters("Q1"),
        EndElement("answer"),
        EndElement("prompt"),
        EndElement("question"),
    ]

    fragments = list(parse_fragments(events, logger=recording_logger))

    assert fragments == [
        Fragment("prompt", "Q1", ("question",)),
        Fragment("question", "Q1", ()),
    ]
    assert len(recording_logger.warnings) == 1
    assert "</answer>" in recording_logger.warnings[0]
    assert "<prompt>" in recording_logger.warnings[0]


def test_unclosed_elements_are_reported(recording_logger) -> None:
    events = [StartElement("questions"), StartElement("question")]

    assert list(parse_fragments(events, logger=recording_logger)) == []
    assert recording_logger.warnings == [
        "Markup ended with unclosed element(s): questions, question"
    ]


def test_text_outside_any_element_is_ignored() -> None:
    events = [Characters("stray"), StartElement("a"), EndElement("a")]
    assert list(parse_fragments(events)) == [Fragment("a", "")]


@pytest.mark.parametrize(
    "data",
    [
        b"<questions><prompt>oops</questions>",
        b"<questions>",
        b"",
        b"not markup at all",
        b'<?xml version="1.0" encoding="bogus-enc"?><questions/>',
    ],
)
def test_malformed_stream_is_fatal(data: bytes) -> None:
    with pytest.raises(MarkupDecodeError):
        list(iter_markup_events(io.BytesIO(data)))


def test_parser_state_tracks_current_tag() -> None:
    state = ParserState()
    assert state.current is None
    state.open("question")
    state.open("prompt")
    state.append_text(" Q ")
    assert state.current == "prompt"

    fragment = state.close()

    assert fragment == Fragment("prompt", "Q", ("question",))
    assert state.current == "question"


def test_inline_child_text_stays_in_the_field(recording_logger) -> None:
    data = b"<prompt>Who <b>wrote</b> it?</prompt>"

    fragments = list(
        parse_fragments(
            iter_markup_events(io.BytesIO(data)), logger=recording_logger
        )
    )

    assert fragments == [
        Fragment("b", "wrote", ("prompt",)),
        Fragment("prompt", "Who wrote it?"),
    ]
    assert recording_logger.warnings == []


def test_empty_stream_reports_missing_root() -> None:
    with pytest.raises(MarkupDecodeError, match="no element found"):
        list(iter_markup_events(io.BytesIO(b"")))
