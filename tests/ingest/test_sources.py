from __future__ import annotations

import json
from pathlib import Path

import httpx
import pytest

from trivia_quiz.ingest import sources
from trivia_quiz.ingest.errors import (
    MarkupDecodeError,
    NetworkSourceError,
    ResponseDecodeError,
    SourceNotFoundError,
    SourceReadError,
)
from trivia_quiz.models import Question

TAGGED_XML = """<?xml version="1.0" encoding="UTF-8"?>
<questions>
  <question>
    <prompt>Largest ocean?</prompt>
    <correctAnswer>Pacific</correctAnswer>
    <incorrectAnswer>Atlantic</incorrectAnswer>
    <incorrectAnswer>Indian</incorrectAnswer>
  </question>
  <question>
    <prompt>Fastest land animal?</prompt>
    <correctAnswer>Cheetah</correctAnswer>
    <incorrectAnswer>Lion</incorrectAnswer>
  </question>
</questions>
"""

BLOCK_XML = """<questions>
  <prompt>Largest ocean?</prompt>
  <correctAnswer>Pacific</correctAnswer>
  <incorrectAnswers>Atlantic</incorrectAnswers>
  <prompt>Fastest land animal?</prompt>
  <correctAnswer>Cheetah</correctAnswer>
  <incorrectAnswers>Lion</incorrectAnswers>
</questions>
"""

EXPECTED = [
    Question("Largest ocean?", "Pacific", ("Atlantic", "Indian")),
    Question("Fastest land animal?", "Cheetah", ("Lion",)),
]


def _records(count: int) -> list[dict[str, object]]:
    return [
        {
            "question": {"text": f"Question {i}?"},
            "correctAnswer": f"Right {i}",
            "incorrectAnswers": [f"Wrong {i}a", f"Wrong {i}b", f"Wrong {i}c"],
        }
        for i in range(1, count + 1)
    ]


def _client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


def test_load_file_questions_tagged(tmp_path: Path) -> None:
    path = tmp_path / "questions.xml"
    path.write_text(TAGGED_XML, encoding="utf-8")

    assert sources.load_file_questions(path) == EXPECTED


def test_load_file_questions_blocks(tmp_path: Path, recording_logger) -> None:
    path = tmp_path / "questions.xml"
    path.write_text(BLOCK_XML, encoding="utf-8")

    questions = sources.load_file_questions(path, logger=recording_logger)

    assert questions == [
        Question("Largest ocean?", "Pacific", ("Atlantic",)),
        Question("Fastest land animal?", "Cheetah", ("Lion",)),
    ]
    assert recording_logger.warnings == []


def test_missing_file_raises_not_found(tmp_path: Path) -> None:
    with pytest.raises(SourceNotFoundError) as excinfo:
        sources.load_file_questions(tmp_path / "questions.xml")

    assert str(excinfo.value) == "questions.xml not found. Exiting."


def test_malformed_file_raises_decode_error(tmp_path: Path) -> None:
    path = tmp_path / "questions.xml"
    path.write_text("<questions><question></questions>", encoding="utf-8")

    with pytest.raises(MarkupDecodeError):
        sources.load_file_questions(path)


def test_empty_file_is_a_decode_error(tmp_path: Path) -> None:
    path = tmp_path / "questions.xml"
    path.write_bytes(b"")

    with pytest.raises(MarkupDecodeError):
        sources.load_file_questions(path)


def test_directory_in_place_of_file_is_a_read_error(tmp_path: Path) -> None:
    with pytest.raises(SourceReadError) as excinfo:
        sources.load_file_questions(tmp_path)

    assert str(excinfo.value).startswith(f"Could not read {tmp_path}:")


def test_inline_markup_keeps_prompt_text(
    tmp_path: Path, recording_logger
) -> None:
    path = tmp_path / "questions.xml"
    path.write_text(
        "<questions><question>"
        "<prompt>Who <b>wrote</b> <i>Hamlet</i>?</prompt>"
        "<correctAnswer>Shakespeare</correctAnswer>"
        "<incorrectAnswer>Marlowe</incorrectAnswer>"
        "</question></questions>",
        encoding="utf-8",
    )

    questions = sources.load_file_questions(path, logger=recording_logger)

    assert questions == [
        Question("Who wrote Hamlet?", "Shakespeare", ("Marlowe",))
    ]
    assert recording_logger.warnings == []


def test_fetch_network_questions_keeps_order() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=_records(5))

    with _client(handler) as client:
        questions = sources.fetch_network_questions(
            "https://trivia.test/questions", limit=5, client=client
        )

    assert [q.text for q in questions] == [f"Question {i}?" for i in range(1, 6)]
    assert questions[0].answer == "Right 1"
    assert seen[0].url.params["limit"] == "5"


def test_fetch_records_unwraps_results_envelope() -> None:
    payload = {"response_code": 0, "results": _records(2)}

    with _client(lambda request: httpx.Response(200, json=payload)) as client:
        records = sources.fetch_records("https://trivia.test", client=client)

    assert len(records) == 2


def test_non_2xx_is_network_error() -> None:
    with _client(lambda request: httpx.Response(503)) as client:
        with pytest.raises(NetworkSourceError, match="503"):
            sources.fetch_records("https://trivia.test", client=client)


def test_transport_failure_is_network_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with _client(handler) as client:
        with pytest.raises(NetworkSourceError, match="connection refused"):
            sources.fetch_records("https://trivia.test", client=client)


@pytest.mark.parametrize(
    "body",
    [
        b"<html>definitely not json</html>",
        json.dumps({"questions": []}).encode(),
        json.dumps("just a string").encode(),
    ],
)
def test_unusable_body_is_decode_error(body: bytes) -> None:
    with _client(lambda request: httpx.Response(200, content=body)) as client:
        with pytest.raises(ResponseDecodeError):
            sources.fetch_records("https://trivia.test", client=client)
