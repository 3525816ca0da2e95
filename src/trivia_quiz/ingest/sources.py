"""Question sources: the local XML file and the network trivia endpoint."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path

import httpx

from ..models import Question
from .assembler import AssemblerMode, assemble, questions_from_records
from .errors import (
    NetworkSourceError,
    ResponseDecodeError,
    SourceNotFoundError,
    SourceReadError,
)
from .markup import iter_markup_events, parse_fragments

__all__ = [
    "DEFAULT_FILE",
    "DEFAULT_URL",
    "load_file_questions",
    "fetch_records",
    "fetch_network_questions",
]

DEFAULT_FILE = Path("questions.xml")
DEFAULT_URL = "https://the-trivia-api.com/v2/questions"
DEFAULT_TIMEOUT = 10.0

_LOGGER = logging.getLogger(__name__)


def load_file_questions(
    path: Path = DEFAULT_FILE,
    *,
    mode: AssemblerMode = "auto",
    logger: logging.Logger | None = None,
) -> list[Question]:
    """Parse the XML question file at ``path``."""

    log = logger or _LOGGER
    try:
        handle = path.open("rb")
    except FileNotFoundError as exc:
        raise SourceNotFoundError(path) from exc
    except OSError as exc:
        raise SourceReadError(path, exc) from exc
    with handle:
        log.debug("Reading questions from %s", path)
        fragments = parse_fragments(iter_markup_events(handle), logger=log)
        questions = assemble(fragments, mode=mode, logger=log)
    log.info(
        "Loaded %d question(s) from file",
        len(questions),
        extra={"source": str(path)},
    )
    return questions


def fetch_records(
    url: str = DEFAULT_URL,
    *,
    limit: int | None = None,
    timeout: float = DEFAULT_TIMEOUT,
    client: httpx.Client | None = None,
) -> list[object]:
    """GET ``url`` and return the decoded list of question records.

    A ``{"results": [...]}`` envelope is unwrapped. ``client`` is used as-is
    and left open; otherwise a short-lived client is created.
    """

    params = {"limit": limit} if limit is not None else None
    owns_client = client is None
    http = client or httpx.Client(timeout=timeout, follow_redirects=True)
    try:
        response = http.get(url, params=params)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise NetworkSourceError(
            "Trivia endpoint answered {0} for {1}.".format(
                exc.response.status_code, url
            )
        ) from exc
    except httpx.HTTPError as exc:
        raise NetworkSourceError(
            f"Could not fetch questions from {url}: {exc}"
        ) from exc
    finally:
        if owns_client:
            http.close()

    try:
        payload = response.json()
    except ValueError as exc:
        raise ResponseDecodeError(
            f"Trivia endpoint returned invalid JSON: {exc}"
        ) from exc
    if isinstance(payload, Mapping) and isinstance(
        payload.get("results"), list
    ):
        payload = payload["results"]
    if not isinstance(payload, list):
        raise ResponseDecodeError(
            "Trivia endpoint returned {0}, expected a list of questions.".format(
                type(payload).__name__
            )
        )
    return payload


def fetch_network_questions(
    url: str = DEFAULT_URL,
    *,
    limit: int | None = None,
    timeout: float = DEFAULT_TIMEOUT,
    client: httpx.Client | None = None,
    logger: logging.Logger | None = None,
) -> list[Question]:
    """Fetch and assemble questions from the trivia endpoint."""

    log = logger or _LOGGER
    log.debug("Fetching questions from %s", url)
    records = fetch_records(url, limit=limit, timeout=timeout, client=client)
    questions = questions_from_records(records, logger=log)
    log.info(
        "Loaded %d question(s) from network",
        len(questions),
        extra={"source": url},
    )
    return questions
