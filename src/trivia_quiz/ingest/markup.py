"""Streaming markup parser producing tag-labeled text fragments.

Parsing happens in two layers. :func:`iter_markup_events` feeds a byte
stream through the stdlib incremental SAX parser and yields plain
open/close/text events; a malformed stream raises
:class:`~trivia_quiz.ingest.errors.MarkupDecodeError`. :func:`parse_fragments`
then walks any event iterable and emits one :class:`Fragment` per element
close. It knows nothing about questions.
"""

from __future__ import annotations

import logging
import xml.sax
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import BinaryIO, Union
from xml.sax.handler import (
    ContentHandler,
    feature_external_ges,
    feature_namespaces,
)

from .errors import MarkupDecodeError

__all__ = [
    "Fragment",
    "StartElement",
    "EndElement",
    "Characters",
    "MarkupEvent",
    "ParserState",
    "iter_markup_events",
    "parse_fragments",
]

_LOGGER = logging.getLogger(__name__)
_CHUNK_SIZE = 64 * 1024


@dataclass(frozen=True)
class Fragment:
    """Text content of one closed element.

    ``path`` lists the enclosing element names, outermost first. An empty
    path means the context is unknown.
    """

    tag: str
    text: str
    path: tuple[str, ...] = ()

    @property
    def parent(self) -> str | None:
        return self.path[-1] if self.path else None


@dataclass(frozen=True)
class StartElement:
    name: str


@dataclass(frozen=True)
class EndElement:
    name: str


@dataclass(frozen=True)
class Characters:
    text: str


MarkupEvent = Union[StartElement, EndElement, Characters]


@dataclass
class ParserState:
    """Open-element stack with one text buffer per open element."""

    stack: list[str] = field(default_factory=list)
    buffers: list[list[str]] = field(default_factory=list)

    @property
    def current(self) -> str | None:
        return self.stack[-1] if self.stack else None

    def open(self, name: str) -> None:
        self.stack.append(name)
        self.buffers.append([])

    def append_text(self, text: str) -> None:
        if self.buffers:
            self.buffers[-1].append(text)

    def close(self) -> Fragment:
        """Pop the current element; its raw text also joins the parent's."""

        tag = self.stack.pop()
        raw = "".join(self.buffers.pop())
        self.append_text(raw)
        return Fragment(tag=tag, text=raw.strip(), path=tuple(self.stack))


class _EventCollector(ContentHandler):
    def __init__(self) -> None:
        super().__init__()
        self.events: list[MarkupEvent] = []

    def startElement(self, name, attrs):  # noqa: N802 - SAX API
        self.events.append(StartElement(_local_name(name)))

    def endElement(self, name):  # noqa: N802 - SAX API
        self.events.append(EndElement(_local_name(name)))

    def characters(self, content):
        self.events.append(Characters(content))

    def take(self) -> list[MarkupEvent]:
        pending, self.events = self.events, []
        return pending


def iter_markup_events(
    stream: BinaryIO, *, chunk_size: int = _CHUNK_SIZE
) -> Iterator[MarkupEvent]:
    """Yield markup events from ``stream`` as it is read chunk by chunk."""

    collector = _EventCollector()
    parser = xml.sax.make_parser()
    parser.setFeature(feature_namespaces, False)
    parser.setFeature(feature_external_ges, False)
    parser.setContentHandler(collector)

    fed = False
    while True:
        chunk = stream.read(chunk_size)
        if not chunk:
            break
        fed = True
        _feed(parser, chunk)
        yield from collector.take()
    if not fed:
        # expat only reports a missing root element once it has seen input.
        _feed(parser, b"")
    _feed(parser, None)
    yield from collector.take()


def parse_fragments(
    events: Iterable[MarkupEvent],
    *,
    logger: logging.Logger | None = None,
) -> Iterator[Fragment]:
    """Turn markup events into fragments, warning on stray closing tags."""

    log = logger or _LOGGER
    state = ParserState()
    for event in events:
        fragment = _handle_event(state, event, log)
        if fragment is not None:
            yield fragment
    if state.stack:
        log.warning(
            "Markup ended with unclosed element(s): %s",
            ", ".join(state.stack),
        )


def _handle_event(
    state: ParserState, event: MarkupEvent, log: logging.Logger
) -> Fragment | None:
    if isinstance(event, StartElement):
        state.open(event.name)
        return None
    if isinstance(event, Characters):
        state.append_text(event.text)
        return None
    if isinstance(event, EndElement):
        if event.name == state.current:
            return state.close()
        if state.current is None:
            log.warning("Unexpected closing tag </%s> ignored.", event.name)
        else:
            log.warning(
                "Unexpected closing tag </%s> while <%s> is open; ignored.",
                event.name,
                state.current,
            )
        return None
    raise TypeError(f"Unsupported markup event: {event!r}")


def _feed(parser, chunk: bytes | None) -> None:
    try:
        if chunk is None:
            parser.close()
        else:
            parser.feed(chunk)
    except (xml.sax.SAXException, LookupError) as exc:
        raise MarkupDecodeError(f"Error: {exc}") from exc


def _local_name(name: str) -> str:
    return name.rpartition(":")[2]
