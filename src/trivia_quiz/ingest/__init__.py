"""Question ingestion: markup parsing, assembly and sources."""

from __future__ import annotations

from .assembler import (
    AssemblerMode,
    assemble,
    assemble_blocks,
    assemble_questions,
    questions_from_records,
)
from .errors import (
    IngestionError,
    MarkupDecodeError,
    NetworkSourceError,
    ResponseDecodeError,
    SourceNotFoundError,
    SourceReadError,
)
from .markup import Fragment, iter_markup_events, parse_fragments
from .sources import (
    DEFAULT_FILE,
    DEFAULT_URL,
    fetch_network_questions,
    fetch_records,
    load_file_questions,
)

__all__ = [
    "AssemblerMode",
    "assemble",
    "assemble_blocks",
    "assemble_questions",
    "questions_from_records",
    "IngestionError",
    "MarkupDecodeError",
    "NetworkSourceError",
    "ResponseDecodeError",
    "SourceNotFoundError",
    "SourceReadError",
    "Fragment",
    "iter_markup_events",
    "parse_fragments",
    "DEFAULT_FILE",
    "DEFAULT_URL",
    "fetch_network_questions",
    "fetch_records",
    "load_file_questions",
]
