"""Command line entry point for the terminal trivia quiz."""

from __future__ import annotations

import argparse
import logging
import sys
from importlib import metadata
from pathlib import Path
from typing import Sequence

from dotenv import find_dotenv, load_dotenv
from rich.console import Console
from rich.text import Text

from trivia_quiz.core import config as core_config
from trivia_quiz.core import workspace as workspace_mod
from trivia_quiz.core.logging import configure_logger
from trivia_quiz.core.workspace import WorkspaceError

from .config import (
    ASSEMBLER_CHOICES,
    CONFIG_FILENAME,
    SOURCE_CHOICES,
    ConfigOverrides,
    TriviaConfig,
    TriviaConfigError,
    load_config,
)
from .ingest import (
    IngestionError,
    fetch_network_questions,
    load_file_questions,
)
from .models import Question
from .quiz import (
    KeySource,
    QuizEngine,
    RichQuizView,
    TerminalKeySource,
    choose_source,
)

LOGGER_NAME = "trivia_quiz"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="trivia",
        description=(
            "Answer multiple-choice trivia in the terminal, one keypress per "
            "question."
        ),
        epilog=(
            "Run `trivia config init` to scaffold the default trivia.toml "
            "template."
        ),
    )
    parser.add_argument(
        "--source",
        choices=SOURCE_CHOICES,
        help="Where to load questions from ('ask' shows a menu).",
    )
    parser.add_argument(
        "--file",
        type=Path,
        dest="question_file",
        help="Question XML file (defaults to ./questions.xml).",
    )
    parser.add_argument("--url", help="Trivia endpoint for the network source.")
    parser.add_argument(
        "--assembler",
        choices=ASSEMBLER_CHOICES,
        help="How question boundaries are detected in the XML file.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help=(
            "Path to a TOML config file (defaults to the workspace config "
            "directory)."
        ),
    )
    parser.add_argument(
        "--workspace",
        type=Path,
        help="Override the workspace root holding config and logs.",
    )
    parser.add_argument(
        "--log-level",
        help="Set the logging level for the run (defaults to INFO).",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        default=None,
        help="Mirror all log output to stderr.",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=_package_version(),
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args_list = list(argv) if argv is not None else list(sys.argv[1:])

    if args_list[:1] == ["config"]:
        return _handle_config(args_list[1:])

    parser = _build_parser()
    args = parser.parse_args(args_list)

    load_dotenv(find_dotenv(usecwd=True))
    overrides = ConfigOverrides(
        source=args.source,
        question_file=args.question_file,
        url=args.url,
        assembler=args.assembler,
        log_level=args.log_level,
        verbose=args.verbose,
    )
    try:
        load_result = load_config(
            config_path=args.config,
            overrides=overrides,
            workspace_path=args.workspace,
        )
    except TriviaConfigError as exc:
        parser.error(str(exc))

    config = load_result.config
    logger, _ = configure_logger(
        LOGGER_NAME,
        log_dir=load_result.layout.path_for("logs"),
        level=config.log_level,
        verbose=config.verbose,
    )
    logger.debug(
        "trivia CLI invoked",
        extra={"config_path": load_result.config_path},
    )

    console = _make_console()
    keys = _make_key_source()
    try:
        return run_quiz(config, console=console, keys=keys, logger=logger)
    except KeyboardInterrupt:
        return 0
    except EOFError:
        sys.stderr.write("Input closed. Exiting.\n")
        return 1


def run_quiz(
    config: TriviaConfig,
    *,
    console: Console,
    keys: KeySource,
    logger: logging.Logger,
) -> int:
    """Pick a source, ingest every question, then play them in order."""

    source = config.source
    if source == "ask":
        source = choose_source(console, keys)
    logger.info("Question source selected", extra={"source": source})

    try:
        questions = _load_questions(source, config, logger)
    except IngestionError as exc:
        logger.info(
            "Ingestion failed",
            extra={"source": source, "error": str(exc)},
        )
        console.print(Text(str(exc), style="red"), highlight=False)
        return 1

    if not questions:
        logger.warning("No questions were loaded.")

    engine = QuizEngine(
        keys,
        RichQuizView(console, show_correct_answer=config.show_correct_answer),
        logger=logger,
    )
    tally = engine.run(questions)
    logger.info(
        "Quiz finished",
        extra={"correct": tally.correct, "incorrect": tally.incorrect},
    )
    return 0


def _load_questions(
    source: str, config: TriviaConfig, logger: logging.Logger
) -> list[Question]:
    if source == "network":
        return fetch_network_questions(
            config.url,
            limit=config.limit,
            timeout=config.timeout_seconds,
            logger=logger,
        )
    return load_file_questions(
        config.question_file,
        mode=config.assembler,  # type: ignore[arg-type]
        logger=logger,
    )


def _make_console() -> Console:
    return Console()


def _make_key_source() -> KeySource:
    return TerminalKeySource()


def _package_version() -> str:
    try:
        return metadata.version("terminal-trivia")
    except metadata.PackageNotFoundError:
        return "unknown"


def _handle_config(argv: Sequence[str]) -> int:
    parser = _build_config_parser()
    args = parser.parse_args(argv)
    return _handle_config_init(args)


def _build_config_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="trivia config",
        description="Manage the trivia quiz configuration file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    init_parser = subparsers.add_parser(
        "init",
        help="Write the default trivia.toml template.",
    )
    init_parser.add_argument(
        "--path",
        type=Path,
        help=(
            "Destination for the config TOML (defaults to the workspace "
            "config directory)."
        ),
    )
    init_parser.add_argument(
        "--workspace",
        type=Path,
        help="Workspace root used when resolving the default config path.",
    )
    init_parser.add_argument(
        "--force",
        action="store_true",
        help="Overwrite the destination if a config already exists.",
    )
    return parser


def _handle_config_init(args: argparse.Namespace) -> int:
    try:
        target = _resolve_config_target(args)
    except WorkspaceError as exc:
        sys.stderr.write(str(exc) + "\n")
        return 1

    try:
        written = core_config.write_template(target, overwrite=args.force)
    except core_config.TomlConfigError as exc:
        sys.stderr.write(str(exc) + "\n")
        return 1

    sys.stdout.write(f"Wrote trivia config to {written}\n")
    return 0


def _resolve_config_target(args: argparse.Namespace) -> Path:
    if args.path is not None:
        candidate = args.path.expanduser()
        if not candidate.is_absolute():
            candidate = (Path.cwd() / candidate).resolve()
        return candidate

    layout = workspace_mod.ensure_workspace(path=args.workspace)
    return layout.path_for("config") / CONFIG_FILENAME


if __name__ == "__main__":  # pragma: no cover - module CLI guard
    raise SystemExit(main())
