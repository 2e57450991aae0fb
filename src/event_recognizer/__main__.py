"""Entry point for ``python -m event_recognizer``.

Provides a CLI that recognizes events in free text and exports them as an
iCalendar file.  Uses stdlib :mod:`argparse` for argument parsing.

Subcommands:
    recognize -- Send text to Gemini, list the events, write events.ics.
    encode    -- Offline: read a JSON event array from a file and write
                 events.ics without calling Gemini.

When no event is selected (none recognized, an empty array, or all
excluded) neither subcommand writes events.ics.

Exit codes:
    0 -- Completed successfully (including zero events).
    1 -- An error occurred (bad input, config error, upstream failure).
    2 -- Argument parsing error (handled by argparse).
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from event_recognizer.calendar_encoder import DEFAULT_PRODUCT_ID, export_calendar
from event_recognizer.config import ConfigError, load_settings
from event_recognizer.demo_output import NOTHING_SELECTED, format_export, print_events
from event_recognizer.exceptions import EventRecognizerError
from event_recognizer.llm import GeminiClient
from event_recognizer.log import setup_logging
from event_recognizer.models.event import Event
from event_recognizer.response_parser import parse
from event_recognizer.selection import Selection, count_selected, select_all, toggle
from event_recognizer.session import RecognizerSession


def _add_export_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--output",
        type=str,
        default=".",
        help="Directory to write events.ics into (default: current directory).",
    )
    parser.add_argument(
        "--exclude",
        type=int,
        action="append",
        default=[],
        metavar="N",
        help="Deselect the N-th listed event before export (repeatable).",
    )
    parser.add_argument(
        "--no-export",
        action="store_true",
        default=False,
        help="List the events without writing a calendar file.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Enable debug-level logging.",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build and return the CLI argument parser with subcommands.

    Returns:
        Configured :class:`argparse.ArgumentParser` with ``recognize`` and
        ``encode`` subcommands.
    """
    parser = argparse.ArgumentParser(
        prog="event-recognizer",
        description="Recognize events in free text and export them as an .ics file.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # --- "recognize" subcommand ---------------------------------------
    recognize_parser = subparsers.add_parser(
        "recognize",
        help="Recognize events in text via Gemini and export them.",
    )
    recognize_parser.add_argument(
        "text",
        nargs="?",
        default=None,
        help="Event description, or '-' to read it from stdin.",
    )
    recognize_parser.add_argument(
        "--file",
        type=str,
        default=None,
        help="Read the event description from this file instead.",
    )
    _add_export_options(recognize_parser)

    # --- "encode" subcommand ------------------------------------------
    encode_parser = subparsers.add_parser(
        "encode",
        help="Export a JSON array of events from a file without calling Gemini.",
    )
    encode_parser.add_argument(
        "events_file",
        type=str,
        help="Path to a JSON file holding an array of event objects.",
    )
    encode_parser.add_argument(
        "--product-id",
        type=str,
        default=DEFAULT_PRODUCT_ID,
        help="PRODID written into the calendar header.",
    )
    _add_export_options(encode_parser)

    return parser


def _read_text(args: argparse.Namespace) -> str:
    """Resolve the input text from ``--file``, stdin or the positional arg.

    Raises:
        ValueError: If no input was given.
        OSError: If the input file cannot be read.
    """
    if args.file is not None:
        return Path(args.file).read_text(encoding="utf-8")
    if args.text == "-":
        return sys.stdin.read()
    if args.text is None:
        raise ValueError("No input text given (pass TEXT, '-' or --file)")
    return args.text


def _apply_excludes(
    events: list[Event],
    selection: Selection,
    positions: list[int],
) -> Selection:
    """Deselect events by their 1-based display position.

    Raises:
        ValueError: If a position is out of range.
    """
    for position in positions:
        if not 1 <= position <= len(events):
            raise ValueError(
                f"--exclude {position} is out of range (1-{len(events)})"
            )
        event_id = events[position - 1].id
        if event_id in selection:
            selection = toggle(selection, event_id)
    return selection


def _handle_recognize(args: argparse.Namespace) -> int:
    """Execute the ``recognize`` subcommand.

    Args:
        args: Parsed arguments from the ``recognize`` subparser.

    Returns:
        Exit code: ``0`` on success, ``1`` on error.
    """
    try:
        text = _read_text(args)
    except (ValueError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    try:
        settings = load_settings()
    except ConfigError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if not args.verbose:
        try:
            setup_logging(settings.log_level)
        except ValueError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            return 1

    client = GeminiClient(
        api_key=settings.gemini_api_key,
        model=settings.gemini_model,
        timeout_ms=settings.request_timeout_ms,
    )
    session = RecognizerSession(
        client,
        policy=settings.rate_policy,
        product_id=settings.product_id,
    )

    try:
        session.recognize(text)
    except EventRecognizerError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    events = session.events
    try:
        excluded = _apply_excludes(events, session.selection, args.exclude)
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    for event_id in session.selection - excluded:
        session.toggle(event_id)

    print_events(events, session.selection)
    if args.no_export:
        return 0
    if session.selected_count == 0:
        print(NOTHING_SELECTED)
        return 0

    path = session.export().write_to(args.output)
    print(format_export(path, session.selected_count))
    return 0


def _handle_encode(args: argparse.Namespace) -> int:
    """Execute the ``encode`` subcommand.

    Args:
        args: Parsed arguments from the ``encode`` subparser.

    Returns:
        Exit code: ``0`` on success, ``1`` on error.
    """
    events_path = Path(args.events_file)
    if not events_path.is_file():
        print(f"Error: File not found: {events_path}", file=sys.stderr)
        return 1

    try:
        events = parse(events_path.read_text(encoding="utf-8"))
        selection = _apply_excludes(events, select_all(events), args.exclude)
    except (EventRecognizerError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print_events(events, selection)
    if args.no_export:
        return 0
    count = count_selected(events, selection)
    if count == 0:
        print(NOTHING_SELECTED)
        return 0

    calendar_file = export_calendar(events, selection, args.product_id)
    path = calendar_file.write_to(args.output)
    print(format_export(path, count))
    return 0


def main(argv: list[str] | None = None) -> int:
    """Run the event-recognizer CLI.

    Args:
        argv: Command-line arguments.  Defaults to ``sys.argv[1:]``
            when ``None`` (the normal case).

    Returns:
        Exit code: ``0`` on success, ``1`` on error.
    """
    parser = build_parser()
    args = parser.parse_args(argv if argv is not None else sys.argv[1:])

    if args.command is None:
        parser.print_help()
        return 0

    # --- Configure logging --------------------------------------------
    setup_logging("DEBUG" if args.verbose else "INFO")

    if args.command == "encode":
        return _handle_encode(args)
    return _handle_recognize(args)


if __name__ == "__main__":
    raise SystemExit(main())
