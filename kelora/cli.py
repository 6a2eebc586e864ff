"""Command line front end: read log lines, filter them, print events and statistics."""

from __future__ import annotations

import argparse
import os
import sys
from contextlib import ExitStack
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import BinaryIO, Dict, Iterable, Iterator, List, Optional, Sequence, TextIO, Union

from kelora.event import Event
from kelora.formatters import DefaultFormatter, Formatter, JsonlFormatter
from kelora.parsers import JsonlParser, LogfmtParser, LogParser, ParseError, SyslogParser

VERSION = "0.1.1"
CORE_KEYS = ("timestamp", "level", "message")


class InputFormat(Enum):
    LOGFMT = "logfmt"
    JSONL = "jsonl"
    SYSLOG = "syslog"


class OutputFormat(Enum):
    DEFAULT = "default"
    JSONL = "jsonl"


def _format_time(moment: datetime) -> str:
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return f"{moment:%Y-%m-%dT%H:%M:%S}.{moment.microsecond // 1000:03d}Z"


def format_duration(duration: timedelta) -> str:
    """Render a duration in whole seconds as e.g. '1h1m1s', '1m1s' or '30s'."""
    micros = (duration.days * 86400 + duration.seconds) * 1_000_000 + duration.microseconds
    sign = -1 if micros < 0 else 1
    seconds = abs(micros) // 1_000_000
    hours = sign * (seconds // 3600)
    minutes = sign * ((seconds % 3600) // 60)
    secs = sign * (seconds % 60)

    if hours > 0:
        return f"{hours}h{minutes}m{secs}s"
    if minutes > 0:
        return f"{minutes}m{secs}s"
    return f"{secs}s"


@dataclass
class Stats:
    """Counters gathered while processing input."""

    lines_seen: int = 0
    events_shown: int = 0
    parse_errors: int = 0
    filtered_out: int = 0
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    levels_seen: Dict[str, int] = field(default_factory=dict)

    def record_event(self, event: Event) -> None:
        self.events_shown += 1

        if event.timestamp is not None:
            if self.start_time is None or event.timestamp < self.start_time:
                self.start_time = event.timestamp
            if self.end_time is None or event.timestamp > self.end_time:
                self.end_time = event.timestamp

        if event.level is not None:
            self.levels_seen[event.level] = self.levels_seen.get(event.level, 0) + 1

    def print_stats(self, stream: Optional[TextIO] = None) -> None:
        """Write a summary of the counters, by default to standard error."""
        out = sys.stderr if stream is None else stream
        print(
            f"Events shown: {self.events_shown} (parse errors: {self.parse_errors}, "
            f"lines seen: {self.lines_seen}, filtered: {self.filtered_out})",
            file=out,
        )

        if self.start_time is not None and self.end_time is not None:
            print(
                f"Time span: {_format_time(self.start_time)} to {_format_time(self.end_time)} "
                f"(duration: {format_duration(self.end_time - self.start_time)})",
                file=out,
            )

        if self.levels_seen:
            summary = ", ".join(
                f"{level}({count})" for level, count in sorted(self.levels_seen.items())
            )
            print(f"Log levels: {summary}", file=out)


def create_parser(input_format: Union[InputFormat, str]) -> LogParser:
    parsers = {
        InputFormat.LOGFMT: LogfmtParser,
        InputFormat.JSONL: JsonlParser,
        InputFormat.SYSLOG: SyslogParser,
    }
    return parsers[InputFormat(input_format)]()


def create_formatter(output_format: Union[OutputFormat, str]) -> Formatter:
    formatters = {
        OutputFormat.DEFAULT: DefaultFormatter,
        OutputFormat.JSONL: JsonlFormatter,
    }
    return formatters[OutputFormat(output_format)]()


def prepare_levels_filter(levels: Sequence[str]) -> Optional[List[str]]:
    """Upper-case the requested levels, or None when no level filter is wanted."""
    if not levels:
        return None
    return [level.upper() for level in levels]


def prepare_keys_filter(keys: Sequence[str], common: bool) -> Optional[List[str]]:
    """Return the keys to keep: the core fields, the given keys, or None for all."""
    if common:
        return list(CORE_KEYS)
    if keys:
        return list(keys)
    return None


def process_lines(
    lines: Iterable[str],
    parser: LogParser,
    formatter: Formatter,
    stats: Stats,
    levels_filter: Optional[Sequence[str]],
    keys_filter: Optional[Sequence[str]],
    *,
    stats_only: bool = False,
    debug: bool = False,
    output: Optional[TextIO] = None,
    errors: Optional[TextIO] = None,
) -> None:
    """Parse, filter and print each line, updating the statistics as it goes."""
    out = sys.stdout if output is None else output
    err = sys.stderr if errors is None else errors

    for line_number, line in enumerate(lines, start=1):
        stats.lines_seen += 1
        if not line.strip():
            continue

        try:
            event = parser.parse(line)
        except ParseError as exc:
            stats.parse_errors += 1
            if debug:
                print(f"Parse error on line {line_number}: {exc}", file=err)
            continue

        if levels_filter is not None:
            if event.level is None or event.level.upper() not in levels_filter:
                stats.filtered_out += 1
                continue

        if keys_filter is not None:
            event.filter_keys(keys_filter)
            if not event.has_displayable_content():
                stats.filtered_out += 1
                continue

        stats.record_event(event)

        if not stats_only:
            try:
                out.write(formatter.format(event) + "\n")
            except BrokenPipeError:
                break


class _ReadError(Exception):
    """Raised when an input line cannot be decoded."""


def _read_lines(stream: BinaryIO) -> Iterator[str]:
    for number, raw in enumerate(stream, start=1):
        if raw.endswith(b"\n"):
            raw = raw[:-1]
            if raw.endswith(b"\r"):
                raw = raw[:-1]
        try:
            yield raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise _ReadError(f"Failed to read line {number}: {exc}") from exc


def _split_commas(values: Optional[List[str]]) -> List[str]:
    return [part for value in values or [] for part in value.split(",")]


def build_arg_parser() -> argparse.ArgumentParser:
    arg_parser = argparse.ArgumentParser(
        prog="kelora", description="A fast, extensible log parser"
    )
    arg_parser.add_argument(
        "files", nargs="*", help="Input files (stdin if not specified)"
    )
    arg_parser.add_argument(
        "-f",
        "--format",
        dest="input_format",
        choices=[fmt.value for fmt in InputFormat],
        default=InputFormat.LOGFMT.value,
        help="Input format",
    )
    arg_parser.add_argument(
        "-F",
        "--output-format",
        dest="output_format",
        choices=[fmt.value for fmt in OutputFormat],
        default=OutputFormat.DEFAULT.value,
        help="Output format",
    )
    arg_parser.add_argument(
        "-k", "--keys", action="append", help="Only show specific keys (comma-separated)"
    )
    arg_parser.add_argument(
        "-l",
        "--level",
        dest="levels",
        action="append",
        help="Filter by log levels (comma-separated)",
    )
    arg_parser.add_argument(
        "-S", "--stats-only", action="store_true", help="Show statistics only"
    )
    arg_parser.add_argument(
        "-s", "--stats", action="store_true", help="Show statistics alongside output"
    )
    arg_parser.add_argument("--debug", action="store_true", help="Enable debug output")
    arg_parser.add_argument(
        "-c",
        "--common",
        action="store_true",
        help="Show only core fields (timestamp, level, message)",
    )
    arg_parser.add_argument(
        "-V", "--version", action="version", version=f"kelora {VERSION}"
    )
    return arg_parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)

    parser = create_parser(args.input_format)
    formatter = create_formatter(args.output_format)
    stats = Stats()
    levels_filter = prepare_levels_filter(_split_commas(args.levels))
    keys_filter = prepare_keys_filter(_split_commas(args.keys), args.common)

    with ExitStack() as stack:
        sources: List[BinaryIO] = []
        if not args.files:
            sources.append(sys.stdin.buffer)
        for path in args.files:
            try:
                sources.append(stack.enter_context(open(path, "rb")))
            except OSError as exc:
                print(
                    f"Error: Failed to open file: {path}\n\nCaused by:\n    {exc.strerror or exc}",
                    file=sys.stderr,
                )
                return 1

        for source in sources:
            try:
                process_lines(
                    _read_lines(source),
                    parser,
                    formatter,
                    stats,
                    levels_filter,
                    keys_filter,
                    stats_only=args.stats_only,
                    debug=args.debug,
                )
            except _ReadError as exc:
                print(f"Error: {exc}", file=sys.stderr)
                return 1

    if args.stats_only or args.stats:
        stats.print_stats()

    try:
        sys.stdout.flush()
    except BrokenPipeError:
        devnull = os.open(os.devnull, os.O_WRONLY)
        os.dup2(devnull, sys.stdout.fileno())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())