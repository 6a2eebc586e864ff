"""Parsers turning single log lines into events."""

from __future__ import annotations

import json
import math
import re
from abc import ABC, abstractmethod
from typing import Any

from kelora.event import Event, FieldValue

_I64_MIN = -(2**63)
_I64_MAX = 2**63 - 1
_U32_MAX = 2**32 - 1

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")
_FLOAT_RE = re.compile(
    r"[+-]?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|inf|infinity|nan)",
    re.IGNORECASE,
)

_SYSLOG_LEVELS = (
    "EMERGENCY",
    "ALERT",
    "CRITICAL",
    "ERROR",
    "WARNING",
    "NOTICE",
    "INFO",
    "DEBUG",
)


class ParseError(ValueError):
    """Raised when a line cannot be turned into an event."""


class LogParser(ABC):
    """Turns one line of input into an event."""

    @abstractmethod
    def parse(self, line: str) -> Event:
        """Parse a line, raising ParseError when it is not understood."""


def parse_field_value(value: str) -> FieldValue:
    """Interpret a raw text value as null, boolean, number or string."""
    if value == "null":
        return None
    if value == "true":
        return True
    if value == "false":
        return False
    if _INTEGER_RE.fullmatch(value):
        number = int(value)
        if _I64_MIN <= number <= _I64_MAX:
            return float(number)
    if _FLOAT_RE.fullmatch(value):
        return float(value)
    return value


class LogfmtParser(LogParser):
    """Parses key=value pairs, values optionally in double quotes."""

    _PAIR_RE = re.compile(r'([a-zA-Z_][a-zA-Z0-9_-]*)=(?:"([^"]*)"|([^\s]+))')

    def parse(self, line: str) -> Event:
        event = Event()
        if not line.strip():
            return event

        for match in self._PAIR_RE.finditer(line):
            key, quoted, bare = match.groups()
            raw = quoted if quoted is not None else bare
            if raw is None:
                continue
            event.set_field(key, parse_field_value(raw))

        event.extract_core_fields()
        return event


def _finite_float(text: str) -> float:
    number = float(text)
    if not math.isfinite(number):
        raise ValueError(f"number out of range: {text}")
    return number


def _reject_constant(name: str) -> Any:
    raise ValueError(f"invalid literal: {name}")


def _to_field_value(value: Any) -> FieldValue:
    if value is None or isinstance(value, (bool, str)):
        return value
    if isinstance(value, int):
        try:
            number = float(value)
        except OverflowError as exc:
            raise ValueError(f"number out of range: {value}") from exc
        if not math.isfinite(number):
            raise ValueError(f"number out of range: {value}")
        return number
    if isinstance(value, float):
        return value
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False, sort_keys=True)


class JsonlParser(LogParser):
    """Parses one JSON object per line."""

    def parse(self, line: str) -> Event:
        try:
            document = json.loads(
                line, parse_float=_finite_float, parse_constant=_reject_constant
            )
            if not isinstance(document, dict):
                raise ParseError("Invalid format: Expected JSON object")
            fields = {key: _to_field_value(value) for key, value in document.items()}
        except ParseError:
            raise
        except ValueError as exc:
            raise ParseError(f"JSON error: {exc}") from exc

        event = Event()
        for key, value in fields.items():
            event.set_field(key, value)
        event.extract_core_fields()
        return event


class SyslogParser(LogParser):
    """Parses RFC 3164 style syslog lines; unmatched lines become plain messages."""

    _SYSLOG_RE = re.compile(
        r"^(?:<(\d+)>)?(\w{3}\s+\d{1,2}\s+\d{2}:\d{2}:\d{2})\s+(\S+)\s+"
        r"([^:\[]+)(?:\[(\d+)\])?\s*:\s*(.*)\Z"
    )

    def parse(self, line: str) -> Event:
        event = Event()
        match = self._SYSLOG_RE.match(line)

        if match is None:
            event.message = line
            event.set_field("message", line)
            event.extract_core_fields()
            return event

        priority, timestamp, hostname, process, pid, message = match.groups()

        if priority is not None and priority.isascii():
            pri = int(priority)
            if pri <= _U32_MAX:
                severity = pri & 7
                event.set_field("priority", float(pri))
                event.set_field("facility", float(pri >> 3))
                event.set_field("severity", float(severity))
                event.level = _SYSLOG_LEVELS[severity]

        event.set_field("timestamp", timestamp)
        event.set_field("hostname", hostname)
        event.set_field("process", process)

        if pid is not None and pid.isascii():
            event.set_field("pid", float(pid))

        event.message = message
        event.set_field("message", message)

        event.extract_core_fields()
        return event