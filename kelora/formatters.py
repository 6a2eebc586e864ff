"""Output formatters turning events into lines of text."""

from __future__ import annotations

import json
import math
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict

from kelora.event import Event, FieldValue, format_field_value

_I64_MIN = -(2**63)
_I64_MAX = 2**63 - 1


def escape_quotes(text: str) -> str:
    """Escape backslashes and double quotes for a quoted logfmt value."""
    return text.replace("\\", "\\\\").replace('"', '\\"')


class Formatter(ABC):
    """Turns an event into a single output line."""

    @abstractmethod
    def format(self, event: Event) -> str:
        """Return the text for one event."""


def _utc(moment: datetime) -> datetime:
    return moment.astimezone(timezone.utc) if moment.tzinfo is not None else moment


def _logfmt_time(moment: datetime) -> str:
    moment = _utc(moment)
    return f"{moment:%Y-%m-%dT%H:%M:%S}.{moment.microsecond // 1000:03d}Z"


def _logfmt_value(value: FieldValue) -> str:
    if isinstance(value, str):
        return f'"{escape_quotes(value)}"'
    if isinstance(value, bool) or value is None:
        return format_field_value(value)
    number = float(value)
    if math.isfinite(number) and number.is_integer():
        return str(min(max(int(number), _I64_MIN), _I64_MAX))
    return format_field_value(number)


class DefaultFormatter(Formatter):
    """Logfmt-style output: core fields first, then the rest sorted by key."""

    def format(self, event: Event) -> str:
        parts = []
        if event.timestamp is not None:
            parts.append(f'timestamp="{_logfmt_time(event.timestamp)}"')
        if event.level is not None:
            parts.append(f'level="{event.level}"')
        if event.message is not None:
            parts.append(f'message="{escape_quotes(event.message)}"')
        parts.extend(
            f"{key}={_logfmt_value(event.fields[key])}" for key in sorted(event.fields)
        )
        return " ".join(parts)


def _rfc3339(moment: datetime) -> str:
    moment = _utc(moment)
    micros = moment.microsecond
    if micros == 0:
        fraction = ""
    elif micros % 1000 == 0:
        fraction = f".{micros // 1000:03d}"
    else:
        fraction = f".{micros:06d}"
    return f"{moment:%Y-%m-%dT%H:%M:%S}{fraction}+00:00"


def _json_number(number: float) -> str:
    """Shortest round-trip float text, with '.0' on integers and compact exponents."""
    if not math.isfinite(number):
        return "0"
    if number == 0:
        return "-0.0" if math.copysign(1.0, number) < 0 else "0.0"
    sign, digit_tuple, exponent = Decimal(repr(number)).as_tuple()
    digits = "".join(map(str, digit_tuple)).lstrip("0")
    stripped = digits.rstrip("0")
    exponent += len(digits) - len(stripped)
    digits = stripped
    length = len(digits)
    point = length + exponent
    prefix = "-" if sign else ""

    if exponent >= 0 and point <= 16:
        body = digits + "0" * exponent + ".0"
    elif 0 < point <= 16:
        body = digits[:point] + "." + digits[point:]
    elif -5 < point <= 0:
        body = "0." + "0" * -point + digits
    elif length == 1:
        body = f"{digits}e{point - 1}"
    else:
        body = f"{digits[0]}.{digits[1:]}e{point - 1}"
    return prefix + body


def _json_value(value: FieldValue) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return json.dumps(value, ensure_ascii=False)
    return _json_number(float(value))


class JsonlFormatter(Formatter):
    """One compact JSON object per event, keys in sorted order."""

    def format(self, event: Event) -> str:
        record: Dict[str, FieldValue] = {}
        if event.timestamp is not None:
            record["timestamp"] = _rfc3339(event.timestamp)
        if event.level is not None:
            record["level"] = event.level
        if event.message is not None:
            record["message"] = event.message
        record.update(event.fields)
        members = (
            f"{json.dumps(key, ensure_ascii=False)}:{_json_value(record[key])}"
            for key in sorted(record)
        )
        return "{" + ",".join(members) + "}"