"""Log events, their field values and timestamp recognition."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Dict, Iterable, Optional, Union

FieldValue = Union[str, float, bool, None]

TIMESTAMP_KEYS = ("timestamp", "ts", "time", "at", "_t", "@t", "t")
LEVEL_KEYS = ("level", "log_level", "loglevel", "lvl", "severity", "@l")
MESSAGE_KEYS = ("message", "msg", "@m")

_DATE = r"(?P<year>[0-9]{4})-(?P<month>[0-9]{1,2})-(?P<day>[0-9]{1,2})"
_TIME = r"(?P<hour>[0-9]{1,2}):(?P<minute>[0-9]{1,2}):(?P<second>[0-9]{1,2})"
_FRACTION = r"(?:\.(?P<fraction>[0-9]+))?"
_ISO_RE = re.compile(
    _DATE
    + "T"
    + _TIME
    + _FRACTION
    + r"(?:(?P<zulu>Z)|(?P<sign>[+-])(?P<off_h>[0-9]{2}):(?P<off_m>[0-9]{2}))"
)
_PLAIN_RE = re.compile(_DATE + " " + _TIME + _FRACTION)


def parse_timestamp(text: str) -> datetime:
    """Parse a timestamp in one of the recognised formats into an aware UTC datetime.

    Raises ValueError when the text is not a recognised timestamp.
    """
    match = _ISO_RE.fullmatch(text) or _PLAIN_RE.fullmatch(text)
    if match is None:
        raise ValueError(f"unrecognised timestamp: {text!r}")
    groups = match.groupdict()

    tzinfo = timezone.utc
    sign = groups.get("sign")
    if sign:
        hours, minutes = int(groups["off_h"]), int(groups["off_m"])
        if minutes > 59:
            raise ValueError(f"invalid timezone offset in {text!r}")
        delta = timedelta(hours=hours, minutes=minutes)
        tzinfo = timezone(-delta if sign == "-" else delta)

    fraction = (groups["fraction"] or "")[:6].ljust(6, "0")
    moment = datetime(
        int(groups["year"]),
        int(groups["month"]),
        int(groups["day"]),
        int(groups["hour"]),
        int(groups["minute"]),
        int(groups["second"]),
        int(fraction),
        tzinfo=tzinfo,
    )
    return moment.astimezone(timezone.utc)


def _format_number(number: float) -> str:
    """Render a float in plain decimal notation with the shortest exact digits."""
    if math.isnan(number):
        return "NaN"
    if math.isinf(number):
        return "inf" if number > 0 else "-inf"
    return format(Decimal(repr(number)).normalize(), "f")


def format_field_value(value: FieldValue) -> str:
    """Return the plain text form of a field value."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)):
        return _format_number(float(value))
    raise TypeError(f"unsupported field value: {value!r}")


@dataclass
class Event:
    """A parsed log record: core fields plus any other key/value pairs."""

    timestamp: Optional[datetime] = None
    level: Optional[str] = None
    message: Optional[str] = None
    fields: Dict[str, FieldValue] = field(default_factory=dict)

    def set_field(self, key: str, value: FieldValue) -> None:
        self.fields[key] = value

    def filter_keys(self, keys: Iterable[str]) -> None:
        """Keep only the requested keys that exist, core fields included."""
        kept: Dict[str, FieldValue] = {}
        keep_timestamp = keep_level = keep_message = False

        for key in keys:
            if key in TIMESTAMP_KEYS:
                keep_timestamp = keep_timestamp or self.timestamp is not None
            elif key in LEVEL_KEYS:
                keep_level = keep_level or self.level is not None
            elif key in MESSAGE_KEYS:
                keep_message = keep_message or self.message is not None
            elif key in self.fields:
                kept[key] = self.fields[key]

        if not keep_timestamp:
            self.timestamp = None
        if not keep_level:
            self.level = None
        if not keep_message:
            self.message = None
        self.fields = kept

    def extract_core_fields(self) -> None:
        """Fill timestamp, level and message from well-known field names."""
        for key in TIMESTAMP_KEYS:
            value = self.fields.get(key)
            if isinstance(value, str):
                try:
                    self.timestamp = parse_timestamp(value)
                except ValueError:
                    continue
                break

        level = next(
            (v for k in LEVEL_KEYS if isinstance(v := self.fields.get(k), str)), None
        )
        if level is not None:
            self.level = level

        message = next(
            (v for k in MESSAGE_KEYS if isinstance(v := self.fields.get(k), str)), None
        )
        if message is not None:
            self.message = message

    def has_displayable_content(self) -> bool:
        return (
            self.timestamp is not None
            or self.level is not None
            or self.message is not None
            or bool(self.fields)
        )