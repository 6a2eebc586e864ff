from datetime import datetime, timezone

import pytest

from kelora.event import Event, format_field_value, parse_timestamp


def test_parse_iso_with_subseconds():
    ts = parse_timestamp("2023-07-18T15:04:23.456Z")
    assert ts == datetime(2023, 7, 18, 15, 4, 23, 456000, tzinfo=timezone.utc)
    assert ts.utcoffset().total_seconds() == 0


def test_parse_iso_without_subseconds_matches_zero_fraction():
    assert parse_timestamp("2023-07-18T15:04:23Z") == parse_timestamp(
        "2023-07-18T15:04:23.000Z"
    )


def test_parse_offset_is_converted_to_utc():
    assert parse_timestamp("2023-07-18T17:04:23+02:00") == parse_timestamp(
        "2023-07-18T15:04:23Z"
    )
    assert parse_timestamp("2023-07-18T12:04:23.5-03:00") == parse_timestamp(
        "2023-07-18T15:04:23.5Z"
    )


def test_parse_space_separated_format():
    assert parse_timestamp("2023-07-18 15:04:24") == parse_timestamp(
        "2023-07-18T15:04:24Z"
    )
    assert parse_timestamp("2023-07-18 15:04:24.25") == parse_timestamp(
        "2023-07-18T15:04:24.25Z"
    )


@pytest.mark.parametrize(
    "text",
    ["Jul 18 15:04:25", "not a time", "", "2023-13-18T15:04:23Z", "2023-07-18T15:04:23."],
)
def test_parse_rejects_unrecognised(text):
    with pytest.raises(ValueError):
        parse_timestamp(text)


def test_format_field_value_kinds():
    assert format_field_value("hello") == "hello"
    assert format_field_value(True) == "true"
    assert format_field_value(False) == "false"
    assert format_field_value(None) == "null"
    assert format_field_value(42.0) == "42"
    assert format_field_value(42.5) == "42.5"


def test_format_large_number_has_no_exponent():
    text = format_field_value(1e20)
    assert "e" not in text
    assert int(text) == 10**20


def test_extract_core_fields_from_aliases():
    event = Event()
    event.set_field("ts", "2023-07-18T15:04:23.456Z")
    event.set_field("lvl", "warn")
    event.set_field("msg", "hello")
    event.extract_core_fields()
    assert event.timestamp == parse_timestamp("2023-07-18T15:04:23.456Z")
    assert event.level == "warn"
    assert event.message == "hello"
    assert event.fields["msg"] == "hello"


def test_extract_prefers_earlier_alias_and_skips_bad_values():
    event = Event()
    event.set_field("timestamp", "garbage")
    event.set_field("time", "2023-07-18 15:04:24")
    event.set_field("level", 5.0)
    event.set_field("severity", "ERROR")
    event.set_field("message", "first")
    event.set_field("msg", "second")
    event.extract_core_fields()
    assert event.timestamp == parse_timestamp("2023-07-18 15:04:24")
    assert event.level == "ERROR"
    assert event.message == "first"


def test_filter_keys_keeps_only_existing_requested():
    event = Event(level="INFO", message="m")
    event.set_field("host", "db.example.com")
    event.set_field("port", 5432.0)
    event.filter_keys(["msg", "host", "missing", "timestamp"])
    assert event.message == "m"
    assert event.level is None
    assert event.timestamp is None
    assert event.fields == {"host": "db.example.com"}


def test_filter_keys_drops_core_named_fields_from_map():
    event = Event(level="INFO")
    event.set_field("level", "INFO")
    event.set_field("severity", 3.0)
    event.filter_keys(["level", "severity"])
    assert event.level == "INFO"
    assert event.fields == {}


def test_has_displayable_content():
    assert Event().has_displayable_content() is False
    assert Event(message="x").has_displayable_content() is True
    event = Event()
    event.set_field("a", None)
    assert event.has_displayable_content() is True
    event.filter_keys(["b"])
    assert event.has_displayable_content() is False