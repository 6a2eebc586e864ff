import json
from datetime import datetime, timezone

from kelora.event import Event, parse_timestamp
from kelora.formatters import DefaultFormatter, JsonlFormatter, escape_quotes


def test_default_formatter_empty_event():
    assert DefaultFormatter().format(Event()) == ""


def test_default_formatter_with_fields():
    event = Event(level="INFO", message="Test message")
    event.set_field("key1", "value1")
    event.set_field("key2", 42.0)
    result = DefaultFormatter().format(event)
    assert 'level="INFO"' in result
    assert 'message="Test message"' in result
    assert 'key1="value1"' in result
    assert "key2=42" in result


def test_number_formatting():
    event = Event()
    event.set_field("int", 42.0)
    event.set_field("float", 42.5)
    result = DefaultFormatter().format(event)
    assert "int=42" in result
    assert "float=42.5" in result


def test_escape_quotes():
    assert escape_quotes("hello") == "hello"
    assert escape_quotes('hello "world"') == 'hello \\"world\\"'
    assert escape_quotes("path\\to\\file") == "path\\\\to\\\\file"


def test_default_formatter_order_and_timestamp():
    event = Event(
        timestamp=parse_timestamp("2023-07-18T15:04:23.456Z"),
        level="ERROR",
        message='say "hi"',
    )
    event.set_field("zeta", True)
    event.set_field("alpha", None)
    result = DefaultFormatter().format(event)
    assert result == (
        'timestamp="2023-07-18T15:04:23.456Z" level="ERROR" '
        'message="say \\"hi\\"" alpha=null zeta=true'
    )


def test_default_formatter_pads_milliseconds():
    event = Event(timestamp=datetime(2023, 7, 18, 15, 4, 24, tzinfo=timezone.utc))
    assert DefaultFormatter().format(event) == 'timestamp="2023-07-18T15:04:24.000Z"'


def test_jsonl_formatter_round_trip():
    event = Event(level="INFO", message="Unicode test: 你好世界 🚀 café")
    event.set_field("count", 42.0)
    event.set_field("flag", False)
    event.set_field("nothing", None)
    result = JsonlFormatter().format(event)
    assert json.loads(result) == {
        "level": "INFO",
        "message": "Unicode test: 你好世界 🚀 café",
        "count": 42.0,
        "flag": False,
        "nothing": None,
    }
    assert "你好世界" in result


def test_jsonl_formatter_sorted_compact():
    event = Event(level="INFO")
    event.set_field("b", 1.5)
    event.set_field("a", 42.0)
    assert JsonlFormatter().format(event) == '{"a":42.0,"b":1.5,"level":"INFO"}'


def test_jsonl_core_timestamp_is_rfc3339():
    event = Event(timestamp=parse_timestamp("2023-07-18T15:04:23.456Z"))
    assert JsonlFormatter().format(event) == (
        '{"timestamp":"2023-07-18T15:04:23.456+00:00"}'
    )


def test_jsonl_field_overrides_core_timestamp():
    event = Event(timestamp=parse_timestamp("2023-07-18T15:04:23.456Z"))
    event.set_field("timestamp", "2023-07-18T15:04:23.456Z")
    parsed = json.loads(JsonlFormatter().format(event))
    assert parsed["timestamp"] == "2023-07-18T15:04:23.456Z"


def test_jsonl_non_finite_number_becomes_zero():
    event = Event()
    event.set_field("x", float("nan"))
    assert json.loads(JsonlFormatter().format(event)) == {"x": 0}


def test_jsonl_large_numbers_round_trip():
    event = Event()
    event.set_field("big", 1e20)
    event.set_field("small", 1e-7)
    parsed = json.loads(JsonlFormatter().format(event))
    assert parsed == {"big": 1e20, "small": 1e-7}
    assert "+" not in JsonlFormatter().format(event)