# kelora

A log parser for the command line. It reads logfmt, JSON Lines or syslog
records from files or standard input, filters them by level or key, and
writes them back out as logfmt-style lines or JSON Lines. It can also print
a short summary of what it saw.

It has no dependencies beyond the Python standard library (Python 3.10 or
later).

## Installation

```
pip install .
```

## Usage

```
kelora [FILES ...] [-f {logfmt,jsonl,syslog}] [-F {default,jsonl}]
       [-k KEYS] [-l LEVELS] [-c] [-s] [-S] [--debug] [-V]
```

Standard input is read when no files are given. Files are read one after
another. The same command is available as `python -m kelora.cli`.

| Option | Meaning |
| --- | --- |
| `-f`, `--format` | Input format: `logfmt` (default), `jsonl` or `syslog` |
| `-F`, `--output-format` | Output format: `default` (logfmt-style) or `jsonl` |
| `-k`, `--keys` | Only show these keys (comma-separated; may be repeated) |
| `-l`, `--level` | Only show these levels (comma-separated, case-insensitive; may be repeated) |
| `-c`, `--common` | Only show timestamp, level and message (takes precedence over `-k`) |
| `-s`, `--stats` | Print statistics to standard error after the output |
| `-S`, `--stats-only` | Print statistics only, with no event output |
| `--debug` | Report lines that could not be parsed on standard error |
| `-V`, `--version` | Print the version and exit |

Blank lines are skipped. Lines that cannot be parsed are counted and
otherwise ignored; with `--debug` each one is reported as
`Parse error on line N: ...`. When a level filter is given, events without a
level are dropped. When a key filter leaves an event with nothing to show,
the event is dropped. The exit status is 0, or 1 when an input file cannot be
opened or a line is not valid UTF-8.

## Examples

Show only errors and warnings from a JSON Lines log:

```
kelora -f jsonl -l error,warn app.log
```

Keep only the core fields:

```
echo '{"timestamp":"2023-07-18T15:04:23.456Z","level":"ERROR","message":"Demo error","component":"test"}' | kelora -f jsonl -c
```

prints

```
timestamp="2023-07-18T15:04:23.456Z" level="ERROR" message="Demo error"
```

Convert logfmt to JSON Lines:

```
kelora -f logfmt -F jsonl service.log
```

Summarise a syslog file:

```
kelora -f syslog -S /var/log/messages
```

The summary gives the number of events shown, parse errors, lines seen and
filtered lines; the time span covered by the events that carry a timestamp,
with its duration; and a count per log level, sorted by level name.

## Input formats

- **logfmt**: `key=value` pairs, values optionally in double quotes. The
  values `null`, `true` and `false` and numbers are recognised; everything
  else stays text.
- **jsonl**: one JSON object per line. Nested arrays and objects are kept as
  compact JSON text. A line that is not a JSON object is a parse error.
- **syslog**: `<PRI>Mon DD HH:MM:SS host process[pid]: message`, the priority
  and pid being optional. The fields `priority`, `facility`, `severity`,
  `timestamp`, `hostname`, `process`, `pid` and `message` are set, and the
  severity is mapped to a level such as `ERROR` or `INFO`. A line that does
  not have this shape becomes an event whose message is the whole line.

## Timestamps, levels and messages

An event's timestamp is taken from the first of `timestamp`, `ts`, `time`,
`at`, `_t`, `@t` or `t` that holds a recognised date: ISO 8601 with `Z` or a
`+HH:MM`/`-HH:MM` offset (`2023-07-18T15:04:23.456Z`), or
`2023-07-18 15:04:23` with optional fractional seconds, read as UTC. Other
text, syslog's year-less dates included, stays an ordinary field. The level
comes from `level`, `log_level`, `loglevel`, `lvl`, `severity` or `@l`, and
the message from `message`, `msg` or `@m`, whichever text value comes first.

The default output writes timestamp, level and message first, then every
field sorted by key; integral numbers are written without a decimal point.
The `jsonl` output writes one compact JSON object per event with its keys
sorted and the timestamp in RFC 3339 form (`...+00:00`).

## Using it from Python

```python
from kelora.parsers import LogfmtParser
from kelora.formatters import JsonlFormatter

event = LogfmtParser().parse('level=info msg="started" port=8080')
print(JsonlFormatter().format(event))
# {"level":"info","message":"started","msg":"started","port":8080.0}
```

- `kelora.event`: `Event` (with `set_field`, `filter_keys`,
  `extract_core_fields`, `has_displayable_content`), `parse_timestamp`,
  `format_field_value`.
- `kelora.parsers`: `LogfmtParser`, `JsonlParser`, `SyslogParser`, all
  `LogParser`s whose `parse` raises `ParseError`; `parse_field_value`.
- `kelora.formatters`: `DefaultFormatter`, `JsonlFormatter`, both
  `Formatter`s; `escape_quotes`.
- `kelora.cli`: `Stats`, `process_lines`, `create_parser`,
  `create_formatter`, `prepare_levels_filter`, `prepare_keys_filter`,
  `format_duration`, `build_arg_parser` and `main`.

## Running the tests

```
pip install .[test]
pytest
```