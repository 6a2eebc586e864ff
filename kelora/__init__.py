"""Parse, filter and reformat logfmt, JSON Lines and syslog records."""

__version__ = "0.1.1"