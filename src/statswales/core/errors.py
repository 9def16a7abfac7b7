from __future__ import annotations


class StatsWalesError(Exception):
    """Base class for every error raised by the statswales package."""


class NotFoundError(StatsWalesError, LookupError):
    """Raised when an area, measure, name or year is not in a container."""


class InvalidArgumentError(StatsWalesError, ValueError):
    """Raised when a caller passes a malformed value (e.g. a bad language code)."""


class MalformedInputError(StatsWalesError, ValueError):
    """Raised when a record in a source file is structurally broken."""


class ParseError(MalformedInputError):
    """Raised when a year or value cannot be read as a number."""


class UnexpectedInputError(StatsWalesError, ValueError):
    """Raised before parsing starts: unknown format, dataset or column mapping."""


class InputSourceError(StatsWalesError, OSError):
    """Raised when an input source cannot be opened."""
