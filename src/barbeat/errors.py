"""Custom exception hierarchy for barbeat."""

from __future__ import annotations


class BarBeatError(Exception):
    """Base exception for all barbeat errors.

    Errors raised at a notation token carry its location: ``fragment`` is the
    offending substring, ``offset`` its 0-based index into the caller's text,
    and ``line``/``column`` the 1-based line and column.
    """

    def __init__(
        self,
        message: str,
        *,
        fragment: str | None = None,
        offset: int | None = None,
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.fragment = fragment
        self.offset = offset
        self.line = line
        self.column = column

    def __str__(self) -> str:
        if self.offset is None:
            return self.message
        where = f"at position {self.offset}"
        if self.line is not None:
            where += f" (line {self.line}, column {self.column})"
        return f"{self.message} {where}"


class NotationSyntaxError(BarBeatError, ValueError):
    """Unparsable notation (unknown token, malformed number, bad comment)."""


class NotationRangeError(BarBeatError, ValueError):
    """Well-formed value outside its allowed range (pitch, velocity, beat, ...)."""


class ArgumentError(BarBeatError, ValueError):
    """Invalid call argument: unsupported mode, bad time signature.

    Raised before any parsing starts.
    """


class StoreError(BarBeatError):
    """Invalid operation against the note store (e.g. unknown clip)."""
