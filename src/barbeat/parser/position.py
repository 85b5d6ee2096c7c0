"""Position parser — ``bar|beat`` and ``|beat`` shorthand, beat lists and repeats.

Beats are 1-based and may be written as a decimal (``2.5``), a fraction
(``4/3``) or a mixed number (``2+1/3``).

A position may list several beats (``1|1,3``) and any entry may repeat
(``1|1x4@0.5`` = four hits half a beat apart). Without ``@step`` the repeat
steps by the current note duration.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from barbeat.errors import NotationRangeError, NotationSyntaxError

_POSITION_RE = re.compile(r"^(-?\d+)?\|(.+)$")
_DECIMAL_RE = re.compile(r"^-?(\d+(?:\.\d*)?|\.\d+)$")
_FRACTION_RE = re.compile(r"^(\d+)/(\d+)$")
_MIXED_RE = re.compile(r"^(\d+)\+(\d+)/(\d+)$")
_REPEAT_RE = re.compile(r"^(.+?)(?:x(\d+)(?:@(.+))?)?$")


@dataclass(frozen=True)
class BeatRepeat:
    """One beat-list entry: *times* hits from *start*, *step* beats apart."""

    start: float
    times: int = 1
    step: float | None = None  # None: step by the current duration

    def expand(self, default_step: float) -> list[float]:
        step = self.step if self.step is not None else default_step
        return [self.start + i * step for i in range(self.times)]


def parse_beat_value(s: str, context: str | None = None) -> float:
    """Parse a beat count: ``"2"``, ``"2.5"``, ``"4/3"`` or ``"2+1/3"``."""
    context = context if context is not None else s
    if _DECIMAL_RE.match(s):
        return float(s)

    m = _FRACTION_RE.match(s)
    if m:
        return _divide(int(m.group(1)), int(m.group(2)), context)

    m = _MIXED_RE.match(s)
    if m:
        return int(m.group(1)) + _divide(int(m.group(2)), int(m.group(3)), context)

    raise NotationSyntaxError(f"Invalid beat value '{s}' in '{context}'")


def parse_position(s: str) -> tuple[int | None, float]:
    """Parse a single-beat position token and return ``(bar, beat)``.

    ``bar`` is ``None`` for the ``|beat`` shorthand, which keeps the current bar.

    Examples
    --------
    >>> parse_position("2|3.5")
    (2, 3.5)
    >>> parse_position("|2")
    (None, 2.0)
    """
    bar, beats = parse_position_list(s)
    if len(beats) != 1 or beats[0].times != 1:
        raise NotationSyntaxError(f"Expected a single bar|beat position, got: '{s}'")
    return bar, beats[0].start


def parse_position_list(s: str) -> tuple[int | None, tuple[BeatRepeat, ...]]:
    """Parse a position token with a beat list.

    Parameters
    ----------
    s : str
        ``"1|1"``, ``"|2,4"``, ``"1|1x4@0.5"`` or ``"2|1x2@1,3.5"``.

    Returns
    -------
    tuple
        ``(bar, beats)``; ``bar`` is ``None`` for the shorthand.

    Raises
    ------
    NotationSyntaxError
        If the token is not a position or an entry is malformed.
    NotationRangeError
        If the bar or a beat is below 1, a repeat count is zero, or a
        repeat step is not positive.
    """
    m = _POSITION_RE.match(s)
    if not m:
        raise NotationSyntaxError(
            f"Invalid bar|beat position: '{s}' (expected like '1|1', '2|3.5' or '|2')"
        )

    bar = int(m.group(1)) if m.group(1) is not None else None
    if bar is not None and bar < 1:
        raise NotationRangeError(f"Bar number must be 1 or greater, got: {bar}")

    entries = m.group(2).split(",")
    if any(not entry for entry in entries):
        raise NotationSyntaxError(f"Empty entry in beat list: '{s}'")
    return bar, tuple(_parse_entry(entry, s) for entry in entries)


def _parse_entry(entry: str, context: str) -> BeatRepeat:
    m = _REPEAT_RE.match(entry)
    start = parse_beat_value(m.group(1), context)
    if start < 1:
        raise NotationRangeError(f"Beat must be 1 or greater, got: {m.group(1)}")
    if m.group(2) is None:
        return BeatRepeat(start=start)

    times = int(m.group(2))
    if times < 1:
        raise NotationRangeError(f"Repeat count must be 1 or greater, got: {times}")
    step = None
    if m.group(3) is not None:
        step = parse_beat_value(m.group(3), context)
        if step <= 0:
            raise NotationRangeError(f"Repeat step must be greater than zero, got: {m.group(3)}")
    return BeatRepeat(start=start, times=times, step=step)


def _divide(numerator: int, denominator: int, context: str) -> float:
    if denominator == 0:
        raise NotationSyntaxError(f"Division by zero in '{context}'")
    return numerator / denominator
