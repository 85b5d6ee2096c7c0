"""Duration parser — ``bars:beats`` spans and plain beat counts.

Supports the duration setter value (``t1``, ``t0.5``, ``t4/3``, ``t1:2``) and
clip lengths (``"4:0"``). Beats are musical beats of the active denominator.
"""

from __future__ import annotations

import re

from barbeat.errors import NotationRangeError, NotationSyntaxError
from barbeat.model.notes import Duration
from barbeat.parser.position import parse_beat_value

_BAR_BEAT_RE = re.compile(r"^(-?\d+):(.+)$")


def parse_duration(s: str, allow_zero: bool = False) -> Duration:
    """Parse a duration string into a :class:`Duration`.

    Parameters
    ----------
    s : str
        ``"bars:beats"`` (``"2:1.5"`` = 2 bars + 1.5 beats) or a beat count
        (``"0.5"``, ``"4/3"``, ``"1+1/2"``).
    allow_zero : bool
        Accept a zero-length span (default ``False``).

    Raises
    ------
    NotationSyntaxError
        If the string is not a duration.
    NotationRangeError
        If a component is negative, or the total is zero and *allow_zero*
        is off.
    """
    if "|" in s:
        raise NotationSyntaxError(
            f"Invalid duration: '{s}'. Use ':' for bar:beat durations, not '|'"
        )

    m = _BAR_BEAT_RE.match(s)
    if m:
        bars = int(m.group(1))
        beats = parse_beat_value(m.group(2), s)
    else:
        bars = 0
        beats = parse_beat_value(s)

    if bars < 0:
        raise NotationRangeError(f"Bars in duration must be 0 or greater, got: {bars}")
    if beats < 0:
        raise NotationRangeError(f"Beats in duration must be 0 or greater, got: {beats}")
    if not allow_zero and bars == 0 and beats == 0:
        raise NotationRangeError(f"Duration must be greater than zero, got: '{s}'")

    return Duration(bars=bars, beats=beats)
