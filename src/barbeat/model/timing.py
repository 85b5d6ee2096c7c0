"""Timing conversions between bar|beat positions, bar:beat durations and host beats.

A host beat is always a quarter note. A musical beat is one unit of the time
signature's denominator, so in 6/8 a musical beat is half a host beat.
"""

from __future__ import annotations

import math

from barbeat.errors import NotationRangeError
from barbeat.model.notes import Duration, Position, TimeSignature

# Remainders closer than this to a bar boundary snap onto it
_EPSILON = 1e-9


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def beat_length(sig: TimeSignature) -> float:
    """Host beats for one musical beat.

    For 4/4 a beat is a quarter note => 1.0.
    For 6/8 a beat is an eighth note  => 0.5.
    General: 4 / denominator.
    """
    return sig.beat_length


def bar_length(sig: TimeSignature) -> float:
    """Host beats in one bar: ``numerator * 4 / denominator``."""
    return sig.bar_length


def musical_beats_to_host_beats(beats: float, sig: TimeSignature) -> float:
    return beats * sig.beat_length


# ---------------------------------------------------------------------------
# Position <-> host beats
# ---------------------------------------------------------------------------

def position_to_host_beats(pos: Position, sig: TimeSignature) -> float:
    """Convert a 1-based bar|beat position to host beats from clip start."""
    if pos.bar < 1 or pos.beat < 1:
        raise NotationRangeError(f"Invalid position {pos}: bar and beat must be >= 1")
    return (pos.bar - 1) * sig.bar_length + (pos.beat - 1) * sig.beat_length


def host_beats_to_position(host_beats: float, sig: TimeSignature) -> Position:
    """Convert host beats to a 1-based bar|beat :class:`Position`."""
    if host_beats < 0:
        raise NotationRangeError(f"Host beats cannot be negative, got: {host_beats}")
    bars, remainder = _split_bars(host_beats, sig)
    return Position(bar=bars + 1, beat=remainder + 1)


# ---------------------------------------------------------------------------
# Duration <-> host beats
# ---------------------------------------------------------------------------

def duration_to_host_beats(dur: Duration, sig: TimeSignature) -> float:
    """Convert a bar:beat duration to host beats. Zero-length is rejected."""
    total = dur.bars * sig.bar_length + dur.beats * sig.beat_length
    if total <= 0:
        raise NotationRangeError(f"Duration must be greater than zero, got: {dur}")
    return total


def host_beats_to_duration(host_beats: float, sig: TimeSignature) -> Duration:
    """Convert host beats to a bar:beat :class:`Duration`.

    ``bars = floor(host_beats / bar_length)``; the beats part is the 0-based
    remainder in musical beats, so ``duration_to_host_beats`` inverts it.
    """
    if host_beats < 0:
        raise NotationRangeError(f"Duration cannot be negative, got: {host_beats}")
    bars, remainder = _split_bars(host_beats, sig)
    return Duration(bars=bars, beats=remainder)


def _split_bars(host_beats: float, sig: TimeSignature) -> tuple[int, float]:
    """Return ``(whole bars, remaining musical beats)`` for *host_beats*."""
    musical = host_beats / sig.beat_length
    bars = math.floor(musical / sig.numerator)
    remainder = musical - bars * sig.numerator
    if sig.numerator - remainder < _EPSILON:
        bars += 1
        remainder = 0.0
    elif remainder < _EPSILON:
        remainder = 0.0
    return bars, remainder


# ---------------------------------------------------------------------------
# Clip length
# ---------------------------------------------------------------------------

def clip_length_beats(latest_start: float | None, sig: TimeSignature) -> float:
    """Minimal clip length in host beats covering a note starting at *latest_start*.

    The start is rounded up to the next whole bar: a note at the very start of
    bar N needs N bars. ``None`` (no notes) gives one bar.
    """
    if latest_start is None:
        return sig.bar_length
    bars, _ = _split_bars(latest_start, sig)
    return (bars + 1) * sig.bar_length
