"""Render note collections as bar|beat notation.

Usage::

    from barbeat.serialization.notation import format_notation

    text = format_notation(notes, TimeSignature.parse("4/4"))

Output is position-first, one line per bar::

    1|1 v100 C3 E3 G3 |3 t2 D3
    2|1 v80-120 C3

Setters are written only when they change, and parsing the text under the
same signature gives back the same notes for values on a 1/1000-beat grid.
"""

from __future__ import annotations

from typing import Iterable

from barbeat.config import (
    DEFAULT_DURATION,
    DEFAULT_PROBABILITY,
    DEFAULT_VELOCITY,
    DEFAULT_VELOCITY_DEVIATION,
    FORMAT_DECIMALS,
    MIDI_MAX,
    MIDI_MIN,
)
from barbeat.model.notes import NoteEvent, TimeSignature
from barbeat.model.timing import host_beats_to_position
from barbeat.parser.pitch import midi_to_note_name


def format_number(value: float) -> str:
    """``2.0`` → ``"2"``, ``1.3333`` → ``"1.333"``."""
    text = f"{value:.{FORMAT_DECIMALS}f}".rstrip("0").rstrip(".")
    return text if text not in ("", "-0") else "0"


def format_velocity(velocity: int, deviation: float) -> str:
    """Velocity token that parses back to *velocity* and *deviation*.

    A range centre rounds half up, so an odd span sits one step below the
    centre: velocity 101 with deviation 20.5 is ``v80-121``.
    """
    span = round(2 * deviation)
    if span <= 0:
        return f"v{velocity}"
    low = velocity - (span + 1) // 2
    high = max(MIDI_MIN, min(MIDI_MAX, low + span))
    low = max(MIDI_MIN, min(MIDI_MAX, low))
    if low == high:
        return f"v{low}"
    return f"v{low}-{high}"


def format_notation(notes: Iterable[NoteEvent], time_signature: TimeSignature) -> str:
    """Convert *notes* to bar|beat text. Returns ``""`` for no notes."""
    ordered = sorted(notes, key=lambda n: (n.start_beats, n.pitch))
    if not ordered:
        return ""

    lines: list[list[str]] = []
    current_bar: int | None = None
    current_start: float | None = None
    velocity_token = format_velocity(DEFAULT_VELOCITY, DEFAULT_VELOCITY_DEVIATION)
    duration_text = format_number(DEFAULT_DURATION)
    probability_text = format_number(DEFAULT_PROBABILITY)

    for note in ordered:
        if note.start_beats != current_start:
            pos = host_beats_to_position(note.start_beats, time_signature)
            beat_text = format_number(pos.beat)
            if pos.bar != current_bar:
                lines.append([f"{pos.bar}|{beat_text}"])
                current_bar = pos.bar
            else:
                lines[-1].append(f"|{beat_text}")
            current_start = note.start_beats

        elements = lines[-1]

        token = format_velocity(note.velocity, note.velocity_deviation)
        if token != velocity_token:
            elements.append(token)
            velocity_token = token

        text = format_number(note.duration_beats / time_signature.beat_length)
        if text != duration_text:
            elements.append(f"t{text}")
            duration_text = text

        text = format_number(note.probability)
        if text != probability_text:
            elements.append(f"p{text}")
            probability_text = text

        elements.append(midi_to_note_name(note.pitch))

    return "\n".join(" ".join(elements) for elements in lines)

