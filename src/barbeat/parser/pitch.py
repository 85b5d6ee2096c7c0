"""Pitch parser — converts note names to MIDI numbers and back.

Supported formats
-----------------
- Note name with octave: ``C3``, ``F#4``, ``Bb2``, ``C##1``, ``Db-1``
- Pitch class letters are case-insensitive.

Middle C = C3 = MIDI 60, so MIDI 0 is ``C-2`` and MIDI 127 is ``G8``.
"""

from __future__ import annotations

import re

from barbeat.config import MIDI_MAX, MIDI_MIN
from barbeat.errors import NotationRangeError, NotationSyntaxError

# Semitone offsets for natural notes (C-based)
_NOTE_OFFSETS: dict[str, int] = {
    "C": 0,
    "D": 2,
    "E": 4,
    "F": 5,
    "G": 7,
    "A": 9,
    "B": 11,
}

# Accidental offsets
_ACCIDENTAL_OFFSETS: dict[str, int] = {
    "": 0,
    "#": 1,
    "b": -1,
    "##": 2,
    "bb": -2,
}

# Regex: note name (A-G), optional accidental (##, bb, #, b), octave (possibly negative)
_PITCH_RE = re.compile(r"^([A-Ga-g])(##|bb|#|b)?(-?\d+)$")

# MIDI number mod 12 → pitch class name; flats for black keys
PITCH_CLASS_NAMES: tuple[str, ...] = (
    "C", "Db", "D", "Eb", "E", "F", "Gb", "G", "Ab", "A", "Bb", "B",
)


def is_pitch(s: str) -> bool:
    """Return True if *s* is shaped like a note name (range not checked)."""
    return _PITCH_RE.match(s) is not None


def parse_pitch(s: str) -> int:
    """Parse a note name and return its MIDI number.

    Parameters
    ----------
    s : str
        One of: ``"C3"``, ``"D#5"``, ``"bb2"``, ``"F##4"``, ``"C-2"``

    Returns
    -------
    int
        MIDI number, ``(octave + 2) * 12 + semitone``.

    Raises
    ------
    NotationSyntaxError
        If the string is not a note name.
    NotationRangeError
        If the note name lies outside MIDI 0-127.
    """
    m = _PITCH_RE.match(s)
    if not m:
        raise NotationSyntaxError(f"Cannot parse note name: '{s}'")

    name = m.group(1).upper()
    accidental = m.group(2) or ""
    octave = int(m.group(3))

    midi_number = (octave + 2) * 12 + _NOTE_OFFSETS[name] + _ACCIDENTAL_OFFSETS[accidental]

    if midi_number < MIDI_MIN or midi_number > MIDI_MAX:
        raise NotationRangeError(
            f"Pitch {midi_number} out of range (0-127) for note '{s}'"
        )
    return midi_number


def midi_to_note_name(midi_number: int) -> str:
    """Return the note name for *midi_number* (e.g. 60 → ``"C3"``, 61 → ``"Db3"``)."""
    if not MIDI_MIN <= midi_number <= MIDI_MAX:
        raise NotationRangeError(f"Invalid MIDI pitch: {midi_number}")
    octave = midi_number // 12 - 2
    return f"{PITCH_CLASS_NAMES[midi_number % 12]}{octave}"
