"""Semantic model for bar|beat notation.

All note timing is stored in host beats (quarter notes). Conversion to and
from bar|beat positions and bar:beat durations is handled by the timing
module.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Iterable, Iterator, Mapping

from barbeat.config import MIDI_MAX, MIDI_MIN, QUARTER_NOTE, SUPPORTED_DENOMINATORS
from barbeat.errors import ArgumentError, NotationRangeError

_TIME_SIG_RE = re.compile(r"^\s*(\d+)\s*/\s*(\d+)\s*$")


@dataclass(frozen=True)
class TimeSignature:
    numerator: int
    denominator: int  # actual value (8, not power-of-2 exponent)

    def __post_init__(self) -> None:
        if not isinstance(self.numerator, int) or self.numerator < 1:
            raise ArgumentError(
                f"Time signature numerator must be an integer >= 1, got {self.numerator!r}"
            )
        if self.denominator not in SUPPORTED_DENOMINATORS:
            allowed = ", ".join(str(d) for d in SUPPORTED_DENOMINATORS)
            raise ArgumentError(
                f"Time signature denominator must be one of {allowed}, "
                f"got {self.denominator!r}"
            )

    @classmethod
    def parse(cls, value: str | TimeSignature | None) -> TimeSignature:
        """Parse ``"n/d"`` (e.g. ``"6/8"``). Instances pass through unchanged."""
        if isinstance(value, TimeSignature):
            return value
        if value is None or not str(value).strip():
            raise ArgumentError("Time signature is required (e.g. '4/4')")
        m = _TIME_SIG_RE.match(str(value))
        if not m:
            raise ArgumentError(
                f"Invalid time signature: '{value}' (expected 'numerator/denominator' like '4/4')"
            )
        return cls(numerator=int(m.group(1)), denominator=int(m.group(2)))

    @property
    def beat_length(self) -> float:
        """Host beats in one musical beat (``4 / denominator``)."""
        return QUARTER_NOTE / self.denominator

    @property
    def bar_length(self) -> float:
        """Host beats in one bar."""
        return self.numerator * self.beat_length

    def __str__(self) -> str:
        return f"{self.numerator}/{self.denominator}"


@dataclass(frozen=True)
class Position:
    bar: int  # 1-based
    beat: float  # 1-based, in units of the denominator

    def __post_init__(self) -> None:
        if self.bar < 1:
            raise NotationRangeError(f"Bar number must be 1 or greater, got: {self.bar}")
        if self.beat < 1:
            raise NotationRangeError(f"Beat must be 1 or greater, got: {self.beat}")

    def __str__(self) -> str:
        return f"{self.bar}|{_trim(self.beat)}"


@dataclass(frozen=True)
class Duration:
    bars: int
    beats: float  # 0-based remainder, in units of the denominator

    def __post_init__(self) -> None:
        if self.bars < 0:
            raise NotationRangeError(f"Bars in duration must be 0 or greater, got: {self.bars}")
        if self.beats < 0:
            raise NotationRangeError(f"Beats in duration must be 0 or greater, got: {self.beats}")

    def __str__(self) -> str:
        return f"{self.bars}:{_trim(self.beats)}"


@dataclass(frozen=True)
class NoteEvent:
    """One fully resolved note, as emitted by the interpreter or read from a clip."""

    pitch: int
    start_beats: float
    duration_beats: float
    velocity: int
    probability: float = 1.0
    velocity_deviation: float = 0.0

    def __post_init__(self) -> None:
        if not MIDI_MIN <= self.pitch <= MIDI_MAX:
            raise NotationRangeError(f"Pitch {self.pitch} out of range (0-127)")
        if self.start_beats < 0:
            raise NotationRangeError(f"Note start must be >= 0, got {self.start_beats}")
        if self.duration_beats <= 0:
            raise NotationRangeError(f"Note duration must be > 0, got {self.duration_beats}")
        if not MIDI_MIN <= self.velocity <= MIDI_MAX:
            raise NotationRangeError(f"Velocity {self.velocity} out of range (0-127)")
        if not 0.0 <= self.probability <= 1.0:
            raise NotationRangeError(
                f"Probability {self.probability} out of range (0.0-1.0)"
            )
        if self.velocity_deviation < 0:
            raise NotationRangeError(
                f"Velocity deviation must be >= 0, got {self.velocity_deviation}"
            )

    @property
    def key(self) -> tuple[float, int]:
        """Identity inside a :class:`NoteCollection`."""
        return (self.start_beats, self.pitch)

    def to_dict(self) -> dict[str, Any]:
        """Host note shape (``start_time``/``duration`` in host beats)."""
        return {
            "pitch": self.pitch,
            "start_time": self.start_beats,
            "duration": self.duration_beats,
            "velocity": self.velocity,
            "probability": self.probability,
            "velocity_deviation": self.velocity_deviation,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> NoteEvent:
        try:
            return cls(
                pitch=int(data["pitch"]),
                start_beats=float(data["start_time"]),
                duration_beats=float(data["duration"]),
                velocity=int(round(float(data["velocity"]))),
                probability=float(data.get("probability", 1.0)),
                velocity_deviation=float(data.get("velocity_deviation", 0.0)),
            )
        except KeyError as exc:
            raise ArgumentError(f"Note is missing field {exc.args[0]!r}") from None


class NoteCollection:
    """Notes keyed by ``(start_beats, pitch)``.

    Never mutated after construction; reconciliation builds a new collection.
    When *notes* contains duplicate keys the last one wins.
    """

    __slots__ = ("_notes",)

    def __init__(self, notes: Iterable[NoteEvent] = ()) -> None:
        self._notes: dict[tuple[float, int], NoteEvent] = {}
        for note in notes:
            self._notes[note.key] = note

    @classmethod
    def from_dicts(cls, items: Iterable[Mapping[str, Any]]) -> NoteCollection:
        return cls(NoteEvent.from_dict(item) for item in items)

    def to_dicts(self) -> list[dict[str, Any]]:
        return [note.to_dict() for note in self]

    def get(self, start_beats: float, pitch: int) -> NoteEvent | None:
        return self._notes.get((start_beats, pitch))

    def as_dict(self) -> dict[tuple[float, int], NoteEvent]:
        """A fresh ``{key: note}`` copy, safe to modify."""
        return dict(self._notes)

    def latest_start(self) -> float | None:
        if not self._notes:
            return None
        return max(start for start, _ in self._notes)

    def __iter__(self) -> Iterator[NoteEvent]:
        for key in sorted(self._notes):
            yield self._notes[key]

    def __len__(self) -> int:
        return len(self._notes)

    def __contains__(self, item: object) -> bool:
        if isinstance(item, NoteEvent):
            return self._notes.get(item.key) == item
        return item in self._notes

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NoteCollection):
            return NotImplemented
        return self._notes == other._notes

    def __repr__(self) -> str:
        return f"NoteCollection({list(self)!r})"


def _trim(value: float) -> str:
    return f"{value:g}" if value != int(value) else str(int(value))
