"""Stateful interpreter: turns bar|beat tokens into note events.

The cursor is an immutable snapshot. Every setter or position token produces
a new snapshot, and every note token is stamped with the snapshot active at
that point, so no parse state outlives a call to :func:`interpret`.

A position with a beat list (``1|1,3`` or ``1|1x4@0.5``) stamps each note
at every listed beat. Bar copies (``@2=1``) are resolved against the events
emitted so far and move the cursor to the first destination bar.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace

from barbeat.bar_copy import BarBuffer
from barbeat.config import (
    DEFAULT_BAR,
    DEFAULT_BEAT,
    DEFAULT_DURATION,
    DEFAULT_PROBABILITY,
    DEFAULT_VELOCITY,
    DEFAULT_VELOCITY_DEVIATION,
    REPEAT_WARNING_THRESHOLD,
)
from barbeat.model.notes import Duration, NoteEvent, Position, TimeSignature
from barbeat.model.timing import duration_to_host_beats, position_to_host_beats
from barbeat.parser.position import BeatRepeat
from barbeat.parser.tokenizer import (
    BarCopyToken,
    ClearBufferToken,
    DurationToken,
    NoteToken,
    PositionToken,
    ProbabilityToken,
    Token,
    VelocityToken,
    tokenize,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Cursor:
    """Interpreter state carried from token to token."""

    bar: int = DEFAULT_BAR
    beats: tuple[BeatRepeat, ...] = (BeatRepeat(start=DEFAULT_BEAT),)
    velocity: int = DEFAULT_VELOCITY
    velocity_deviation: float = DEFAULT_VELOCITY_DEVIATION
    duration: Duration = Duration(bars=0, beats=DEFAULT_DURATION)
    probability: float = DEFAULT_PROBABILITY

    @property
    def beat(self) -> float:
        return self.beats[0].start

    @property
    def position(self) -> Position:
        return Position(bar=self.bar, beat=self.beat)

    def positions(self, sig: TimeSignature) -> list[Position]:
        """Every position the beat list names. Repeats without a step use the duration."""
        step = self.duration.bars * sig.numerator + self.duration.beats
        return [
            Position(bar=self.bar, beat=beat)
            for entry in self.beats
            for beat in entry.expand(step)
        ]


def velocity_from_range(low: int, high: int) -> tuple[int, float]:
    """Centre velocity and deviation for ``v<low>-<high>``.

    The centre rounds half up, so ``v80-121`` gives velocity 101.
    """
    low, high = min(low, high), max(low, high)
    return math.floor((low + high) / 2 + 0.5), (high - low) / 2


def interpret(text: str, time_signature: TimeSignature) -> list[NoteEvent]:
    """Parse bar|beat *text* and return note events in emission order.

    Parameters
    ----------
    text : str
        Notation such as ``"1|1 v100 t1 C3 E3 G3 |3 D3"``.
    time_signature : TimeSignature
        Signature used to convert positions and durations to host beats.

    Raises
    ------
    NotationSyntaxError, NotationRangeError
        From the tokenizer; nothing is emitted when any token fails.
    """
    tokens = tokenize(text)
    events: list[NoteEvent] = []
    buffer = BarBuffer(time_signature)
    cursor = Cursor()
    pending: PositionToken | None = None

    for token in tokens:
        if isinstance(token, NoteToken):
            for event in _emit(token, cursor, time_signature):
                buffer.record(event)
                events.append(event)
            pending = None
            continue

        if isinstance(token, BarCopyToken):
            copied, bar = buffer.copy(token)
            events.extend(copied)
            if bar is not None:
                cursor = replace(cursor, bar=bar, beats=(BeatRepeat(start=DEFAULT_BEAT),))
            pending = None
            continue

        if isinstance(token, ClearBufferToken):
            buffer.clear()
            continue

        if isinstance(token, PositionToken):
            if pending is not None:
                logger.warning("Position %s has no notes", pending.raw)
            pending = token
            hits = sum(entry.times for entry in token.beats)
            if hits > REPEAT_WARNING_THRESHOLD:
                logger.warning(
                    "Position %s places %d notes per pitch, which may be excessive",
                    token.raw,
                    hits,
                )
        cursor = advance(cursor, token)

    if pending is not None:
        logger.warning("Position %s has no notes", pending.raw)
    logger.debug("Interpreted %d tokens into %d note events", len(tokens), len(events))
    return events


def advance(cursor: Cursor, token: Token) -> Cursor:
    """Return the cursor that follows *token*. Other tokens leave it unchanged."""
    if isinstance(token, PositionToken):
        bar = cursor.bar if token.bar is None else token.bar
        return replace(cursor, bar=bar, beats=token.beats)
    if isinstance(token, VelocityToken):
        velocity, deviation = velocity_from_range(token.low, token.high)
        return replace(cursor, velocity=velocity, velocity_deviation=deviation)
    if isinstance(token, DurationToken):
        return replace(cursor, duration=token.duration)
    if isinstance(token, ProbabilityToken):
        return replace(cursor, probability=token.probability)
    return cursor


def _emit(token: NoteToken, cursor: Cursor, sig: TimeSignature) -> list[NoteEvent]:
    duration = duration_to_host_beats(cursor.duration, sig)
    return [
        NoteEvent(
            pitch=token.pitch,
            start_beats=position_to_host_beats(pos, sig),
            duration_beats=duration,
            velocity=cursor.velocity,
            probability=cursor.probability,
            velocity_deviation=cursor.velocity_deviation,
        )
        for pos in cursor.positions(sig)
    ]
