"""One notation invocation: parse, convert, reconcile.

The engine is pure. Callers that reconcile against the same stored clip from
several threads must serialize those calls themselves (see
:class:`barbeat.server.clips.ClipService`).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, Sequence

from barbeat.config import DEFAULT_MODE, DEFAULT_TIME_SIGNATURE
from barbeat.interpreter import interpret
from barbeat.model.notes import NoteCollection, NoteEvent, TimeSignature
from barbeat.model.reconcile import ReconcileMode, reconcile
from barbeat.model.timing import clip_length_beats

logger = logging.getLogger(__name__)

# Post-processing hook applied to parsed events before reconciliation
EventTransform = Callable[[list[NoteEvent]], list[NoteEvent]]


@dataclass(frozen=True)
class NotationResult:
    notes: NoteCollection
    time_signature: TimeSignature
    events: list[NoteEvent] = field(default_factory=list)

    @property
    def note_count(self) -> int:
        return len(self.notes)

    @property
    def clip_length(self) -> float:
        """Minimal clip length in host beats (whole bars, at least one)."""
        return clip_length_beats(self.notes.latest_start(), self.time_signature)


def apply_notation(
    notation: str | None,
    time_signature: str | TimeSignature = DEFAULT_TIME_SIGNATURE,
    mode: str | ReconcileMode = DEFAULT_MODE,
    existing: NoteCollection | Iterable[NoteEvent] | None = None,
    transforms: Sequence[EventTransform] = (),
) -> NotationResult:
    """Parse *notation* and reconcile it against *existing*.

    Mode and time signature are validated before the notation is parsed, so
    an :class:`~barbeat.errors.ArgumentError` never comes with partial work.

    Examples
    --------
    >>> r = apply_notation("1|1 v100 t1.0 C3\\n1|2 D3\\n1|3 E3", "4/4", "replace")
    >>> [(n.pitch, n.start_beats) for n in r.notes]
    [(60, 0.0), (62, 1.0), (64, 2.0)]
    >>> r.clip_length
    4.0
    """
    mode = ReconcileMode.parse(mode)
    sig = TimeSignature.parse(time_signature)

    events = interpret(notation or "", sig)
    for transform in transforms:
        events = list(transform(events))

    notes = reconcile(existing, events, mode)
    logger.info(
        "%s %s: %d events -> %d notes", mode.value, sig, len(events), len(notes)
    )
    return NotationResult(notes=notes, time_signature=sig, events=events)
