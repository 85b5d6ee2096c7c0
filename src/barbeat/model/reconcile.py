"""Reconcile parsed note events against an existing note collection.

Two modes:

- ``replace``: the existing notes are discarded and every event with
  velocity > 0 is inserted. Velocity-0 events carry no meaning here and are
  dropped.
- ``merge``: events are applied in order on top of the existing notes:
  velocity > 0 upserts at ``(start_beats, pitch)``, velocity 0 deletes the
  note at exactly that key if there is one.

Keys compare ``start_beats`` with plain float equality (no tolerance) and
``pitch`` by MIDI number, so ``C#3`` and ``Db3`` address the same note.
"""

from __future__ import annotations

import enum
import logging
from typing import Iterable

from barbeat.errors import ArgumentError
from barbeat.model.notes import NoteCollection, NoteEvent

logger = logging.getLogger(__name__)


class ReconcileMode(str, enum.Enum):
    REPLACE = "replace"
    MERGE = "merge"

    @classmethod
    def parse(cls, value: str | ReconcileMode) -> ReconcileMode:
        if isinstance(value, ReconcileMode):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ArgumentError(
                f"Unsupported mode: {value!r} (expected 'replace' or 'merge')"
            ) from None


def reconcile(
    existing: NoteCollection | Iterable[NoteEvent] | None,
    events: Iterable[NoteEvent],
    mode: str | ReconcileMode,
) -> NoteCollection:
    """Return a new collection with *events* applied to *existing* under *mode*.

    *existing* is never modified.

    Raises
    ------
    ArgumentError
        If *mode* is not ``"replace"`` or ``"merge"``; checked before any
        note is looked at.
    """
    mode = ReconcileMode.parse(mode)
    events = list(events)

    if mode is ReconcileMode.REPLACE:
        kept = [e for e in events if e.velocity > 0]
        if len(kept) != len(events):
            logger.debug("replace: dropped %d velocity-0 events", len(events) - len(kept))
        return NoteCollection(kept)

    if existing is None:
        existing = NoteCollection()
    elif not isinstance(existing, NoteCollection):
        existing = NoteCollection(existing)

    notes = existing.as_dict()
    upserted = deleted = 0
    for event in events:
        if event.velocity > 0:
            notes[event.key] = event
            upserted += 1
        elif notes.pop(event.key, None) is not None:
            deleted += 1

    logger.debug(
        "merge: %d existing, %d upserted, %d deleted", len(existing), upserted, deleted
    )
    return NoteCollection(notes.values())
