"""Bar copy: repeat the notes of earlier bars at later bars.

Every event the interpreter emits is recorded under the bar its start falls
in, copies included, so chained copies accumulate::

    1|1 C3 @2=1          bar 1 -> bar 2
    1|1 C3 @2=           previous bar -> bar 2
    1|1 C3 2|1 D3 @5=1-2 bars 1-2 -> bars 5-6
    ... @3-10=1-2        bars 1-2 tiled over bars 3-10
    @clear               forget everything recorded so far

A copy that cannot run (empty source, a bar onto itself, the bar before
bar 1) logs a warning and copies nothing for that bar.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from barbeat.model.notes import NoteEvent, TimeSignature
from barbeat.model.timing import host_beats_to_position
from barbeat.parser.tokenizer import BarCopyToken

logger = logging.getLogger(__name__)


class BarBuffer:
    """Notes emitted so far, grouped by bar."""

    def __init__(self, time_signature: TimeSignature) -> None:
        self._sig = time_signature
        self._bars: dict[int, dict[tuple[float, int], NoteEvent]] = {}

    def record(self, event: NoteEvent) -> None:
        """Track *event*; a velocity-0 event forgets the note at its key."""
        bar = host_beats_to_position(event.start_beats, self._sig).bar
        notes = self._bars.setdefault(bar, {})
        if event.velocity > 0:
            notes[event.key] = event
        else:
            notes.pop(event.key, None)

    def clear(self) -> None:
        self._bars.clear()

    def notes_in(self, bar: int) -> list[NoteEvent]:
        return list(self._bars.get(bar, {}).values())

    def copy(self, token: BarCopyToken) -> tuple[list[NoteEvent], int | None]:
        """Run one bar copy.

        Returns
        -------
        tuple
            ``(copied events, bar the cursor moves to)``. The bar is ``None``
            when nothing was copied.
        """
        if token.source_start is None:
            source_bar = token.dest_start - 1
            if source_bar < 1:
                logger.warning("%s: no bar before bar %d to copy", token.raw, token.dest_start)
                return [], None
            sources = [source_bar]
        else:
            sources = list(range(token.source_start, token.source_end + 1))

        dest_end = token.dest_end
        if token.dest_start == token.dest_end:
            dest_end = token.dest_start + len(sources) - 1

        copied: list[NoteEvent] = []
        for i, dest in enumerate(range(token.dest_start, dest_end + 1)):
            source = sources[i % len(sources)]
            if source == dest:
                logger.warning("%s: skipping copy of bar %d to itself", token.raw, source)
                continue
            notes = self.notes_in(source)
            if not notes:
                logger.warning("%s: bar %d is empty, nothing to copy", token.raw, source)
                continue
            shift = (dest - source) * self._sig.bar_length
            for note in notes:
                event = replace(note, start_beats=note.start_beats + shift)
                self.record(event)
                copied.append(event)

        if not copied:
            return [], None
        return copied, token.dest_start
