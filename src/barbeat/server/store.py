"""In-memory note store and clip registry.

``InMemoryNoteStore`` implements the note-store contract the engine is
written against::

    read_notes(window) -> NoteCollection
    write_notes(notes) -> None

Reconciliation is a read-modify-write, and the store has no atomic
primitive for it, so each :class:`Clip` carries a lock that callers hold
around the whole cycle.
"""

from __future__ import annotations

import math
import threading
from dataclasses import dataclass, field, replace
from typing import Iterable, Protocol

from barbeat.errors import StoreError
from barbeat.model.notes import NoteCollection, NoteEvent, TimeSignature
from barbeat.model.resize import Tile

_EPSILON = 1e-9


@dataclass(frozen=True)
class TimeWindow:
    """Half-open span ``[start, end)`` of note start times, in host beats."""

    start: float = 0.0
    end: float = math.inf

    def contains(self, beats: float) -> bool:
        return self.start <= beats < self.end


class NoteStore(Protocol):
    def read_notes(self, window: TimeWindow) -> NoteCollection: ...

    def write_notes(self, notes: NoteCollection) -> None: ...


class InMemoryNoteStore:
    """Holds one clip's notes."""

    def __init__(self, notes: Iterable[NoteEvent] = ()) -> None:
        self._notes = NoteCollection(notes)

    def read_notes(self, window: TimeWindow = TimeWindow()) -> NoteCollection:
        return NoteCollection(n for n in self._notes if window.contains(n.start_beats))

    def write_notes(self, notes: NoteCollection) -> None:
        self._notes = notes


@dataclass
class Clip:
    """A clip and its place in the arrangement.

    *length* is the span the clip covers, tiles included. The clip itself
    shows ``min(length, content_length)``; tiles fill the rest.
    """

    clip_id: str
    time_signature: TimeSignature
    store: InMemoryNoteStore
    length: float  # host beats
    content_length: float  # loop length, host beats
    start: float = 0.0  # arrangement position, host beats
    tiles: list[str] = field(default_factory=list)
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    @property
    def visible_window(self) -> TimeWindow:
        return TimeWindow(0.0, min(self.length, self.content_length))


class ClipRegistry:
    """Clips by id. Also the :class:`~barbeat.model.resize.Arranger` for them."""

    def __init__(self) -> None:
        self._clips: dict[str, Clip] = {}
        self._lock = threading.Lock()

    def add(self, clip: Clip) -> Clip:
        with self._lock:
            if clip.clip_id in self._clips:
                raise StoreError(f"Clip '{clip.clip_id}' already exists")
            self._clips[clip.clip_id] = clip
        return clip

    def get(self, clip_id: str) -> Clip:
        clip = self._clips.get(clip_id)
        if clip is None:
            known = ", ".join(sorted(self._clips)) or "none"
            raise StoreError(f"Unknown clip '{clip_id}' (known clips: {known})")
        return clip

    def remove(self, clip_id: str) -> Clip:
        with self._lock:
            clip = self._clips.pop(clip_id, None)
        if clip is None:
            raise StoreError(f"Unknown clip '{clip_id}'")
        return clip

    def ids(self) -> list[str]:
        return sorted(self._clips)

    def __contains__(self, clip_id: object) -> bool:
        return clip_id in self._clips

    def __len__(self) -> int:
        return len(self._clips)

    # -- Arranger -----------------------------------------------------------

    def truncate(self, clip_id: str, length: float) -> None:
        clip = self.get(clip_id)
        for tile_id in list(clip.tiles):
            tile = self.get(tile_id)
            offset = tile.start - clip.start
            if offset >= length - _EPSILON:
                self.remove(tile_id)
                clip.tiles.remove(tile_id)
            elif offset + tile.length > length:
                tile.length = tile.content_length = length - offset
                tile.store.write_notes(tile.store.read_notes(tile.visible_window))
        clip.length = length

    def reveal(self, clip_id: str, length: float) -> None:
        clip = self.get(clip_id)
        if length - clip.content_length > _EPSILON:
            raise StoreError(f"Cannot reveal past the content of clip '{clip_id}'")
        clip.length = length

    def place_tile(self, clip_id: str, tile: Tile) -> str:
        source = self.get(clip_id)
        window = TimeWindow(tile.offset, tile.offset + tile.length)
        notes = [
            replace(n, start_beats=n.start_beats - tile.offset)
            for n in source.store.read_notes(window)
        ]
        tile_id = f"{clip_id}@{_beats_label(source.start + tile.start)}"
        self.add(
            Clip(
                clip_id=tile_id,
                time_signature=source.time_signature,
                store=InMemoryNoteStore(notes),
                length=tile.length,
                content_length=tile.length,
                start=source.start + tile.start,
            )
        )
        source.tiles.append(tile_id)
        source.length = max(source.length, tile.start + tile.length)
        return tile_id


def _beats_label(beats: float) -> str:
    return f"{beats:g}"
