"""Arrangement clip resizing as an explicit state machine.

A resize request lands in exactly one state:

- ``unchanged``: target equals the current length
- ``shorten``: target is shorter; the clip end is truncated
- ``lengthen-within-content``: target still fits inside the clip's content;
  hidden content is revealed
- ``lengthen-beyond-content``: target exceeds the content; the content is
  revealed in full and repeated as tiles up to the target

The plan is pure. Applying it goes through an :class:`Arranger`, which states
the store capabilities a resize needs. A store without a native trim
operation implements ``truncate`` with whatever workaround it has; the
planner does not know or care.
"""

from __future__ import annotations

import enum
import logging
import math
from dataclasses import dataclass
from typing import Protocol

from barbeat.errors import NotationRangeError
from barbeat.model.notes import TimeSignature
from barbeat.model.timing import duration_to_host_beats
from barbeat.parser.duration import parse_duration

logger = logging.getLogger(__name__)

_EPSILON = 1e-9


class ResizeKind(str, enum.Enum):
    UNCHANGED = "unchanged"
    SHORTEN = "shorten"
    LENGTHEN_WITHIN_CONTENT = "lengthen-within-content"
    LENGTHEN_BEYOND_CONTENT = "lengthen-beyond-content"


@dataclass(frozen=True)
class Tile:
    start: float  # host beats from the original clip's start
    length: float
    offset: float  # where in the content the tile begins


@dataclass(frozen=True)
class ResizePlan:
    kind: ResizeKind
    current_length: float
    target_length: float
    content_length: float
    tiles: tuple[Tile, ...] = ()


class Arranger(Protocol):
    """Store operations needed to apply a :class:`ResizePlan`."""

    def truncate(self, clip_id: str, length: float) -> None:
        """End the clip's arrangement *length* host beats after its start.

        Tiles past the new end go away; content past it is hidden, not deleted.
        """
        ...

    def reveal(self, clip_id: str, length: float) -> None:
        """Extend the clip over content it already holds, up to *length*."""
        ...

    def place_tile(self, clip_id: str, tile: Tile) -> str:
        """Place a copy of the clip's content per *tile*; return the new clip id.

        The clip's arrangement then reaches at least to the tile's end.
        """
        ...


def parse_length(length: str, sig: TimeSignature) -> float:
    """Host beats for a ``bars:beats`` length string such as ``"4:0"``."""
    return duration_to_host_beats(parse_duration(length), sig)


def plan_resize(
    current_length: float,
    target_length: float,
    content_length: float,
) -> ResizePlan:
    """Classify a resize and compute the tiles it needs.

    All lengths are host beats. *current_length* is the span the clip covers
    in the arrangement, tiles included. *content_length* is the span of
    material the clip holds (its loop length), which may exceed what is
    currently shown.

    Tiles continue from wherever the arrangement currently ends, so
    lengthening an already tiled clip only adds the missing part.
    """
    for name, value in (
        ("current length", current_length),
        ("target length", target_length),
        ("content length", content_length),
    ):
        if value <= 0:
            raise NotationRangeError(f"Clip {name} must be greater than zero, got: {value}")

    if abs(target_length - current_length) < _EPSILON:
        kind = ResizeKind.UNCHANGED
    elif target_length < current_length:
        kind = ResizeKind.SHORTEN
    elif target_length <= content_length + _EPSILON:
        kind = ResizeKind.LENGTHEN_WITHIN_CONTENT
    else:
        kind = ResizeKind.LENGTHEN_BEYOND_CONTENT

    tiles: list[Tile] = []
    if kind is ResizeKind.LENGTHEN_BEYOND_CONTENT:
        start = max(current_length, content_length)
        while target_length - start > _EPSILON:
            offset = math.fmod(start, content_length)
            if offset < _EPSILON or content_length - offset < _EPSILON:
                offset = 0.0
            length = min(content_length - offset, target_length - start)
            tiles.append(Tile(start=start, length=length, offset=offset))
            start += length

    return ResizePlan(
        kind=kind,
        current_length=current_length,
        target_length=target_length,
        content_length=content_length,
        tiles=tuple(tiles),
    )


def execute_resize(plan: ResizePlan, clip_id: str, arranger: Arranger) -> list[str]:
    """Apply *plan* to *clip_id*; return the ids of every clip touched."""
    touched = [clip_id]
    if plan.kind is ResizeKind.SHORTEN:
        arranger.truncate(clip_id, plan.target_length)
    elif plan.kind is ResizeKind.LENGTHEN_WITHIN_CONTENT:
        arranger.reveal(clip_id, plan.target_length)
    elif plan.kind is ResizeKind.LENGTHEN_BEYOND_CONTENT:
        if plan.current_length < plan.content_length:
            arranger.reveal(clip_id, plan.content_length)
        for tile in plan.tiles:
            touched.append(arranger.place_tile(clip_id, tile))

    logger.info("resize %s: %s, %d clip(s)", clip_id, plan.kind.value, len(touched))
    return touched
