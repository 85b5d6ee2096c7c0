"""Clip service — runs notation against stored clips and formats responses."""

from __future__ import annotations

import logging

from barbeat.config import Settings
from barbeat.engine import apply_notation
from barbeat.errors import (
    ArgumentError,
    BarBeatError,
    NotationRangeError,
    NotationSyntaxError,
    StoreError,
)
from barbeat.model.notes import TimeSignature
from barbeat.model.reconcile import ReconcileMode
from barbeat.model.resize import ResizeKind, execute_resize, parse_length, plan_resize
from barbeat.serialization.notation import format_notation
from barbeat.server.formatter import (
    format_clip_header,
    format_length,
    format_modified,
    format_result,
)
from barbeat.server.store import Clip, ClipRegistry, InMemoryNoteStore, TimeWindow

logger = logging.getLogger(__name__)

_HINTS: dict[type[BarBeatError], str] = {
    NotationSyntaxError: "check the token at that position; notation_help has the syntax",
    NotationRangeError: (
        "pitch C-2..G8 (0-127), velocity 0-127, probability 0-1, "
        "bar and beat >= 1, duration > 0"
    ),
    ArgumentError: "mode is 'replace' or 'merge'; time signature like '4/4' or '6/8'",
    StoreError: "read_clip lists existing clips",
}


class ClipService:
    """Core orchestration: resolve clips, run the engine, format responses.

    Every update holds the clip's lock across read, reconcile and write, so
    concurrent updates of one clip apply one after the other.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or Settings()
        self.clips = ClipRegistry()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def create_clip(
        self,
        clip_id: str,
        notes: str | None = None,
        time_signature: str | None = None,
        length: str | None = None,
    ) -> str:
        """Create a clip from notation. Length defaults to the whole bars the notes need."""
        if clip_id in self.clips:
            return format_result(
                False, f"Clip '{clip_id}' already exists", "update_clip to change its notes"
            )

        try:
            sig = TimeSignature.parse(time_signature or self.settings.time_signature)
        except ArgumentError as exc:
            return _failure("time_signature", exc)

        try:
            result = apply_notation(notes, sig, ReconcileMode.REPLACE)
        except BarBeatError as exc:
            return _failure("notes", exc)

        clip_length = result.clip_length
        if length is not None:
            try:
                clip_length = parse_length(length, sig)
            except BarBeatError as exc:
                return _failure("length", exc)

        clip = Clip(
            clip_id=clip_id,
            time_signature=sig,
            store=InMemoryNoteStore(result.notes),
            length=clip_length,
            content_length=clip_length,
        )
        try:
            self.clips.add(clip)
        except StoreError as exc:
            return _failure("clip_id", exc)

        return format_result(
            True,
            f"clip {clip_id}: {result.note_count} notes, "
            f"length {format_length(clip_length, sig)} ({sig})",
        )

    def update_clip(self, clip_id: str, notes: str, mode: str | None = None) -> str:
        """Apply notation to an existing clip in ``replace`` or ``merge`` mode."""
        try:
            update_mode = ReconcileMode.parse(mode or self.settings.mode)
        except ArgumentError as exc:
            return _failure("mode", exc)

        try:
            clip = self.clips.get(clip_id)
        except StoreError as exc:
            return _failure("clip_id", exc)

        with clip.lock:
            existing = clip.store.read_notes(TimeWindow())
            try:
                result = apply_notation(notes, clip.time_signature, update_mode, existing)
            except BarBeatError as exc:
                return _failure("notes", exc)
            clip.store.write_notes(result.notes)

        return format_modified(
            f"clip {clip_id}: {update_mode.value} {len(result.events)} events, "
            f"{len(existing)} -> {result.note_count} notes"
        )

    def read_clip(self, clip_id: str | None = None) -> str:
        """Show a clip's notes as bar|beat notation, or list clips when no id is given."""
        if not clip_id:
            ids = self.clips.ids()
            return f"Clips ({len(ids)}): {', '.join(ids)}" if ids else "No clips."

        try:
            clip = self.clips.get(clip_id)
        except StoreError as exc:
            return _failure("clip_id", exc)

        notes = clip.store.read_notes(clip.visible_window)
        header = format_clip_header(clip, len(notes))
        body = format_notation(notes, clip.time_signature)
        return f"{header}\n{body}" if body else header

    def resize_clip(self, clip_id: str, length: str) -> str:
        """Change a clip's length (``bars:beats``), tiling its content when needed."""
        try:
            clip = self.clips.get(clip_id)
        except StoreError as exc:
            return _failure("clip_id", exc)

        with clip.lock:
            try:
                target = parse_length(length, clip.time_signature)
                plan = plan_resize(clip.length, target, clip.content_length)
            except BarBeatError as exc:
                return _failure("length", exc)

            if plan.kind is ResizeKind.UNCHANGED:
                return format_result(True, f"clip {clip_id}: length unchanged")

            try:
                touched = execute_resize(plan, clip_id, self.clips)
            except BarBeatError as exc:
                # drop any tiles placed before the failure
                self.clips.truncate(clip_id, plan.current_length)
                return _failure("length", exc)

        message = (
            f"clip {clip_id}: {plan.kind.value} to "
            f"{format_length(target, clip.time_signature)}"
        )
        if len(touched) > 1:
            message += f", tiles {', '.join(touched[1:])}"
        return format_modified(message)


def _failure(param: str, exc: BarBeatError) -> str:
    logger.info("%s rejected: %s", param, exc)
    return format_result(False, f"{param}: {exc}", _HINTS.get(type(exc)))
