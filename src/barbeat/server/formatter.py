"""Compact response formatting for barbeat tool outputs."""

from __future__ import annotations

from barbeat.model.notes import TimeSignature
from barbeat.model.timing import host_beats_to_duration
from barbeat.serialization.notation import format_number
from barbeat.server.store import Clip


def format_result(
    success: bool,
    message: str,
    suggestion: str | None = None,
) -> str:
    """Format a mutation result line.

    Success: ``+ message``
    Error:   ``! message`` with optional ``  try: suggestion``
    """
    if success:
        return f"+ {message}"
    line = f"! {message}"
    if suggestion:
        line += f"\n  try: {suggestion}"
    return line


def format_modified(message: str) -> str:
    """Format a modification line: ``~ message``."""
    return f"~ {message}"


def format_length(host_beats: float, sig: TimeSignature) -> str:
    """Host beats as a ``bars:beats`` duration string, e.g. ``"2:0"``."""
    dur = host_beats_to_duration(host_beats, sig)
    return f"{dur.bars}:{format_number(dur.beats)}"


def format_clip_header(clip: Clip, note_count: int) -> str:
    """One-line clip summary."""
    sig = clip.time_signature
    parts = [
        f"clip {clip.clip_id}",
        str(sig),
        f"length {format_length(clip.length, sig)}",
        f"{note_count} note{'s' if note_count != 1 else ''}",
    ]
    if clip.start:
        parts.append(f"at {format_number(clip.start)}")
    return "[" + " ".join(parts) + "]"
