"""Parser package — tokenize bar|beat notation and parse its values."""

from barbeat.parser.duration import parse_duration
from barbeat.parser.pitch import midi_to_note_name, parse_pitch
from barbeat.parser.position import (
    BeatRepeat,
    parse_beat_value,
    parse_position,
    parse_position_list,
)
from barbeat.parser.tokenizer import (
    BarCopyToken,
    ClearBufferToken,
    DurationToken,
    NoteToken,
    PositionToken,
    ProbabilityToken,
    Token,
    VelocityToken,
    strip_comments,
    tokenize,
)

__all__ = [
    "parse_beat_value",
    "parse_duration",
    "parse_pitch",
    "parse_position",
    "parse_position_list",
    "midi_to_note_name",
    "strip_comments",
    "tokenize",
    "Token",
    "PositionToken",
    "VelocityToken",
    "DurationToken",
    "ProbabilityToken",
    "NoteToken",
    "BarCopyToken",
    "ClearBufferToken",
    "BeatRepeat",
]
