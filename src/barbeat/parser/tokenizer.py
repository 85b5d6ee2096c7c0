"""Comment-aware tokenizer for bar|beat notation.

Comments are blanked out first, then the remaining text is split on
whitespace and each token is classified and parsed into a typed token:

- ``1|1`` / ``|2``     position (explicit or shorthand)
- ``1|1,3`` / ``1|1x4@0.5`` beat list and repeat
- ``v100`` / ``v80-120`` velocity setter
- ``t0.5`` / ``t1:2``  duration setter
- ``p0.75``            probability setter
- ``C3`` / ``F#2``     note
- ``@2=1`` / ``@clear``  bar copy and copy-buffer reset
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from barbeat.config import MIDI_MAX, MIDI_MIN
from barbeat.errors import BarBeatError, NotationRangeError, NotationSyntaxError
from barbeat.model.notes import Duration
from barbeat.parser.duration import parse_duration
from barbeat.parser.pitch import parse_pitch
from barbeat.parser.position import BeatRepeat, parse_position_list

_TOKEN_RE = re.compile(r"\S+")
_VELOCITY_RE = re.compile(r"^v(-?\d+)(?:-(-?\d+))?$")
_PROBABILITY_RE = re.compile(r"^p(-?(?:\d+(?:\.\d*)?|\.\d+))$")
_BAR_COPY_RE = re.compile(r"^@(\d+)(?:-(\d+))?=(?:(\d+)(?:-(\d+))?)?$")

_NOTE_LETTERS = frozenset("ABCDEFGabcdefg")


# ---------------------------------------------------------------------------
# Token types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Token:
    raw: str
    offset: int  # index into the caller's text


@dataclass(frozen=True)
class PositionToken(Token):
    bar: int | None  # None for |beat shorthand
    beats: tuple[BeatRepeat, ...]

    @property
    def beat(self) -> float:
        """First beat of the list."""
        return self.beats[0].start


@dataclass(frozen=True)
class VelocityToken(Token):
    low: int
    high: int  # equal to low for a fixed velocity

    @property
    def is_range(self) -> bool:
        return self.low != self.high


@dataclass(frozen=True)
class DurationToken(Token):
    duration: Duration


@dataclass(frozen=True)
class ProbabilityToken(Token):
    probability: float


@dataclass(frozen=True)
class NoteToken(Token):
    pitch: int


@dataclass(frozen=True)
class BarCopyToken(Token):
    """``@dest=source``. A missing source copies the bar before *dest_start*."""

    dest_start: int
    dest_end: int
    source_start: int | None
    source_end: int | None


@dataclass(frozen=True)
class ClearBufferToken(Token):
    pass


# ---------------------------------------------------------------------------
# Comments
# ---------------------------------------------------------------------------

def strip_comments(text: str) -> str:
    """Blank out comments, keeping newlines so offsets stay valid.

    ``//`` and ``/* */`` start a comment anywhere; ``#`` only at the start of
    a token, so sharps like ``C#3`` are untouched.

    >>> strip_comments("C3 // lead").rstrip()
    'C3'
    """
    chars = list(text)
    i = 0
    n = len(text)
    while i < n:
        if text.startswith("/*", i):
            end = text.find("*/", i + 2)
            if end == -1:
                raise _located(
                    NotationSyntaxError("Unterminated block comment"), text, "/*", i
                )
            _blank(chars, i, end + 2)
            i = end + 2
        elif text.startswith("//", i) or (
            text[i] == "#" and (i == 0 or text[i - 1].isspace())
        ):
            end = text.find("\n", i)
            end = n if end == -1 else end
            _blank(chars, i, end)
            i = end
        else:
            i += 1
    return "".join(chars)


def _blank(chars: list[str], start: int, end: int) -> None:
    for j in range(start, end):
        if chars[j] != "\n":
            chars[j] = " "


# ---------------------------------------------------------------------------
# Tokenizing
# ---------------------------------------------------------------------------

def tokenize(text: str) -> list[Token]:
    """Split bar|beat *text* into typed tokens.

    Examples
    --------
    >>> [t.raw for t in tokenize("1|1 v100 C3 E3 // chord")]
    ['1|1', 'v100', 'C3', 'E3']

    Raises
    ------
    NotationSyntaxError
        On the first unparsable token.
    NotationRangeError
        On the first well-formed token whose value is out of range.
    """
    stripped = strip_comments(text)
    tokens: list[Token] = []
    for m in _TOKEN_RE.finditer(stripped):
        raw = m.group(0)
        try:
            tokens.append(_classify(raw, m.start()))
        except BarBeatError as exc:
            raise _located(exc, text, raw, m.start()) from None
    return tokens


def _classify(raw: str, offset: int) -> Token:
    if raw.startswith("@"):
        return _parse_bar_copy(raw, offset)
    if "|" in raw:
        bar, beats = parse_position_list(raw)
        return PositionToken(raw=raw, offset=offset, bar=bar, beats=beats)

    head = raw[0]
    if head == "v":
        low, high = _parse_velocity(raw)
        return VelocityToken(raw=raw, offset=offset, low=low, high=high)
    if head == "t":
        return DurationToken(raw=raw, offset=offset, duration=parse_duration(raw[1:]))
    if head == "p":
        return ProbabilityToken(raw=raw, offset=offset, probability=_parse_probability(raw))
    if head in _NOTE_LETTERS:
        return NoteToken(raw=raw, offset=offset, pitch=parse_pitch(raw))

    raise NotationSyntaxError(f"Unrecognized token '{raw}'")


def _parse_velocity(raw: str) -> tuple[int, int]:
    """Return ``(low, high)``; range endpoints are reordered so low <= high."""
    m = _VELOCITY_RE.match(raw)
    if not m:
        raise NotationSyntaxError(
            f"Invalid velocity '{raw}' (expected v<0-127> or v<min>-<max>)"
        )
    first = int(m.group(1))
    second = int(m.group(2)) if m.group(2) is not None else first
    for value in (first, second):
        if not MIDI_MIN <= value <= MIDI_MAX:
            raise NotationRangeError(f"Velocity {value} out of range (0-127)")
    return min(first, second), max(first, second)


def _parse_bar_copy(raw: str, offset: int) -> Token:
    if raw == "@clear":
        return ClearBufferToken(raw=raw, offset=offset)
    m = _BAR_COPY_RE.match(raw)
    if not m:
        raise NotationSyntaxError(
            f"Invalid bar copy '{raw}' (expected @2=1, @2=, @5=1-2, @3-10=1-2 or @clear)"
        )
    dest_start = int(m.group(1))
    dest_end = int(m.group(2)) if m.group(2) is not None else dest_start
    source_start = int(m.group(3)) if m.group(3) is not None else None
    source_end = int(m.group(4)) if m.group(4) is not None else source_start
    for first, last in ((dest_start, dest_end), (source_start, source_end)):
        if first is None:
            continue
        if first < 1:
            raise NotationRangeError(f"Bar number must be 1 or greater, got: {first}")
        if first > last:
            raise NotationRangeError(f"Bar range {first}-{last} is reversed")
    return BarCopyToken(
        raw=raw,
        offset=offset,
        dest_start=dest_start,
        dest_end=dest_end,
        source_start=source_start,
        source_end=source_end,
    )


def _parse_probability(raw: str) -> float:
    m = _PROBABILITY_RE.match(raw)
    if not m:
        raise NotationSyntaxError(f"Invalid probability '{raw}' (expected p<0.0-1.0>)")
    value = float(m.group(1))
    if not 0.0 <= value <= 1.0:
        raise NotationRangeError(f"Probability {value} out of range (0.0-1.0)")
    return value


def _located(exc: BarBeatError, text: str, fragment: str, offset: int) -> BarBeatError:
    """Return a copy of *exc* carrying the fragment and its location in *text*."""
    line = text.count("\n", 0, offset) + 1
    column = offset - (text.rfind("\n", 0, offset) + 1) + 1
    return type(exc)(
        f"{exc.message} ('{fragment}')" if fragment not in exc.message else exc.message,
        fragment=fragment,
        offset=offset,
        line=line,
        column=column,
    )
