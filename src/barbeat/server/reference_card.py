"""bar|beat notation reference card, used as the tool description."""

from __future__ import annotations

_POSITION_SECTION = """\
## Positions
  bar|beat     1-based bar and beat: 1|1 = clip start, 2|3.5, 1|4/3, 1|2+1/3
  |beat        Same bar as the last position: 1|1 C3 |2 D3 |3 E3
  Notes after one position form a chord: 1|1 C3 E3 G3
  1|1,3        Beat list: every following note on each beat
  1|1x4@0.5    Repeat: 4 hits half a beat apart (x4 alone steps by t)"""

_SETTER_SECTION = """\
## Setters (stay in effect until changed)
  v100         Velocity 0-127 (default 100)
  v80-120      Velocity range: centre 100, deviation 20 (either order)
  t0.5         Duration in beats of the time signature (default 1)
  t1:2         Duration as bars:beats
  p0.5         Probability 0.0-1.0 (default 1)"""

_NOTE_SECTION = """\
## Notes
  C3 = MIDI 60 (middle C)  F#2  Bb4  c##1  C-2 = 0  G8 = 127
  Sharps and flats naming the same key are the same note."""

_MODE_SECTION = """\
## Update modes
  replace      Clip notes are replaced by the notation (v0 notes ignored)
  merge        Notation is added on top; a note at the same position and
               pitch is overwritten; v0 removes the note at that exact spot
               e.g. v0 1|3 C3 removes the C3 at bar 1 beat 3"""

_COPY_SECTION = """\
## Bar copy
  @2=1         Copy bar 1 to bar 2, then continue at 2|1
  @2=          Copy the previous bar
  @5=1-2       Copy bars 1-2 to bars 5-6
  @3-10=1-2    Repeat bars 1-2 over bars 3-10
  @clear       Forget the notes recorded for copying"""

_COMMENT_SECTION = """\
## Comments
  // to end of line    # to end of line    /* block */"""

REFERENCE_CARD = "\n\n".join(
    [
        "# bar|beat notation",
        _POSITION_SECTION,
        _SETTER_SECTION,
        _NOTE_SECTION,
        _COPY_SECTION,
        _MODE_SECTION,
        _COMMENT_SECTION,
    ]
)


def build_tool_description() -> str:
    """Description for the notes tools: a one-line summary plus the card."""
    return (
        "Write notes into a clip with bar|beat notation, e.g. "
        "'1|1 v100 t1 C3 E3 G3 |3 D3'.\n\n" + REFERENCE_CARD
    )
