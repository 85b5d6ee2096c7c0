"""End-to-end tests for apply_notation."""

from __future__ import annotations

from dataclasses import replace

import pytest

from barbeat.engine import apply_notation
from barbeat.errors import ArgumentError, NotationRangeError, NotationSyntaxError
from barbeat.model.notes import NoteCollection, TimeSignature


class TestApplyNotation:
    def test_end_to_end(self):
        result = apply_notation("1|1 v100 t1.0 C3\n1|2 D3\n1|3 E3", "4/4", "replace")
        notes = list(result.notes)
        assert [(n.pitch, n.start_beats) for n in notes] == [(60, 0.0), (62, 1.0), (64, 2.0)]
        assert all(n.duration_beats == 1.0 for n in notes)
        assert all(n.velocity == 100 for n in notes)
        assert result.clip_length == 4.0
        assert result.note_count == 3
        assert result.time_signature == TimeSignature(4, 4)

    def test_merge_deletes_with_v0(self):
        base = apply_notation("1|1 C3 |2 D3 |3 C3", "4/4", "replace").notes
        result = apply_notation("v0 1|3 C3", "4/4", "merge", base)
        assert len(result.notes) == 2
        assert result.notes.get(2.0, 60) is None

    def test_enharmonic_deletion(self):
        base = apply_notation("1|3 C#3", "4/4", "replace").notes
        result = apply_notation("v0 1|3 Db3", "4/4", "merge", base)
        assert len(result.notes) == 0

    def test_replace_is_idempotent(self):
        text = "1|1 v90 C3 E3 |3 t2 G3"
        first = apply_notation(text, "4/4", "replace")
        second = apply_notation(text, "4/4", "replace", first.notes)
        assert first.notes == second.notes

    def test_merge_does_not_modify_existing(self):
        base = apply_notation("1|1 C3", "4/4", "replace").notes
        apply_notation("1|2 D3", "4/4", "merge", base)
        assert len(base) == 1

    def test_clip_length_rounds_to_whole_bars(self):
        assert apply_notation("2|1 C3").clip_length == 8.0
        assert apply_notation("").clip_length == 4.0
        assert apply_notation("1|4 C3", "3/4").clip_length == 6.0

    def test_events_keep_velocity_zero(self):
        result = apply_notation("v0 1|1 C3", "4/4", "merge")
        assert len(result.events) == 1
        assert result.note_count == 0

    def test_none_notation(self):
        assert apply_notation(None).note_count == 0

    def test_transforms_run_before_reconcile(self):
        def up_an_octave(events):
            return [replace(e, pitch=e.pitch + 12) for e in events]

        result = apply_notation("1|1 C3", "4/4", "replace", transforms=[up_an_octave])
        assert [n.pitch for n in result.notes] == [72]


class TestValidationOrder:
    def test_bad_mode_before_parse(self):
        with pytest.raises(ArgumentError):
            apply_notation("!! not notation", "4/4", "bogus")

    def test_bad_signature_before_parse(self):
        with pytest.raises(ArgumentError):
            apply_notation("!! not notation", "4/7", "merge")

    def test_syntax_error(self):
        with pytest.raises(NotationSyntaxError):
            apply_notation("1|1 C3 !!")

    def test_range_error(self):
        with pytest.raises(NotationRangeError):
            apply_notation("0|1 C3")

    def test_failure_leaves_existing_untouched(self):
        base = apply_notation("1|1 C3", "4/4", "replace").notes
        snapshot = NoteCollection(base)
        with pytest.raises(NotationSyntaxError):
            apply_notation("v0 1|1 C3 ??", "4/4", "merge", base)
        assert base == snapshot
