"""Tests for the clip resize planner and its execution."""

from __future__ import annotations

import pytest

from barbeat.errors import NotationRangeError, NotationSyntaxError, StoreError
from barbeat.model.notes import NoteEvent, TimeSignature
from barbeat.model.resize import (
    ResizeKind,
    Tile,
    execute_resize,
    parse_length,
    plan_resize,
)
from barbeat.server.store import Clip, ClipRegistry, InMemoryNoteStore


class RecordingArranger:
    def __init__(self):
        self.calls = []

    def truncate(self, clip_id, length):
        self.calls.append(("truncate", clip_id, length))

    def reveal(self, clip_id, length):
        self.calls.append(("reveal", clip_id, length))

    def place_tile(self, clip_id, tile):
        self.calls.append(("place_tile", clip_id, tile))
        return f"{clip_id}+{tile.start:g}"


class TestPlanResize:
    def test_unchanged(self):
        plan = plan_resize(8.0, 8.0, 8.0)
        assert plan.kind is ResizeKind.UNCHANGED
        assert plan.tiles == ()

    def test_shorten(self):
        plan = plan_resize(8.0, 4.0, 8.0)
        assert plan.kind is ResizeKind.SHORTEN
        assert plan.tiles == ()

    def test_lengthen_within_content(self):
        plan = plan_resize(4.0, 6.0, 8.0)
        assert plan.kind is ResizeKind.LENGTHEN_WITHIN_CONTENT
        assert plan.tiles == ()

    def test_lengthen_to_exact_content(self):
        assert plan_resize(4.0, 8.0, 8.0).kind is ResizeKind.LENGTHEN_WITHIN_CONTENT

    def test_lengthen_beyond_content(self):
        plan = plan_resize(8.0, 20.0, 8.0)
        assert plan.kind is ResizeKind.LENGTHEN_BEYOND_CONTENT
        assert plan.tiles == (Tile(8.0, 8.0, 0.0), Tile(16.0, 4.0, 0.0))

    def test_tiles_cover_target_exactly(self):
        plan = plan_resize(3.0, 12.0, 3.0)
        assert [t.start for t in plan.tiles] == [3.0, 6.0, 9.0]
        last = plan.tiles[-1]
        assert last.start + last.length == 12.0

    def test_tiles_continue_from_current_span(self):
        plan = plan_resize(10.0, 14.0, 4.0)
        assert plan.tiles == (Tile(10.0, 2.0, 2.0), Tile(12.0, 2.0, 0.0))

    def test_tiled_span_resized_again_is_unchanged(self):
        assert plan_resize(20.0, 20.0, 8.0).kind is ResizeKind.UNCHANGED

    @pytest.mark.parametrize(
        "current, target, content",
        [(0.0, 4.0, 4.0), (4.0, 0.0, 4.0), (4.0, 4.0, -1.0)],
    )
    def test_non_positive_rejected(self, current, target, content):
        with pytest.raises(NotationRangeError):
            plan_resize(current, target, content)


class TestParseLength:
    def test_bars(self):
        assert parse_length("2:0", TimeSignature(4, 4)) == 8.0

    def test_six_eight(self):
        assert parse_length("1:3", TimeSignature(6, 8)) == 4.5

    def test_zero_rejected(self):
        with pytest.raises(NotationRangeError):
            parse_length("0:0", TimeSignature(4, 4))

    def test_pipe_rejected(self):
        with pytest.raises(NotationSyntaxError):
            parse_length("2|1", TimeSignature(4, 4))


class TestExecuteResize:
    def test_shorten_truncates(self):
        arranger = RecordingArranger()
        touched = execute_resize(plan_resize(8.0, 4.0, 8.0), "a", arranger)
        assert touched == ["a"]
        assert arranger.calls == [("truncate", "a", 4.0)]

    def test_within_content_reveals(self):
        arranger = RecordingArranger()
        execute_resize(plan_resize(4.0, 6.0, 8.0), "a", arranger)
        assert arranger.calls == [("reveal", "a", 6.0)]

    def test_beyond_content_reveals_then_tiles(self):
        arranger = RecordingArranger()
        touched = execute_resize(plan_resize(4.0, 12.0, 8.0), "a", arranger)
        assert arranger.calls == [
            ("reveal", "a", 8.0),
            ("place_tile", "a", Tile(8.0, 4.0, 0.0)),
        ]
        assert touched == ["a", "a+8"]

    def test_beyond_content_already_revealed(self):
        arranger = RecordingArranger()
        execute_resize(plan_resize(8.0, 16.0, 8.0), "a", arranger)
        assert [c[0] for c in arranger.calls] == ["place_tile"]

    def test_unchanged_does_nothing(self):
        arranger = RecordingArranger()
        assert execute_resize(plan_resize(4.0, 4.0, 4.0), "a", arranger) == ["a"]
        assert arranger.calls == []


def _clip(clip_id, starts, length, content_length):
    notes = [
        NoteEvent(pitch=60, start_beats=s, duration_beats=1.0, velocity=100)
        for s in starts
    ]
    return Clip(
        clip_id=clip_id,
        time_signature=TimeSignature(4, 4),
        store=InMemoryNoteStore(notes),
        length=length,
        content_length=content_length,
    )


class TestClipRegistryArranger:
    def test_truncate_hides_content_past_end(self):
        registry = ClipRegistry()
        registry.add(_clip("a", [0.0, 2.0, 6.0], 8.0, 8.0))
        registry.truncate("a", 4.0)
        clip = registry.get("a")
        assert clip.length == 4.0
        assert clip.content_length == 8.0
        assert [n.start_beats for n in clip.store.read_notes(clip.visible_window)] == [0.0, 2.0]
        assert len(clip.store.read_notes()) == 3

    def test_truncate_removes_tiles_past_end(self):
        registry = ClipRegistry()
        registry.add(_clip("a", [0.0], 4.0, 4.0))
        execute_resize(plan_resize(4.0, 12.0, 4.0), "a", registry)
        assert registry.ids() == ["a", "a@4", "a@8"]
        registry.truncate("a", 6.0)
        clip = registry.get("a")
        assert registry.ids() == ["a", "a@4"]
        assert clip.tiles == ["a@4"]
        assert clip.length == 6.0
        assert registry.get("a@4").length == 2.0

    def test_truncate_cuts_straddling_tile_notes(self):
        registry = ClipRegistry()
        registry.add(_clip("a", [0.0, 3.0], 4.0, 4.0))
        execute_resize(plan_resize(4.0, 8.0, 4.0), "a", registry)
        registry.truncate("a", 6.0)
        tile = registry.get("a@4")
        assert [n.start_beats for n in tile.store.read_notes()] == [0.0]

    def test_reveal_hidden_content(self):
        registry = ClipRegistry()
        registry.add(_clip("a", [0.0, 6.0], 4.0, 8.0))
        plan = plan_resize(4.0, 8.0, 8.0)
        execute_resize(plan, "a", registry)
        assert registry.get("a").length == 8.0

    def test_reveal_past_content_rejected(self):
        registry = ClipRegistry()
        registry.add(_clip("a", [0.0], 4.0, 4.0))
        with pytest.raises(StoreError):
            registry.reveal("a", 8.0)

    def test_place_tile_copies_window(self):
        registry = ClipRegistry()
        registry.add(_clip("a", [0.0, 1.0, 3.0], 4.0, 4.0))
        tile_id = registry.place_tile("a", Tile(start=4.0, length=2.0, offset=0.0))
        assert tile_id == "a@4"
        tile = registry.get(tile_id)
        assert tile.start == 4.0
        assert tile.length == 2.0
        assert [n.start_beats for n in tile.store.read_notes()] == [0.0, 1.0]

    def test_place_tile_with_offset_shifts_notes(self):
        registry = ClipRegistry()
        registry.add(_clip("a", [0.0, 2.0, 3.0], 4.0, 4.0))
        tile_id = registry.place_tile("a", Tile(start=4.0, length=2.0, offset=2.0))
        notes = registry.get(tile_id).store.read_notes()
        assert [n.start_beats for n in notes] == [0.0, 1.0]

    def test_unknown_clip(self):
        with pytest.raises(StoreError, match="known clips: none"):
            ClipRegistry().get("nope")

    def test_duplicate_id(self):
        registry = ClipRegistry()
        registry.add(_clip("a", [], 4.0, 4.0))
        with pytest.raises(StoreError):
            registry.add(_clip("a", [], 4.0, 4.0))

    def test_place_tile_extends_source_span(self):
        registry = ClipRegistry()
        registry.add(_clip("a", [0.0], 4.0, 4.0))
        registry.place_tile("a", Tile(start=4.0, length=4.0, offset=0.0))
        source = registry.get("a")
        assert source.tiles == ["a@4"]
        assert source.length == 8.0
        assert source.visible_window.end == 4.0

    def test_lengthen_twice_to_same_length(self):
        registry = ClipRegistry()
        registry.add(_clip("a", [0.0], 4.0, 4.0))
        execute_resize(plan_resize(4.0, 8.0, 4.0), "a", registry)
        clip = registry.get("a")
        plan = plan_resize(clip.length, 8.0, clip.content_length)
        assert plan.kind is ResizeKind.UNCHANGED
        assert execute_resize(plan, "a", registry) == ["a"]
        assert registry.ids() == ["a", "a@4"]

    def test_lengthen_tiled_clip_adds_missing_tiles_only(self):
        registry = ClipRegistry()
        registry.add(_clip("a", [0.0], 4.0, 4.0))
        execute_resize(plan_resize(4.0, 8.0, 4.0), "a", registry)
        clip = registry.get("a")
        execute_resize(plan_resize(clip.length, 12.0, clip.content_length), "a", registry)
        assert registry.ids() == ["a", "a@4", "a@8"]
        assert clip.length == 12.0
