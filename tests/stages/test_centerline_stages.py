# File: tests/stages/test_centerline_stages.py

"""Tests for centerline generation, gap recovery, merging and cleanup."""

import math

import pytest

from wallaxis.core.processor import WallSegmentProcessor
from wallaxis.models import CenterLine, Point2D, ProcessorConfig
from wallaxis.stages.centerlines import cleanup_centerlines, merge_overlapping_centerlines


def _cl(x1, y1, x2, y2, thickness=200.0, handles=()):
    return CenterLine(
        start=Point2D(x=x1, y=y1),
        end=Point2D(x=x2, y=y2),
        thickness=thickness,
        source_handles=list(handles),
    )


def _door_wall(make_segment, gap):
    """Two 200 walls on the X axis separated by an opening of `gap`."""
    right = 2000 + gap
    return [
        make_segment(0, 0, 2000, 0, handle="a1"),
        make_segment(0, 200, 2000, 200, handle="a2"),
        make_segment(right, 0, right + 2100, 0, handle="b1"),
        make_segment(right, 200, right + 2100, 200, handle="b2"),
    ]


# =============================================================================
# Generation
# =============================================================================


class TestPairCenterlines:

    def test_centerline_between_faces(self, wall_faces):
        result = WallSegmentProcessor(ProcessorConfig(wall_thicknesses=[200])).process(wall_faces)

        assert len(result) == 1
        cl = result[0]
        assert cl.start.x == pytest.approx(0)
        assert cl.start.y == pytest.approx(100)
        assert cl.end.x == pytest.approx(3000)
        assert cl.end.y == pytest.approx(100)
        assert cl.thickness == pytest.approx(200)
        assert cl.wall_type == "W200"
        assert cl.source_handles == ["h1", "h2"]

    def test_centerline_is_equidistant_from_faces(self, wall_faces):
        cl = WallSegmentProcessor(ProcessorConfig(wall_thicknesses=[200])).process(wall_faces)[0]
        for face in wall_faces:
            assert abs(cl.start.y - face.start.y) == pytest.approx(cl.thickness / 2)


class TestSingleLines:

    def test_single_line_wall_is_promoted(self, make_segment):
        result = WallSegmentProcessor().process([make_segment(0, 0, 2000, 0, handle="s", single=True)])
        assert len(result) == 1
        assert result[0].thickness == 100
        assert result[0].source_handles == ["s"]

    def test_stray_line_is_dropped(self, make_segment):
        assert WallSegmentProcessor().process([make_segment(0, 0, 2000, 0)]) == []

    def test_overlapping_single_lines_are_not_double_counted(self, make_segment):
        result = WallSegmentProcessor().process([
            make_segment(0, 0, 2000, 0, single=True),
            make_segment(1500, 0, 3000, 0, single=True),
        ])
        assert len(result) == 1
        assert result[0].length == pytest.approx(3000)

    def test_merged_single_lines_keep_their_slope(self, make_segment):
        a = math.radians(3)
        result = WallSegmentProcessor(ProcessorConfig(angle_tolerance=1.0)).process([
            make_segment(0, 0, 3000 * math.cos(a), 3000 * math.sin(a), single=True),
            make_segment(
                2000 * math.cos(a), 2000 * math.sin(a), 5000 * math.cos(a), 5000 * math.sin(a),
                single=True,
            ),
        ])
        assert len(result) == 1
        assert result[0].angle == pytest.approx(a)
        assert result[0].end.x == pytest.approx(5000 * math.cos(a))
        assert result[0].end.y == pytest.approx(5000 * math.sin(a))


# =============================================================================
# Gap recovery
# =============================================================================


class TestGapRecovery:

    def test_door_opening_is_bridged(self, make_segment):
        config = ProcessorConfig(wall_thicknesses=[200], door_widths=[900])
        context = WallSegmentProcessor(config).run(_door_wall(make_segment, 900))

        assert len(context.centerlines) == 1
        cl = context.centerlines[0]
        assert cl.start.x == pytest.approx(0)
        assert cl.end.x == pytest.approx(5000)
        assert cl.start.y == pytest.approx(100)
        assert sorted(cl.source_handles) == ["a1", "a2", "b1", "b2"]
        assert context.stats.recovered_gaps == 1

    def test_gap_wider_than_any_opening_is_kept(self, make_segment):
        config = ProcessorConfig(wall_thicknesses=[200], door_widths=[900])
        result = WallSegmentProcessor(config).process(_door_wall(make_segment, 1500))
        assert len(result) == 2

    def test_gap_not_matching_an_opening_is_kept(self, make_segment):
        config = ProcessorConfig(wall_thicknesses=[200], door_widths=[900])
        result = WallSegmentProcessor(config).process(_door_wall(make_segment, 600))
        assert len(result) == 2

    def test_short_gap_is_auto_joined(self, make_segment):
        result = WallSegmentProcessor(ProcessorConfig(wall_thicknesses=[200])).process(
            _door_wall(make_segment, 200)
        )
        assert len(result) == 1
        assert result[0].length == pytest.approx(4300)

    @pytest.mark.parametrize("order", ["abc", "acb", "cba"])
    def test_chain_of_openings_is_order_independent(self, make_segment, order):
        pieces = {
            "a": make_segment(0, 0, 1000, 0, handle="a", single=True),
            "b": make_segment(1900, 0, 2000, 0, handle="b", single=True),
            "c": make_segment(2900, 0, 4000, 0, handle="c", single=True),
        }
        context = WallSegmentProcessor(ProcessorConfig(door_widths=[900])).run(
            [pieces[key] for key in order]
        )

        assert len(context.centerlines) == 1
        cl = context.centerlines[0]
        assert min(cl.start.x, cl.end.x) == pytest.approx(0)
        assert max(cl.start.x, cl.end.x) == pytest.approx(4000)
        assert sorted(cl.source_handles) == ["a", "b", "c"]
        assert context.stats.recovered_gaps == 2


# =============================================================================
# Overlap merge / auto extend
# =============================================================================


class TestMergeOverlapping:

    def test_overlapping_centerlines_merge(self):
        lines = [_cl(0, 0, 2000, 0, handles=["a"]), _cl(1500, 5, 3000, 5, handles=["b"])]
        merged = merge_overlapping_centerlines(lines, math.radians(5), 10, 3)

        assert merged == 1
        assert lines[0].length == pytest.approx(3000)
        assert lines[0].source_handles == ["a", "b"]
        assert not lines[1].is_active

    def test_touching_centerlines_stay_apart(self):
        lines = [_cl(0, 0, 1000, 0), _cl(1000, 0, 2000, 0)]
        assert merge_overlapping_centerlines(lines, math.radians(5), 10, 3) == 0
        assert all(cl.is_active for cl in lines)


class TestAutoExtend:

    def _corner(self, make_segment):
        return [
            make_segment(0, 0, 3000, 0, single=True),
            make_segment(3080, -1000, 3080, 1000, single=True),
        ]

    def test_end_extends_to_perpendicular_wall(self, make_segment):
        context = WallSegmentProcessor().run(self._corner(make_segment))
        horizontal = next(cl for cl in context.centerlines if abs(cl.start.y - cl.end.y) < 1)
        assert horizontal.end.x == pytest.approx(3080)
        assert horizontal.end.y == pytest.approx(0)
        assert context.stats.extended_corners == 1

    def test_disabled(self, make_segment):
        result = WallSegmentProcessor(ProcessorConfig(enable_auto_extend=False)).process(
            self._corner(make_segment)
        )
        horizontal = next(cl for cl in result if abs(cl.start.y - cl.end.y) < 1)
        assert horizontal.end.x == pytest.approx(3000)


# =============================================================================
# Cleanup
# =============================================================================


class TestCleanup:

    def _lines(self):
        inactive = _cl(0, 2000, 1000, 2000)
        inactive.is_active = False
        return [
            _cl(0, 0, 1000, 0, handles=["a"]),
            _cl(0, 0, 1000, 0, handles=["b"]),
            inactive,
            _cl(0, 500, 30, 500),
        ]

    def test_duplicates_fold_and_keep_handles(self):
        result = cleanup_centerlines(self._lines(), 50)
        assert len(result) == 1
        assert result[0].source_handles == ["a", "b"]

    def test_idempotent(self):
        once = cleanup_centerlines(self._lines(), 50)
        snapshot = [(cl.unique_id, list(cl.source_handles)) for cl in once]
        twice = cleanup_centerlines(once, 50)
        assert [(cl.unique_id, list(cl.source_handles)) for cl in twice] == snapshot

    def test_pipeline_output_is_already_clean(self, make_segment):
        config = ProcessorConfig(wall_thicknesses=[200], door_widths=[900])
        result = WallSegmentProcessor(config).process(_door_wall(make_segment, 900))
        ids = [cl.unique_id for cl in result]
        assert [cl.unique_id for cl in cleanup_centerlines(result, 50)] == ids
        assert len(set(ids)) == len(ids)
