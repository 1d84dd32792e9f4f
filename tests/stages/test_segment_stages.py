# File: tests/stages/test_segment_stages.py

"""Tests for angle normalization, grouping, merging and pair detection."""

import logging

import pytest

from wallaxis.core.processor import WallSegmentProcessor
from wallaxis.models import ProcessorConfig

SEGMENT_STAGES = ["segments.normalize", "segments.group", "segments.merge"]
PAIR_STAGES = SEGMENT_STAGES + ["segments.pair"]


def run_stages(segments, stages, **config):
    processor = WallSegmentProcessor(ProcessorConfig(enabled_stages=stages, **config))
    return processor.run(segments)


# =============================================================================
# Normalize / group
# =============================================================================


class TestNormalizeAngles:

    def test_near_horizontal_is_snapped(self, make_segment):
        context = run_stages([make_segment(0, 0, 1000, 17.45)], SEGMENT_STAGES)
        seg = context.segments[0]
        assert seg.end.y == pytest.approx(0, abs=1e-9)
        assert seg.length == pytest.approx(1000.152, abs=0.01)
        assert seg.start.x == 0

    def test_diagonal_is_untouched(self, make_segment):
        context = run_stages([make_segment(0, 0, 1000, 1000)], SEGMENT_STAGES)
        assert context.segments[0].end.x == pytest.approx(1000)
        assert context.segments[0].end.y == pytest.approx(1000)


class TestAngleGrouping:

    def test_groups_by_direction(self, make_segment):
        context = run_stages(
            [
                make_segment(0, 0, 1000, 0),
                make_segment(0, 0, 0, 1000),
                make_segment(0, 5000, -1000, 5000),
            ],
            ["segments.normalize", "segments.group"],
        )
        assert context.angle_groups == {0: [0, 2], 90: [1]}


# =============================================================================
# Merge
# =============================================================================


class TestMergeSegments:

    def test_overlapping_segments_become_union(self, make_segment):
        context = run_stages(
            [make_segment(0, 0, 1200, 0), make_segment(600, 0, 1800, 0)], SEGMENT_STAGES,
        )
        seg0, seg1 = context.segments
        assert seg0.length == pytest.approx(1800)
        assert not seg1.is_active
        assert seg1.merged_into_id == 0
        assert context.stats.merged_segments == 1

    def test_shorter_segment_is_folded_away(self, make_segment):
        context = run_stages(
            [make_segment(0, 0, 1000, 0), make_segment(600, 0, 1800, 0)], SEGMENT_STAGES,
        )
        seg0, seg1 = context.segments
        assert not seg0.is_active
        assert seg0.merged_into_id == 1
        assert seg1.start.x == pytest.approx(0)
        assert seg1.length == pytest.approx(1800)

    def test_small_gap_is_closed(self, make_segment):
        context = run_stages(
            [make_segment(0, 0, 1000, 0), make_segment(1005, 0, 2000, 0)], SEGMENT_STAGES,
        )
        assert len(context.active_segments()) == 1
        assert context.segments[0].length == pytest.approx(2000)

    def test_large_gap_is_kept(self, make_segment):
        context = run_stages(
            [make_segment(0, 0, 1000, 0), make_segment(1050, 0, 2000, 0)], SEGMENT_STAGES,
        )
        assert len(context.active_segments()) == 2

    def test_thicker_segment_wins(self, make_segment):
        context = run_stages(
            [
                make_segment(0, 0, 1000, 0, thickness=100, wall_type="A"),
                make_segment(500, 0, 1500, 0, thickness=200, wall_type="B"),
            ],
            SEGMENT_STAGES,
        )
        seg = context.segments[0]
        assert seg.thickness == 200
        assert seg.wall_type == "B"

    def test_chain_merges_to_fixpoint(self, make_segment):
        context = run_stages(
            [
                make_segment(0, 0, 1000, 0),
                make_segment(1500, 0, 2000, 0),
                make_segment(900, 0, 1600, 0),
            ],
            SEGMENT_STAGES,
        )
        active = context.active_segments()
        assert len(active) == 1
        assert active[0].start.x == pytest.approx(0)
        assert active[0].end.x == pytest.approx(2000)
        assert context.stats.merged_segments == 2

    def test_iteration_cap_is_reported(self, make_segment, caplog):
        with caplog.at_level(logging.WARNING, logger="wallaxis.stages.segments"):
            context = run_stages(
                [
                    make_segment(0, 0, 1000, 0),
                    make_segment(1500, 0, 2000, 0),
                    make_segment(900, 0, 1600, 0),
                ],
                SEGMENT_STAGES,
                merge_iterations=1,
            )
        assert len(context.active_segments()) == 2
        assert "did not converge" in caplog.text


# =============================================================================
# Pair detection
# =============================================================================


class TestPairDetection:

    def test_two_faces_pair(self, wall_faces):
        context = run_stages(wall_faces, PAIR_STAGES, wall_thicknesses=[200])
        seg0, seg1 = context.segments
        assert seg0.pair_segment_id == 1
        assert seg1.pair_segment_id == 0
        assert context.check_pairing()
        assert context.stats.detected_pairs == 1

    def test_committed_pair_is_recorded(self, wall_faces):
        context = run_stages(wall_faces, PAIR_STAGES, wall_thicknesses=[200])
        assert context.processed_pairs == {"0_1"}

    def test_separation_out_of_range(self, make_segment):
        context = run_stages(
            [make_segment(0, 0, 3000, 0), make_segment(0, 300, 3000, 300)],
            PAIR_STAGES,
            wall_thicknesses=[200],
        )
        assert not any(s.is_paired for s in context.segments)

    def test_insufficient_overlap(self, make_segment):
        context = run_stages(
            [make_segment(0, 0, 1000, 0), make_segment(800, 200, 1800, 200)],
            PAIR_STAGES,
            wall_thicknesses=[200],
        )
        assert not any(s.is_paired for s in context.segments)

    def test_segment_pairs_at_most_once(self, make_segment):
        context = run_stages(
            [
                make_segment(0, 0, 3000, 0),
                make_segment(0, 200, 3000, 200),
                make_segment(0, 400, 3000, 400),
            ],
            PAIR_STAGES,
            wall_thicknesses=[200],
        )
        seg0, seg1, seg2 = context.segments
        assert seg0.pair_segment_id == 1
        assert seg1.pair_segment_id == 0
        assert not seg2.is_paired
        assert context.check_pairing()

    def test_wider_thickness_claims_first(self, make_segment):
        context = run_stages(
            [
                make_segment(0, 0, 3000, 0),
                make_segment(0, 110, 3000, 110),
                make_segment(0, 200, 3000, 200),
            ],
            PAIR_STAGES,
            wall_thicknesses=[100, 200],
        )
        seg0, seg1, seg2 = context.segments
        assert seg0.pair_segment_id == 2
        assert seg2.pair_segment_id == 0
        assert not seg1.is_paired

    def test_skipped_without_thicknesses(self, wall_faces):
        context = run_stages(wall_faces, PAIR_STAGES)
        assert not any(s.is_paired for s in context.segments)
