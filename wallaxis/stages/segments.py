"""Segment stages — clean up raw boundary lines and pair them into walls.

Runs before any centerline exists: snaps near-cardinal angles, buckets
segments by direction, folds collinear duplicates together and pairs the
two faces of each wall.
"""

from __future__ import annotations
import logging
import math

from wallaxis.core import geo_algo
from wallaxis.models import Point2D, ProcessingContext
from wallaxis.models.context import pair_key
from wallaxis.models.geometry import EPSILON
from wallaxis.stages.base import ProcessingStage

logger = logging.getLogger(__name__)


PAIR_MIN_RATIO = 0.8    # Accepted face separation, as a fraction of the thickness
PAIR_MAX_RATIO = 1.2
PAIR_MIN_OVERLAP = 0.5  # Overlap / shorter face


class NormalizeAnglesStage(ProcessingStage):
    """Snap near-cardinal segments to exact 0/90/180/270 degrees."""

    priority = 10

    def get_id(self) -> str:
        return "segments.normalize"

    def get_name(self) -> str:
        return "Normalize Angles"

    def run(self, context: ProcessingContext) -> int:
        tolerance = context.config.angle_tolerance_rad
        snapped_count = 0

        for seg in context.active_segments():
            current = geo_algo.normalize_0_to_2pi(seg.angle)
            snapped = geo_algo.snap_to_cardinal(current, tolerance)
            if abs(snapped - current) <= EPSILON:
                continue

            length = seg.length
            seg.end = Point2D(
                x=seg.start.x + length * math.cos(snapped),
                y=seg.start.y + length * math.sin(snapped),
            )
            snapped_count += 1

        logger.debug("Snapped %d segments to cardinal directions", snapped_count)
        return snapped_count


class AngleGroupingStage(ProcessingStage):
    """Bucket active segments by rounded direction in whole degrees."""

    priority = 20
    dependencies = ["segments.normalize"]

    def get_id(self) -> str:
        return "segments.group"

    def get_name(self) -> str:
        return "Build Angle Groups"

    def run(self, context: ProcessingContext) -> int:
        groups: dict[int, list[int]] = {}
        for seg in context.active_segments():
            key = int(round(math.degrees(seg.normalized_angle))) % 180
            groups.setdefault(key, []).append(seg.index)

        # Stable iteration: buckets by key, members by input index
        context.angle_groups = {k: sorted(groups[k]) for k in sorted(groups)}
        logger.debug("Built %d angle groups", len(context.angle_groups))
        return len(context.angle_groups)


class MergeSegmentsStage(ProcessingStage):
    """Fold overlapping or touching collinear segments into one (fixpoint)."""

    priority = 30
    dependencies = ["segments.group"]

    def get_id(self) -> str:
        return "segments.merge"

    def get_name(self) -> str:
        return "Merge Collinear Segments"

    def run(self, context: ProcessingContext) -> int:
        config = context.config
        angle_tol = config.angle_tolerance_rad
        dist_tol = config.distance_tolerance
        total = 0

        for iteration in range(config.merge_iterations):
            merged_this_pass = 0

            for group in context.angle_groups.values():
                members = [context.segment(i) for i in group if context.segment(i).is_active]

                for i, seg1 in enumerate(members):
                    if not seg1.is_active:
                        continue
                    for seg2 in members[i + 1:]:
                        if not seg2.is_active:
                            continue
                        if not geo_algo.are_collinear(
                            seg1.as_segment, seg2.as_segment, angle_tol, dist_tol,
                        ):
                            continue

                        overlap = geo_algo.calculate_overlap(seg1.as_segment, seg2.as_segment)
                        gap = geo_algo.calculate_gap_distance(seg1.as_segment, seg2.as_segment)
                        if not overlap.has_overlap and gap > dist_tol:
                            continue

                        # The longer segment survives, the earlier one on ties
                        if seg2.length > seg1.length + EPSILON:
                            keep, drop = seg2, seg1
                        else:
                            keep, drop = seg1, seg2

                        keep.set_from_segment(
                            geo_algo.merge_collinear(seg1.as_segment, seg2.as_segment, angle_tol)
                        )
                        if drop.thickness > keep.thickness:
                            keep.thickness = drop.thickness
                            keep.wall_type = drop.wall_type
                        keep.is_single_line = keep.is_single_line or drop.is_single_line

                        drop.is_active = False
                        drop.merged_into_id = keep.index
                        merged_this_pass += 1
                        logger.debug("Merged segment %d into %d", drop.index, keep.index)
                        if drop is seg1:
                            break

            total += merged_this_pass
            if merged_this_pass == 0:
                break
        else:
            logger.warning(
                "Segment merge did not converge after %d iterations", config.merge_iterations,
            )

        return total


class PairDetectionStage(ProcessingStage):
    """Pair the two parallel faces of each wall, widest thickness first."""

    priority = 40
    dependencies = ["segments.merge"]

    def get_id(self) -> str:
        return "segments.pair"

    def get_name(self) -> str:
        return "Detect Wall Pairs"

    def applies(self, context: ProcessingContext) -> bool:
        return len(context.config.wall_thicknesses) > 0

    def run(self, context: ProcessingContext) -> int:
        config = context.config
        angle_tol = config.angle_tolerance_rad
        pair_count = 0
        context.processed_pairs.clear()

        for thickness in sorted(config.wall_thicknesses, reverse=True):
            min_dist = thickness * PAIR_MIN_RATIO
            max_dist = thickness * PAIR_MAX_RATIO

            for group in context.angle_groups.values():
                members = [
                    context.segment(i) for i in group
                    if context.segment(i).is_active and not context.segment(i).is_paired
                ]

                for i, seg1 in enumerate(members):
                    if not seg1.is_active or seg1.is_paired:
                        continue

                    best_score = math.inf
                    best = None
                    for seg2 in members[i + 1:]:
                        if not seg2.is_active or seg2.is_paired:
                            continue
                        score = self._score(seg1, seg2, thickness, min_dist, max_dist, angle_tol)
                        if score is not None and score < best_score:
                            best_score = score
                            best = seg2

                    if best is None:
                        continue

                    seg1.set_paired_with(best)
                    context.processed_pairs.add(pair_key(seg1.index, best.index))
                    pair_count += 1
                    logger.debug(
                        "Paired segments %d and %d (t=%g, score=%.2f)",
                        seg1.index, best.index, thickness, best_score,
                    )

        return pair_count

    def _score(self, seg1, seg2, thickness, min_dist, max_dist, angle_tol) -> float | None:
        """Pairing score (lower is better), or None if seg2 cannot be the opposite face."""
        if not geo_algo.is_parallel(seg1.angle, seg2.angle, angle_tol):
            return None

        distance = geo_algo.between_parallel_segments(seg1.as_segment, seg2.as_segment)
        if distance < min_dist or distance > max_dist:
            return None

        overlap = geo_algo.calculate_overlap(seg1.as_segment, seg2.as_segment)
        if not overlap.has_overlap or overlap.overlap_percent < PAIR_MIN_OVERLAP:
            return None

        return abs(distance - thickness) + (1.0 - overlap.overlap_percent) * thickness
