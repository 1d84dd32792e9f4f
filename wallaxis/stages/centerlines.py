"""Centerline stages — build wall axes and tidy them up.

Generates centerlines from committed pairs and single-line walls, bridges
openings, merges overlapping pieces, closes corners and finally
deduplicates the result.
"""

from __future__ import annotations
import logging
import math

from wallaxis.core import geo_algo
from wallaxis.models import CenterLine, Point2D, ProcessingContext
from wallaxis.models.context import pair_key
from wallaxis.models.geometry import EPSILON
from wallaxis.stages.base import ProcessingStage

logger = logging.getLogger(__name__)


GAP_GROUP_DEGREES = 5       # Bucket width used by gap recovery
OPENING_MATCH_RATIO = 0.15  # A gap matches an opening width within +-15%
MAX_GAP_FACTOR = 1.1        # Gaps beyond 110% of the widest opening never bridge

ORIGIN = Point2D(x=0.0, y=0.0)


class PairCenterlineStage(ProcessingStage):
    """One centerline per committed pair, on the midline of the two faces."""

    priority = 50
    dependencies = ["segments.pair"]

    def get_id(self) -> str:
        return "centerlines.from_pairs"

    def get_name(self) -> str:
        return "Generate Centerlines From Pairs"

    def run(self, context: ProcessingContext) -> int:
        angle_tol = context.config.angle_tolerance_rad
        created = 0

        # Each committed pair is visited once, from its lower index
        for seg in context.segments:
            if not seg.is_active or not seg.is_paired or seg.index > seg.pair_segment_id:
                continue
            if pair_key(seg.index, seg.pair_segment_id) not in context.processed_pairs:
                continue

            partner = context.segment(seg.pair_segment_id)
            if not partner.is_active:
                continue

            centerline = CenterLine.from_wall_pair(seg, partner, angle_tol)
            if not centerline.is_valid:
                continue

            context.add_centerline(centerline)
            seg.is_processed = True
            partner.is_processed = True
            created += 1

        logger.info("Generated %d centerlines from wall pairs", created)
        return created


class SingleLineStage(ProcessingStage):
    """Promote unpaired single-line walls straight to centerlines."""

    priority = 60

    def get_id(self) -> str:
        return "centerlines.single_lines"

    def get_name(self) -> str:
        return "Add Single-Line Walls"

    def run(self, context: ProcessingContext) -> int:
        created = 0
        for seg in context.segments:
            if not seg.is_active or seg.is_processed or seg.is_paired:
                continue
            if not seg.is_single_line and seg.thickness <= 0:
                continue

            context.add_centerline(CenterLine.from_single_segment(seg))
            seg.is_processed = True
            created += 1

        logger.info("Promoted %d single-line walls", created)
        return created


class GapRecoveryStage(ProcessingStage):
    """Bridge door and column openings between collinear centerlines."""

    priority = 70

    def get_id(self) -> str:
        return "centerlines.recover_gaps"

    def get_name(self) -> str:
        return "Recover Opening Gaps"

    def applies(self, context: ProcessingContext) -> bool:
        return len(context.config.opening_widths) > 0

    def run(self, context: ProcessingContext) -> int:
        config = context.config
        valid_gaps = config.opening_widths
        max_gap = max(valid_gaps) * MAX_GAP_FACTOR
        angle_tol = config.angle_tolerance_rad
        dist_tol = config.distance_tolerance * 2
        recovered = 0

        for _ in range(config.dedup_iterations):
            merged_this_pass = 0

            for group in self._groups_along_axis(context):
                for i, cl1 in enumerate(group):
                    if not cl1.is_active:
                        continue
                    for cl2 in group[i + 1:]:
                        if not cl2.is_active:
                            continue
                        if not cl1.can_merge_with(cl2, angle_tol, dist_tol):
                            continue

                        gap = geo_algo.calculate_gap_distance(cl1.as_segment, cl2.as_segment)
                        is_opening = gap <= max_gap and any(
                            abs(gap - width) <= width * OPENING_MATCH_RATIO for width in valid_gaps
                        )
                        if is_opening or gap <= config.auto_join_gap_distance:
                            cl1.merge_with(cl2, angle_tol)
                            merged_this_pass += 1
                            logger.debug("Bridged gap of %.1f between centerlines", gap)

            recovered += merged_this_pass
            if merged_this_pass == 0:
                break
        else:
            logger.warning("Gap recovery did not converge after %d iterations", config.dedup_iterations)

        logger.info("Recovered %d gaps", recovered)
        return recovered

    def _groups_along_axis(self, context: ProcessingContext) -> list[list[CenterLine]]:
        """5-degree buckets of active centerlines, each ordered along its direction."""
        groups: dict[int, list[CenterLine]] = {}
        for cl in context.active_centerlines():
            key = int(round(math.degrees(cl.normalized_angle) / GAP_GROUP_DEGREES)) * GAP_GROUP_DEGREES
            groups.setdefault(key % 180, []).append(cl)

        ordered = []
        for key in sorted(groups):
            axis_angle = math.radians(key)
            ordered.append(sorted(
                groups[key],
                key=lambda cl: geo_algo.segment_on_vector(cl.as_segment, ORIGIN, axis_angle).min_proj,
            ))
        return ordered


class OverlapMergeStage(ProcessingStage):
    """Merge collinear centerlines whose spans overlap (fixpoint)."""

    priority = 80

    def get_id(self) -> str:
        return "centerlines.merge_overlaps"

    def get_name(self) -> str:
        return "Merge Overlapping Centerlines"

    def run(self, context: ProcessingContext) -> int:
        config = context.config
        merged = merge_overlapping_centerlines(
            context.centerlines,
            config.angle_tolerance_rad,
            config.distance_tolerance,
            config.dedup_iterations,
        )
        logger.info("Merged %d overlapping centerlines", merged)
        return merged


class AutoExtendStage(ProcessingStage):
    """Close corners by extending ends onto nearby perpendicular centerlines."""

    priority = 100

    def get_id(self) -> str:
        return "centerlines.auto_extend"

    def get_name(self) -> str:
        return "Auto-Extend Corners"

    def applies(self, context: ProcessingContext) -> bool:
        return context.config.enable_auto_extend

    def run(self, context: ProcessingContext) -> int:
        config = context.config
        angle_tol = config.angle_tolerance_rad
        reach = config.extend_tolerance
        extended = 0

        active = context.active_centerlines()
        for cl in active:
            for other in active:
                if other is cl or not other.is_active:
                    continue
                if not geo_algo.is_perpendicular(cl.angle, other.angle, angle_tol):
                    continue

                target = other.as_segment
                for attr in ("start", "end"):
                    point = getattr(cl, attr)
                    dist = geo_algo.point_to_segment(point, target)
                    if dist <= EPSILON or dist > reach:
                        continue
                    hit = geo_algo.line_line(cl.as_segment, target)
                    if hit.has_intersection and point.distance_to(hit.point) <= reach:
                        setattr(cl, attr, hit.point)
                        extended += 1

            cl.update_unique_id()

        logger.info("Auto-extended %d centerline ends", extended)
        return extended


class CleanupStage(ProcessingStage):
    """Drop inactive and short centerlines and deduplicate by unique id."""

    priority = 200

    def get_id(self) -> str:
        return "centerlines.cleanup"

    def get_name(self) -> str:
        return "Final Cleanup"

    def run(self, context: ProcessingContext) -> int:
        before = len(context.centerlines)
        context.centerlines = cleanup_centerlines(
            context.centerlines, context.config.min_centerline_length,
        )
        return before - len(context.centerlines)


def merge_overlapping_centerlines(
    centerlines: list[CenterLine],
    angle_tolerance: float,
    distance_tolerance: float,
    max_iterations: int,
) -> int:
    """Repeatedly merge collinear, truly overlapping centerlines in place."""
    total = 0
    for _ in range(max_iterations):
        merged_this_pass = 0
        active = [cl for cl in centerlines if cl.is_active]

        for i, cl1 in enumerate(active):
            if not cl1.is_active:
                continue
            for cl2 in active[i + 1:]:
                if not cl2.is_active:
                    continue
                if not cl1.can_merge_with(cl2, angle_tolerance, distance_tolerance):
                    continue
                overlap = geo_algo.calculate_overlap(cl1.as_segment, cl2.as_segment)
                if overlap.has_overlap and overlap.overlap_length > 0:
                    cl1.merge_with(cl2, angle_tolerance)
                    merged_this_pass += 1

        total += merged_this_pass
        if merged_this_pass == 0:
            break
    else:
        logger.warning("Centerline merge did not converge after %d iterations", max_iterations)

    return total


def cleanup_centerlines(
    centerlines: list[CenterLine], min_length: float,
) -> list[CenterLine]:
    """
    Final de-duplication. Idempotent: cleaning a cleaned list changes nothing.

    Inactive centerlines are dropped, unique ids refreshed, and duplicates
    folded into the first occurrence (their source handles are kept).
    Centerlines shorter than `min_length` are discarded.
    """
    unique: dict[str, CenterLine] = {}
    for cl in centerlines:
        if not cl.is_active:
            continue
        cl.update_unique_id()
        survivor = unique.get(cl.unique_id)
        if survivor is None:
            unique[cl.unique_id] = cl
        else:
            survivor.add_source_handles(cl.source_handles)

    return [cl for cl in unique.values() if cl.length >= min_length]
