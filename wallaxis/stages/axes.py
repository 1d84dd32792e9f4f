"""Axis stages — align centerlines with the structural grid.

All three stages read the reference axes and never modify them.
"""

from __future__ import annotations
import logging

from wallaxis.core import geo_algo
from wallaxis.models import AxisLine, CenterLine, ProcessingContext
from wallaxis.models.geometry import EPSILON
from wallaxis.stages.base import ProcessingStage

logger = logging.getLogger(__name__)


BREAK_MIN_T = 0.05   # Crossings closer than 5% to either end do not split
BREAK_MAX_T = 0.95
BREAK_TOLERANCE = 10.0


class AxisSnapStage(ProcessingStage):
    """Translate centerlines onto the nearest parallel axis within reach."""

    priority = 90

    def get_id(self) -> str:
        return "axes.snap"

    def get_name(self) -> str:
        return "Snap To Axes"

    def applies(self, context: ProcessingContext) -> bool:
        return len(context.axes) > 0 and context.config.axis_snap_distance > 0

    def run(self, context: ProcessingContext) -> int:
        angle_tol = context.config.angle_tolerance_rad
        snap_distance = context.config.axis_snap_distance
        snapped = 0

        for cl in context.active_centerlines():
            nearest = None
            nearest_dist = 0.0
            for axis in context.axes:
                if not axis.is_valid:
                    continue
                if not geo_algo.is_parallel(cl.angle, axis.angle, angle_tol):
                    continue
                dist = geo_algo.point_to_infinite_line(cl.midpoint, axis.as_segment)
                if dist <= snap_distance and (nearest is None or dist < nearest_dist):
                    nearest, nearest_dist = axis, dist

            if nearest is not None:
                snap_to_axis(cl, nearest)
                snapped += 1

        logger.info("Snapped %d centerlines to axes", snapped)
        return snapped


def snap_to_axis(cl: CenterLine, axis: AxisLine) -> None:
    """Shift the centerline perpendicular to itself so its midpoint sits on the axis."""
    normal = axis.direction.perpendicular()
    offset = normal.dot(cl.midpoint - axis.start)
    shift = normal * -offset
    cl.start = cl.start + shift
    cl.end = cl.end + shift
    cl.update_unique_id()


class GridBreakStage(ProcessingStage):
    """Split centerlines at every perpendicular axis they cross."""

    priority = 110

    def get_id(self) -> str:
        return "axes.break"

    def get_name(self) -> str:
        return "Break At Grid"

    def applies(self, context: ProcessingContext) -> bool:
        return context.config.break_at_grid and len(context.axes) > 0

    def run(self, context: ProcessingContext) -> int:
        angle_tol = context.config.angle_tolerance_rad
        pieces: list[CenterLine] = []
        breaks = 0

        for cl in context.active_centerlines():
            params = self._break_parameters(cl, context.axes, angle_tol)
            if not params:
                continue

            segment = cl.as_segment
            bounds = [0.0, *params, 1.0]
            for t0, t1 in zip(bounds, bounds[1:]):
                piece = cl.clone()
                piece.start = segment.point_at(t0)
                piece.end = cl.end if t1 == 1.0 else segment.point_at(t1)
                piece.update_unique_id()
                pieces.append(piece)

            cl.is_active = False
            breaks += len(params)

        context.add_centerlines(pieces)
        logger.info("Broke centerlines at %d grid crossings", breaks)
        return breaks

    def _break_parameters(
        self, cl: CenterLine, axes: list[AxisLine], angle_tol: float,
    ) -> list[float]:
        """Ascending, distinct crossing parameters along the centerline."""
        found: list[float] = []
        for axis in axes:
            if not axis.is_valid:
                continue
            if not geo_algo.is_perpendicular(cl.angle, axis.angle, angle_tol):
                continue
            hit = geo_algo.segment_segment(cl.as_segment, axis.as_segment, BREAK_TOLERANCE)
            if hit.has_intersection and BREAK_MIN_T < hit.t1 < BREAK_MAX_T:
                found.append(hit.t1)

        params: list[float] = []
        for t in sorted(found):
            if not params or t - params[-1] > EPSILON:
                params.append(t)
        return params


class GridExtendStage(ProcessingStage):
    """Push centerline ends outward to meet a perpendicular axis."""

    priority = 120

    def get_id(self) -> str:
        return "axes.extend"

    def get_name(self) -> str:
        return "Extend To Grid"

    def applies(self, context: ProcessingContext) -> bool:
        return context.config.extend_to_grid and len(context.axes) > 0

    def run(self, context: ProcessingContext) -> int:
        angle_tol = context.config.angle_tolerance_rad
        max_extend = context.config.max_grid_extension
        extended = 0

        for cl in context.active_centerlines():
            segment = cl.as_segment
            best_start = best_end = None
            for axis in context.axes:
                if not axis.is_valid:
                    continue
                if not geo_algo.is_perpendicular(cl.angle, axis.angle, angle_tol):
                    continue
                hit = geo_algo.line_line(segment, axis.as_segment)
                if not hit.has_intersection:
                    continue

                # Only outward moves: before the start (t < 0) or past the end (t > 1)
                if hit.t1 < 0:
                    dist = cl.start.distance_to(hit.point)
                    if EPSILON < dist < max_extend and (best_start is None or dist < best_start[0]):
                        best_start = (dist, hit.point)
                elif hit.t1 > 1:
                    dist = cl.end.distance_to(hit.point)
                    if EPSILON < dist < max_extend and (best_end is None or dist < best_end[0]):
                        best_end = (dist, hit.point)

            if best_start is not None:
                cl.start = best_start[1]
                extended += 1
            if best_end is not None:
                cl.end = best_end[1]
                extended += 1
            cl.update_unique_id()

        logger.info("Extended %d centerline ends to the grid", extended)
        return extended
