"""Stateless 2D geometry algorithms shared by the processor and the mapper.

Every comparison goes through EPSILON or an explicit tolerance: all input
geometry comes from user-drawn, digitized floor plans.
"""

from __future__ import annotations
import math
from dataclasses import dataclass

from wallaxis.models.geometry import (
    EPSILON, LineSegment2D, Point2D, normalize_angle_0_to_pi,
)


HALF_PI = math.pi / 2.0
TWO_PI = math.pi * 2.0
DEFAULT_ANGLE_TOLERANCE = math.radians(5.0)
DEFAULT_DISTANCE_TOLERANCE = 10.0


@dataclass
class IntersectionResult:
    has_intersection: bool = False
    point: Point2D | None = None
    t1: float = 0.0  # Parameter along the first line
    t2: float = 0.0  # Parameter along the second line


@dataclass
class Projection:
    """1D interval of a segment projected on a reference axis."""
    min_proj: float
    max_proj: float

    @property
    def length(self) -> float:
        return self.max_proj - self.min_proj


@dataclass
class OverlapResult:
    has_overlap: bool = False
    overlap_start: float = 0.0
    overlap_end: float = 0.0
    overlap_length: float = 0.0
    overlap_percent: float = 0.0  # Overlap / shorter segment length


# ---------------------------------------------------------------------------
# Angles
# ---------------------------------------------------------------------------

def normalize_0_to_2pi(angle: float) -> float:
    a = math.fmod(angle, TWO_PI)
    if a < 0:
        a += TWO_PI
    if a >= TWO_PI:
        a -= TWO_PI
    return a


def normalize_0_to_pi(angle: float) -> float:
    return normalize_angle_0_to_pi(angle)


def _fold_difference(angle1: float, angle2: float) -> float:
    """Absolute difference of two directions folded into [0, pi]."""
    diff = abs(angle1 - angle2)
    while diff > math.pi:
        diff -= math.pi
    return diff


def is_parallel(
    angle1: float, angle2: float, tolerance: float = DEFAULT_ANGLE_TOLERANCE,
) -> bool:
    """True if two directions are parallel, opposite directions included."""
    diff = _fold_difference(angle1, angle2)
    return diff <= tolerance or (math.pi - diff) <= tolerance


def is_perpendicular(
    angle1: float, angle2: float, tolerance: float = DEFAULT_ANGLE_TOLERANCE,
) -> bool:
    diff = _fold_difference(angle1, angle2)
    return abs(diff - HALF_PI) <= tolerance


def snap_to_cardinal(angle: float, tolerance: float = DEFAULT_ANGLE_TOLERANCE) -> float:
    """Snap to 0, 90, 180 or 270 degrees when within tolerance.

    Returns the angle in [0, 2*pi) whether or not it snapped.
    """
    angle = normalize_0_to_2pi(angle)
    for cardinal in (0.0, HALF_PI, math.pi, 3 * HALF_PI, TWO_PI):
        if abs(angle - cardinal) <= tolerance:
            return 0.0 if cardinal == TWO_PI else cardinal
    return angle


# ---------------------------------------------------------------------------
# Distances
# ---------------------------------------------------------------------------

def point_to_segment(p: Point2D, segment: LineSegment2D) -> float:
    """Distance from p to the closest point of the bounded segment."""
    a, b = segment.start, segment.end
    ab = b - a
    len2 = ab.dot(ab)
    if len2 < EPSILON:
        return p.distance_to(a)
    t = max(0.0, min(1.0, (p - a).dot(ab) / len2))
    return p.distance_to(a + ab * t)


def point_to_infinite_line(p: Point2D, line: LineSegment2D) -> float:
    """Perpendicular distance from p to the infinite line through the segment."""
    ab = line.end - line.start
    ln = ab.length
    if ln < EPSILON:
        return p.distance_to(line.start)
    return abs(ab.cross(p - line.start)) / ln


def between_parallel_segments(seg1: LineSegment2D, seg2: LineSegment2D) -> float:
    """Average perpendicular separation of seg2's endpoints from seg1's line."""
    d1 = point_to_infinite_line(seg2.start, seg1)
    d2 = point_to_infinite_line(seg2.end, seg1)
    return (d1 + d2) / 2.0


# ---------------------------------------------------------------------------
# Intersections
# ---------------------------------------------------------------------------

def line_line(line1: LineSegment2D, line2: LineSegment2D) -> IntersectionResult:
    """Intersection of the two infinite lines through the segments."""
    a1, b1 = line1.start, line2.start
    dx1 = line1.end.x - a1.x
    dy1 = line1.end.y - a1.y
    dx2 = line2.end.x - b1.x
    dy2 = line2.end.y - b1.y

    denom = dx1 * dy2 - dy1 * dx2
    if abs(denom) < EPSILON:
        return IntersectionResult()  # Parallel or coincident

    t1 = ((b1.x - a1.x) * dy2 - (b1.y - a1.y) * dx2) / denom
    t2 = ((b1.x - a1.x) * dy1 - (b1.y - a1.y) * dx1) / denom
    return IntersectionResult(
        has_intersection=True,
        point=Point2D(x=a1.x + t1 * dx1, y=a1.y + t1 * dy1),
        t1=t1,
        t2=t2,
    )


def segment_segment(
    seg1: LineSegment2D, seg2: LineSegment2D, tolerance: float = 0.0,
) -> IntersectionResult:
    """Intersection of two bounded segments.

    `tolerance` is an absolute distance allowed past either segment's ends.
    """
    result = line_line(seg1, seg2)
    if not result.has_intersection:
        return result

    longest = max(seg1.length, seg2.length)
    tol = tolerance / longest if tolerance > 0 and longest > EPSILON else 0.0
    if -tol <= result.t1 <= 1 + tol and -tol <= result.t2 <= 1 + tol:
        return result
    return IntersectionResult(t1=result.t1, t2=result.t2)


# ---------------------------------------------------------------------------
# Projection, overlap and collinearity
# ---------------------------------------------------------------------------

def project_point(p: Point2D, ref_point: Point2D, ref_angle: float) -> float:
    """Signed distance of p along the axis through ref_point at ref_angle."""
    return (p.x - ref_point.x) * math.cos(ref_angle) + (p.y - ref_point.y) * math.sin(ref_angle)


def segment_on_vector(
    segment: LineSegment2D, ref_point: Point2D, ref_angle: float,
) -> Projection:
    a = project_point(segment.start, ref_point, ref_angle)
    b = project_point(segment.end, ref_point, ref_angle)
    return Projection(min_proj=min(a, b), max_proj=max(a, b))


def calculate_overlap(seg1: LineSegment2D, seg2: LineSegment2D) -> OverlapResult:
    """Overlap of both segments projected on seg1's axis."""
    proj1 = segment_on_vector(seg1, seg1.start, seg1.angle)
    proj2 = segment_on_vector(seg2, seg1.start, seg1.angle)

    start = max(proj1.min_proj, proj2.min_proj)
    end = min(proj1.max_proj, proj2.max_proj)
    length = end - start

    result = OverlapResult(
        has_overlap=length > -EPSILON,
        overlap_start=start,
        overlap_end=end,
        overlap_length=length,
    )
    if result.has_overlap and length > 0:
        shorter = min(proj1.length, proj2.length)
        result.overlap_percent = length / shorter if shorter > EPSILON else 0.0
    return result


def calculate_gap_distance(seg1: LineSegment2D, seg2: LineSegment2D) -> float:
    """Gap between two collinear segments on seg1's axis, -1 if they overlap."""
    proj1 = segment_on_vector(seg1, seg1.start, seg1.angle)
    proj2 = segment_on_vector(seg2, seg1.start, seg1.angle)

    if proj2.min_proj >= proj1.max_proj:
        return proj2.min_proj - proj1.max_proj
    if proj1.min_proj >= proj2.max_proj:
        return proj1.min_proj - proj2.max_proj
    return -1.0


def are_collinear(
    seg1: LineSegment2D,
    seg2: LineSegment2D,
    angle_tolerance: float = DEFAULT_ANGLE_TOLERANCE,
    distance_tolerance: float = DEFAULT_DISTANCE_TOLERANCE,
) -> bool:
    """Parallel, and every endpoint lies within tolerance of the other line."""
    if not is_parallel(seg1.angle, seg2.angle, angle_tolerance):
        return False
    return (
        point_to_infinite_line(seg2.start, seg1) <= distance_tolerance
        and point_to_infinite_line(seg2.end, seg1) <= distance_tolerance
        and point_to_infinite_line(seg1.start, seg2) <= distance_tolerance
        and point_to_infinite_line(seg1.end, seg2) <= distance_tolerance
    )


def _span_on_axis(
    points: list[Point2D], origin: Point2D, angle: float,
) -> LineSegment2D:
    cos_a, sin_a = math.cos(angle), math.sin(angle)
    projections = [project_point(p, origin, angle) for p in points]
    lo, hi = min(projections), max(projections)
    return LineSegment2D(
        start=Point2D(x=origin.x + lo * cos_a, y=origin.y + lo * sin_a),
        end=Point2D(x=origin.x + hi * cos_a, y=origin.y + hi * sin_a),
    )


def merge_collinear(
    seg1: LineSegment2D,
    seg2: LineSegment2D,
    angle_tolerance: float = DEFAULT_ANGLE_TOLERANCE,
) -> LineSegment2D:
    """Union of two collinear segments along the longer one's axis.

    The axis is snapped to a cardinal direction only within `angle_tolerance`.
    """
    dominant = seg1 if seg1.length >= seg2.length else seg2
    ref_angle = snap_to_cardinal(dominant.angle, angle_tolerance)
    return _span_on_axis(
        [seg1.start, seg1.end, seg2.start, seg2.end], dominant.start, ref_angle,
    )


def create_centerline(
    seg1: LineSegment2D,
    seg2: LineSegment2D,
    angle_tolerance: float = DEFAULT_ANGLE_TOLERANCE,
) -> tuple[LineSegment2D, float]:
    """Midline of two parallel boundary lines over their common overlap.

    Returns the midline and the measured separation (the wall thickness).
    Falls back to the union span when the projections do not overlap.
    """
    thickness = between_parallel_segments(seg1, seg2)
    dominant = seg1 if seg1.length >= seg2.length else seg2
    ref_angle = snap_to_cardinal(dominant.angle, angle_tolerance)
    center = seg1.midpoint.midpoint_to(seg2.midpoint)

    proj1 = segment_on_vector(seg1, center, ref_angle)
    proj2 = segment_on_vector(seg2, center, ref_angle)
    lo = max(proj1.min_proj, proj2.min_proj)
    hi = min(proj1.max_proj, proj2.max_proj)
    if hi - lo <= EPSILON:
        lo = min(proj1.min_proj, proj2.min_proj)
        hi = max(proj1.max_proj, proj2.max_proj)

    cos_a, sin_a = math.cos(ref_angle), math.sin(ref_angle)
    midline = LineSegment2D(
        start=Point2D(x=center.x + lo * cos_a, y=center.y + lo * sin_a),
        end=Point2D(x=center.x + hi * cos_a, y=center.y + hi * sin_a),
    )
    return midline, thickness
