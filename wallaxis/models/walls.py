"""Wall models — raw boundary segments, reconstructed centerlines, axes."""

from __future__ import annotations
import math
from pydantic import BaseModel, ConfigDict

from .geometry import (
    EPSILON, LineSegment2D, Point2D, normalize_angle_0_to_pi,
)


DEFAULT_SINGLE_LINE_THICKNESS = 100.0
THICKNESS_MATCH_RATIO = 0.2  # Centerlines merge only when thicknesses agree within 20%
CARDINAL_SNAP_TOLERANCE = math.radians(5)  # Used when no configured tolerance is given


def _fmt(value: float, digits: int) -> str:
    # + 0.0 folds -0.0 into 0.0 so rounding noise never splits ids
    return f"{round(value, digits) + 0.0:.{digits}f}"


class _LineGeometry(BaseModel):
    """Shared start/end geometry for segments, centerlines and axes."""
    start: Point2D
    end: Point2D

    @property
    def as_segment(self) -> LineSegment2D:
        return LineSegment2D(start=self.start, end=self.end)

    @property
    def length(self) -> float:
        return self.start.distance_to(self.end)

    @property
    def angle(self) -> float:
        return math.atan2(self.end.y - self.start.y, self.end.x - self.start.x)

    @property
    def normalized_angle(self) -> float:
        return normalize_angle_0_to_pi(self.angle)

    @property
    def midpoint(self) -> Point2D:
        return self.start.midpoint_to(self.end)

    @property
    def direction(self) -> Point2D:
        return (self.end - self.start).normalized()

    @property
    def is_valid(self) -> bool:
        return self.length > EPSILON


class WallSegment(_LineGeometry):
    """One raw line of a floor plan plus its processing state.

    Segments live in an arena (the processing context) and refer to each
    other only by `index`, never by object identity.
    """
    thickness: float = 0.0
    wall_type: str = ""
    handle: str = ""
    elevation: float = 0.0
    is_single_line: bool = False

    # Processing state
    index: int = -1
    is_active: bool = True
    is_processed: bool = False
    pair_segment_id: int = -1
    merged_into_id: int = -1

    @property
    def is_paired(self) -> bool:
        return self.pair_segment_id != -1

    def set_from_segment(self, segment: LineSegment2D) -> None:
        self.start = segment.start
        self.end = segment.end

    def set_paired_with(self, other: WallSegment) -> None:
        """Pair both segments with each other."""
        self.pair_segment_id = other.index
        other.pair_segment_id = self.index

    def reset_state(self, index: int) -> None:
        self.index = index
        self.is_active = True
        self.is_processed = False
        self.pair_segment_id = -1
        self.merged_into_id = -1

    def __str__(self) -> str:
        return (
            f"Wall[{self.handle}]: {self.start}->{self.end}, "
            f"L={self.length:.1f}, T={self.thickness:g}, {self.wall_type}"
        )


class CenterLine(_LineGeometry):
    """Reconstructed axis of one wall."""
    thickness: float = 0.0
    wall_type: str = ""
    elevation: float = 0.0
    is_active: bool = True
    unique_id: str = ""
    source_handles: list[str] = []
    source_pair_id: int = -1  # Index of the first source segment of a pair, -1 if single

    def model_post_init(self, __context: object) -> None:
        if not self.unique_id:
            self.update_unique_id()

    def update_unique_id(self) -> None:
        self.unique_id = (
            f"{_fmt(self.start.x, 2)}_{_fmt(self.start.y, 2)}_"
            f"{_fmt(self.end.x, 2)}_{_fmt(self.end.y, 2)}_"
            f"T{_fmt(self.thickness, 0)}_A{_fmt(self.angle, 3)}"
        )

    def set_from_segment(self, segment: LineSegment2D) -> None:
        self.start = segment.start
        self.end = segment.end

    def add_source_handles(self, handles: list[str]) -> None:
        """Accumulate provenance, keeping first-seen order and no repeats."""
        for h in handles:
            if h and h not in self.source_handles:
                self.source_handles.append(h)

    def ensure_wall_type(self) -> None:
        if not self.wall_type and self.thickness > 0:
            self.wall_type = f"W{int(self.thickness)}"

    def can_merge_with(
        self, other: CenterLine, angle_tolerance: float, distance_tolerance: float,
    ) -> bool:
        from wallaxis.core import geo_algo

        if not self.is_active or not other.is_active:
            return False
        if self.thickness > 0 and other.thickness > 0:
            if abs(self.thickness - other.thickness) > self.thickness * THICKNESS_MATCH_RATIO:
                return False
        return geo_algo.are_collinear(
            self.as_segment, other.as_segment, angle_tolerance, distance_tolerance,
        )

    def merge_with(
        self, other: CenterLine, angle_tolerance: float = CARDINAL_SNAP_TOLERANCE,
    ) -> None:
        """Absorb `other`: union geometry, wider wall wins, other is deactivated."""
        from wallaxis.core import geo_algo

        self.set_from_segment(
            geo_algo.merge_collinear(self.as_segment, other.as_segment, angle_tolerance)
        )
        if other.thickness > self.thickness:
            self.thickness = other.thickness
            self.wall_type = other.wall_type
        self.add_source_handles(other.source_handles)
        other.is_active = False
        self.update_unique_id()

    def clone(self) -> CenterLine:
        return self.model_copy(update={"source_handles": list(self.source_handles)})

    @classmethod
    def from_wall_pair(
        cls,
        seg1: WallSegment,
        seg2: WallSegment,
        angle_tolerance: float = CARDINAL_SNAP_TOLERANCE,
    ) -> CenterLine:
        from wallaxis.core import geo_algo

        midline, measured = geo_algo.create_centerline(
            seg1.as_segment, seg2.as_segment, angle_tolerance,
        )
        centerline = cls(
            start=midline.start,
            end=midline.end,
            thickness=measured if measured > 0 else max(seg1.thickness, seg2.thickness),
            wall_type=seg1.wall_type or seg2.wall_type,
            elevation=seg1.elevation,
            source_pair_id=seg1.index,
        )
        centerline.add_source_handles([seg1.handle, seg2.handle])
        centerline.ensure_wall_type()
        centerline.update_unique_id()
        return centerline

    @classmethod
    def from_single_segment(cls, segment: WallSegment) -> CenterLine:
        centerline = cls(
            start=segment.start,
            end=segment.end,
            thickness=segment.thickness if segment.thickness > 0 else DEFAULT_SINGLE_LINE_THICKNESS,
            wall_type=segment.wall_type,
            elevation=segment.elevation,
        )
        centerline.add_source_handles([segment.handle])
        centerline.ensure_wall_type()
        centerline.update_unique_id()
        return centerline

    def __str__(self) -> str:
        status = "" if self.is_active else "[X]"
        return (
            f"{status}CL: {self.start}->{self.end}, L={self.length:.1f}, "
            f"T={self.thickness:g}, {self.wall_type}"
        )


class AxisLine(_LineGeometry):
    """A structural grid line or user axis. Read-only reference geometry."""
    model_config = ConfigDict(frozen=True)

    name: str = ""

    def __str__(self) -> str:
        return f"Axis[{self.name}]: {self.start}->{self.end}"
