"""Mapping engine — finds the structural frames that carry a wall.

For one wall centerline and a frame inventory, every parallel beam at the
wall's elevation is tested by projecting the wall onto the beam's own axis
(origin at the beam start). The overlap becomes a MappingRecord whose
interval is measured from the beam start, ready for distributed-load
assignment. Walls with no supporting beam get a single NEW record.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass

from wallaxis.core import geo_algo
from wallaxis.models import (
    CenterLine, LineSegment2D, MappingConfig, MappingRecord, MappingResult,
    MappingType, Point2D, SapFrame,
)
from wallaxis.models.geometry import EPSILON
from wallaxis.models.structure import NEW_FRAME

logger = logging.getLogger(__name__)


@dataclass
class _Interval:
    start: float       # Raw overlap on the frame axis, clipped to [0, L]
    end: float
    touch: bool = False


class MappingEngine:
    """Stateless apart from its tolerances; never mutates the frame inventory."""

    def __init__(self, config: MappingConfig | None = None) -> None:
        self.config = config or MappingConfig()

    def map_centerline(
        self,
        centerline: CenterLine,
        frames: list[SapFrame],
        origin_offset: Point2D | None = None,
    ) -> MappingResult:
        result = self.find_mappings(
            centerline.as_segment, centerline.elevation, frames, origin_offset,
        )
        result.wall_handle = centerline.unique_id
        return result

    def find_mappings(
        self,
        wall: LineSegment2D,
        wall_z: float,
        frames: list[SapFrame],
        origin_offset: Point2D | None = None,
    ) -> MappingResult:
        """
        Map one wall onto the frames beneath it.

        Args:
            wall: Wall centerline in drawing coordinates.
            wall_z: Elevation of the wall base.
            frames: Frame inventory of the structural model.
            origin_offset: Drawing point that corresponds to the model origin.

        Returns:
            A MappingResult whose records are ordered along the wall.
        """
        wall_length = wall.length
        result = MappingResult(wall_length=wall_length)
        if wall_length < EPSILON:
            return result

        if origin_offset is not None:
            wall = LineSegment2D(start=wall.start - origin_offset, end=wall.end - origin_offset)

        records: list[MappingRecord] = []
        seen: set[str] = set()
        for frame in frames:
            if frame.name in seen or not self._is_candidate(wall, wall_z, frame):
                continue
            record = self._map_frame(wall, frame)
            if record is not None:
                records.append(record)
                seen.add(frame.name)

        if not records:
            logger.debug("No supporting frame for wall of length %.1f", wall_length)
            result.mappings = [self._new_record(wall_length)]
            return result

        # End touches only count when no frame actually carries the wall
        overlapping = [r for r in records if r.covered_length > EPSILON]
        if overlapping:
            records = overlapping

        records.sort(key=lambda r: (r.wall_start_distance, r.target_frame))
        result.mappings = records
        return result

    def map_centerlines(
        self,
        centerlines: list[CenterLine],
        frames: list[SapFrame],
        origin_offset: Point2D | None = None,
    ) -> list[MappingResult]:
        results = [self.map_centerline(cl, frames, origin_offset) for cl in centerlines]
        unmapped = sum(1 for r in results if not r.has_mapping)
        logger.info("Mapped %d walls, %d need a new frame", len(results), unmapped)
        return results

    # ------------------------------------------------------------------
    # Filtering
    # ------------------------------------------------------------------

    def _is_candidate(self, wall: LineSegment2D, wall_z: float, frame: SapFrame) -> bool:
        config = self.config
        if frame.is_vertical:
            return False
        if abs(frame.elevation - wall_z) > config.elevation_tolerance:
            return False

        frame_seg = frame.segment_2d
        if not geo_algo.is_parallel(wall.angle, frame_seg.angle, config.angle_tolerance_rad):
            return False
        return geo_algo.point_to_infinite_line(wall.midpoint, frame_seg) <= config.offset_tolerance

    # ------------------------------------------------------------------
    # Interval arithmetic
    # ------------------------------------------------------------------

    def _map_frame(self, wall: LineSegment2D, frame: SapFrame) -> MappingRecord | None:
        frame_seg = frame.segment_2d
        frame_length = frame_seg.length
        wall_proj = geo_algo.segment_on_vector(wall, frame_seg.start, frame_seg.angle)

        interval = self._match_interval(wall_proj, frame_length, wall.length)
        if interval is None:
            return None

        covered = interval.end - interval.start
        dist_i, dist_j = self._snap_to_frame_ends(interval, frame_length)

        return MappingRecord(
            target_frame=frame.name,
            match_type=self._classify(covered, frame_length, wall.length),
            dist_i=dist_i,
            dist_j=dist_j,
            frame_length=frame_length,
            covered_length=covered,
            wall_start_distance=min(
                self._wall_position(wall, frame_seg, interval.start),
                self._wall_position(wall, frame_seg, interval.end),
            ),
        )

    def _match_interval(
        self, wall_proj: geo_algo.Projection, frame_length: float, wall_length: float,
    ) -> _Interval | None:
        """Overlap of the projected wall with [0, L], or a touch at a frame end."""
        gap_tol = self.config.gap_tolerance
        start = max(wall_proj.min_proj, 0.0)
        end = min(wall_proj.max_proj, frame_length)

        # Short walls lying wholly on a frame still count
        floor = min(self.config.min_overlap, wall_length)
        if end - start > EPSILON and end - start >= floor - EPSILON:
            return _Interval(start=start, end=end)

        # Near miss: the wall stops just short of (or barely into) one frame end
        if wall_proj.min_proj < 0 and abs(wall_proj.max_proj) <= gap_tol:
            return _Interval(start=0.0, end=0.0, touch=True)
        if wall_proj.max_proj > frame_length and abs(wall_proj.min_proj - frame_length) <= gap_tol:
            return _Interval(start=frame_length, end=frame_length, touch=True)
        return None

    def _snap_to_frame_ends(self, interval: _Interval, frame_length: float) -> tuple[float, float]:
        if interval.touch:
            return interval.start, interval.end

        gap_tol = self.config.gap_tolerance
        dist_i, dist_j = interval.start, interval.end
        if dist_i <= gap_tol:
            dist_i = 0.0
        if frame_length - dist_j <= gap_tol:
            dist_j = frame_length
        return dist_i, dist_j

    def _classify(self, covered: float, frame_length: float, wall_length: float) -> MappingType:
        config = self.config
        if covered <= EPSILON:
            return MappingType.PARTIAL
        if covered >= frame_length * config.full_frame_ratio:
            return MappingType.FULL
        if covered >= wall_length * config.full_wall_ratio:
            return MappingType.FULL
        return MappingType.PARTIAL

    def _wall_position(
        self, wall: LineSegment2D, frame_seg: LineSegment2D, frame_distance: float,
    ) -> float:
        """Distance along the wall of a point given as a distance along the frame."""
        point = frame_seg.start + frame_seg.direction * frame_distance
        return max(0.0, geo_algo.project_point(point, wall.start, wall.angle))

    def _new_record(self, wall_length: float) -> MappingRecord:
        return MappingRecord(
            target_frame=NEW_FRAME,
            match_type=MappingType.NEW,
            covered_length=wall_length,
        )
