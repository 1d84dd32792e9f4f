"""Processing context — accumulates state during one reconstruction pass."""

from __future__ import annotations
from pydantic import BaseModel, Field

from .walls import AxisLine, CenterLine, WallSegment
from .parameters import ProcessorConfig


class ProcessingStats(BaseModel):
    merged_segments: int = 0
    detected_pairs: int = 0
    recovered_gaps: int = 0
    merged_centerlines: int = 0
    snapped_to_axes: int = 0
    extended_corners: int = 0
    grid_breaks: int = 0
    grid_extensions: int = 0

    def record(self, stage_id: str, count: int) -> None:
        field = STAGE_STAT_FIELDS.get(stage_id)
        if field is not None:
            setattr(self, field, getattr(self, field) + count)


STAGE_STAT_FIELDS = {
    "segments.merge": "merged_segments",
    "segments.pair": "detected_pairs",
    "centerlines.recover_gaps": "recovered_gaps",
    "centerlines.merge_overlaps": "merged_centerlines",
    "axes.snap": "snapped_to_axes",
    "centerlines.auto_extend": "extended_corners",
    "axes.break": "grid_breaks",
    "axes.extend": "grid_extensions",
}


class ProcessingContext(BaseModel):
    """
    Holds all state of a single processing batch.

    `segments` is an arena: a segment's `index` is its position in the
    list, and pairing / merge provenance refer to other segments only by
    that index. Stages mutate the arena and append centerlines; nothing
    here survives past one `process` call.
    """
    # Input
    segments: list[WallSegment]
    axes: list[AxisLine] = []
    config: ProcessorConfig = Field(default_factory=ProcessorConfig)

    # Working data (populated by stages)
    angle_groups: dict[int, list[int]] = {}
    processed_pairs: set[str] = set()
    centerlines: list[CenterLine] = []

    stats: ProcessingStats = Field(default_factory=ProcessingStats)

    def segment(self, index: int) -> WallSegment:
        return self.segments[index]

    def active_segments(self) -> list[WallSegment]:
        return [s for s in self.segments if s.is_active]

    def active_centerlines(self) -> list[CenterLine]:
        return [c for c in self.centerlines if c.is_active]

    def add_centerline(self, centerline: CenterLine) -> None:
        self.centerlines.append(centerline)

    def add_centerlines(self, centerlines: list[CenterLine]) -> None:
        self.centerlines.extend(centerlines)

    def check_pairing(self) -> bool:
        """True when every pairing among active segments is symmetric."""
        for seg in self.segments:
            if not seg.is_active or seg.pair_segment_id == -1:
                continue
            partner = self.segments[seg.pair_segment_id]
            if partner.pair_segment_id != seg.index:
                return False
        return True


def pair_key(a: int, b: int) -> str:
    return f"{min(a, b)}_{max(a, b)}"
