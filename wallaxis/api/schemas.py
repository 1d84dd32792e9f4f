"""API request/response schemas."""

from __future__ import annotations
from pydantic import BaseModel

from wallaxis.models import (
    AxisLine, CenterLine, MappingConfig, MappingRecord, MappingResult,
    Point2D, Point3D, ProcessingStats, ProcessorConfig, SapFrame, WallSegment,
)


class SegmentInput(BaseModel):
    """Raw line as sent by the drawing collaborator."""
    start: Point2D
    end: Point2D
    thickness: float | None = None
    wall_type: str = ""
    handle: str = ""
    elevation: float = 0.0
    is_single_line: bool = False

    def to_segment(self) -> WallSegment:
        return WallSegment(
            start=self.start,
            end=self.end,
            thickness=self.thickness or 0.0,
            wall_type=self.wall_type,
            handle=self.handle,
            elevation=self.elevation,
            is_single_line=self.is_single_line,
        )


class AxisInput(BaseModel):
    start: Point2D
    end: Point2D
    name: str = ""

    def to_axis(self) -> AxisLine:
        return AxisLine(start=self.start, end=self.end, name=self.name)


class FrameInput(BaseModel):
    name: str
    start: Point3D
    end: Point3D

    def to_frame(self) -> SapFrame:
        return SapFrame(name=self.name, start=self.start, end=self.end)


class CenterlineRequest(BaseModel):
    """Request body for the /centerlines endpoint."""
    segments: list[SegmentInput]
    axes: list[AxisInput] = []
    config: ProcessorConfig = ProcessorConfig()


class CenterlineResponse(BaseModel):
    centerlines: list[CenterLine]
    stats: ProcessingStats
    segment_count: int


class MappingRequest(BaseModel):
    """Request body for the /mappings endpoint."""
    centerlines: list[CenterLine]
    frames: list[FrameInput]
    config: MappingConfig = MappingConfig()
    origin_offset: Point2D | None = None


class WallMapping(BaseModel):
    wall_handle: str
    wall_length: float
    covered_length: float
    coverage_percent: float
    is_fully_covered: bool
    mappings: list[MappingRecord]

    @classmethod
    def from_result(cls, result: MappingResult) -> WallMapping:
        return cls(
            wall_handle=result.wall_handle,
            wall_length=result.wall_length,
            covered_length=result.covered_length,
            coverage_percent=result.coverage_percent,
            is_fully_covered=result.is_fully_covered,
            mappings=result.mappings,
        )


class MappingResponse(BaseModel):
    walls: list[WallMapping]
    unmapped_count: int


class StageInfo(BaseModel):
    id: str
    name: str
