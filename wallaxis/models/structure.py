"""Structural model inputs and wall-to-frame mapping outputs."""

from __future__ import annotations
from enum import Enum
from pydantic import BaseModel, ConfigDict

from .geometry import LineSegment2D, Point3D


NEW_FRAME = "New"  # Sentinel target: no supporting member, one must be created
VERTICAL_FRAME_LENGTH = 1.0  # Plan length below which a frame is a column
FULLY_COVERED_PERCENT = 95.0


class MappingType(str, Enum):
    FULL = "FULL"
    PARTIAL = "PARTIAL"
    NEW = "NEW"


class SapFrame(BaseModel):
    """A linear member of the structural analysis model (read-only)."""
    model_config = ConfigDict(frozen=True)

    name: str
    start: Point3D
    end: Point3D

    @property
    def segment_2d(self) -> LineSegment2D:
        return LineSegment2D(start=self.start.to_2d(), end=self.end.to_2d())

    @property
    def length_2d(self) -> float:
        return self.segment_2d.length

    @property
    def is_vertical(self) -> bool:
        return self.length_2d < VERTICAL_FRAME_LENGTH

    @property
    def elevation(self) -> float:
        return min(self.start.z, self.end.z)

    def __str__(self) -> str:
        kind = "[COLUMN]" if self.is_vertical else "[BEAM]"
        return f"{kind} {self.name}: L={self.length_2d:.1f} | Z={self.start.z:g}->{self.end.z:g}"


class MappingRecord(BaseModel):
    """How much of one frame underlies a wall."""
    target_frame: str
    match_type: MappingType = MappingType.PARTIAL
    dist_i: float = 0.0   # Start of the loaded interval, from the frame's start
    dist_j: float = 0.0   # End of the loaded interval, from the frame's start
    frame_length: float = 0.0
    covered_length: float = 0.0
    wall_start_distance: float = 0.0  # Where this piece begins along the wall

    @property
    def is_new(self) -> bool:
        return self.match_type == MappingType.NEW

    @property
    def coverage_ratio(self) -> float:
        return self.covered_length / self.frame_length if self.frame_length > 0 else 0.0

    def __str__(self) -> str:
        if self.is_new:
            return "to New"
        return f"to {self.target_frame} I={self.dist_i / 1000:.1f}to{self.dist_j / 1000:.1f}"


class MappingResult(BaseModel):
    """All mapping records of a single wall, in order along the wall."""
    wall_handle: str = ""
    wall_length: float = 0.0
    mappings: list[MappingRecord] = []

    @property
    def covered_length(self) -> float:
        return sum(m.covered_length for m in self.mappings if not m.is_new)

    @property
    def coverage_percent(self) -> float:
        if self.wall_length <= 0:
            return 0.0
        return self.covered_length / self.wall_length * 100.0

    @property
    def is_fully_covered(self) -> bool:
        return self.coverage_percent >= FULLY_COVERED_PERCENT

    @property
    def has_mapping(self) -> bool:
        return any(not m.is_new for m in self.mappings)

    def label_text(self, wall_type: str, load_pattern: str, load_value: float) -> str:
        """One-line annotation, e.g. 'W200 DL=7.20 -> B12 (full 3.0m)'."""
        load = f"{wall_type} {load_pattern}={load_value:.2f}"
        if not self.has_mapping:
            return f"{load} -> New"
        if len(self.mappings) == 1:
            m = self.mappings[0]
            if m.match_type == MappingType.FULL:
                return f"{load} -> {m.target_frame} (full {m.frame_length / 1000:.1f}m)"
            return f"{load} -> {m.target_frame} I={m.dist_i / 1000:.1f}to{m.dist_j / 1000:.1f}"
        names = list(dict.fromkeys(m.target_frame for m in self.mappings if not m.is_new))
        return f"{load} -> {', '.join(names)}"
