"""Processing and mapping configuration."""

from __future__ import annotations
import math
from pydantic import BaseModel, ConfigDict, Field, field_validator


class ProcessorConfig(BaseModel):
    """Tolerances and switches for centerline reconstruction (drawing units, mm)."""
    model_config = ConfigDict(frozen=True)

    angle_tolerance: float = Field(5.0, ge=0, le=45)   # Degrees
    distance_tolerance: float = Field(10.0, ge=0)
    axis_snap_distance: float = Field(50.0, ge=0)       # 0 disables axis snapping
    auto_join_gap_distance: float = Field(300.0, ge=0)
    enable_auto_extend: bool = True
    break_at_grid: bool = False
    extend_to_grid: bool = False
    wall_thicknesses: list[float] = []                  # Candidate wall thicknesses
    door_widths: list[float] = []                       # Openings bridged by gap recovery
    column_widths: list[float] = []

    extend_tolerance: float = Field(100.0, ge=0)        # Corner auto-extend reach
    max_grid_extension: float = Field(500.0, ge=0)
    min_centerline_length: float = Field(50.0, ge=0)
    merge_iterations: int = Field(5, ge=1)              # Segment merge fixpoint cap
    dedup_iterations: int = Field(3, ge=1)              # Gap recovery and de-overlap fixpoint cap

    enabled_stages: list[str] = []                      # Empty = run all registered stages
    disabled_stages: list[str] = []

    @field_validator("wall_thicknesses", "door_widths", "column_widths")
    @classmethod
    def _positive_values(cls, values: list[float]) -> list[float]:
        if any(v <= 0 for v in values):
            raise ValueError("widths and thicknesses must be positive")
        return values

    @property
    def angle_tolerance_rad(self) -> float:
        return math.radians(self.angle_tolerance)

    @property
    def opening_widths(self) -> list[float]:
        """Gap sizes that gap recovery treats as openings, ascending and unique."""
        widths = [*self.door_widths, *self.column_widths, self.auto_join_gap_distance]
        return sorted({w for w in widths if w > 0})


class MappingConfig(BaseModel):
    """Tolerances for matching centerlines against structural frames."""
    model_config = ConfigDict(frozen=True)

    angle_tolerance: float = Field(5.0, ge=0, le=45)   # Degrees
    elevation_tolerance: float = Field(200.0, ge=0)
    offset_tolerance: float = Field(300.0, ge=0)        # Lateral wall-to-frame offset
    gap_tolerance: float = Field(300.0, ge=0)           # Snap distance at frame ends
    min_overlap: float = Field(100.0, ge=0)             # Noise floor for an accepted interval
    full_frame_ratio: float = Field(0.98, gt=0, le=1)
    full_wall_ratio: float = Field(0.95, gt=0, le=1)

    @property
    def angle_tolerance_rad(self) -> float:
        return math.radians(self.angle_tolerance)
