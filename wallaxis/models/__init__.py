from .geometry import (
    Point2D, Point3D, Vector2D, LineSegment2D, EPSILON, make_segment,
)
from .walls import WallSegment, CenterLine, AxisLine
from .structure import SapFrame, MappingType, MappingRecord, MappingResult, NEW_FRAME
from .parameters import ProcessorConfig, MappingConfig
from .context import ProcessingContext, ProcessingStats

__all__ = [
    "Point2D", "Point3D", "Vector2D", "LineSegment2D", "EPSILON",
    "make_segment",
    "WallSegment", "CenterLine", "AxisLine",
    "SapFrame", "MappingType", "MappingRecord", "MappingResult", "NEW_FRAME",
    "ProcessorConfig", "MappingConfig",
    "ProcessingContext", "ProcessingStats",
]
