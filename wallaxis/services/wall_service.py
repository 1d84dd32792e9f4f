"""High-level wall service — facade for the API layer."""

from __future__ import annotations

from wallaxis.models import (
    AxisLine, CenterLine, MappingConfig, MappingResult, Point2D,
    ProcessingContext, ProcessorConfig, SapFrame, WallSegment,
)
from wallaxis.core.mapping import MappingEngine
from wallaxis.core.processor import WallSegmentProcessor
from wallaxis.core.registry import StageRegistry, create_default_registry


class WallService:
    """Builds a processor per configuration, delegates, returns finished collections."""

    def __init__(self, registry: StageRegistry | None = None) -> None:
        self.registry = registry or create_default_registry()

    def process(
        self,
        segments: list[WallSegment],
        axes: list[AxisLine] | None = None,
        config: ProcessorConfig | None = None,
    ) -> ProcessingContext:
        processor = WallSegmentProcessor(config or ProcessorConfig(), self.registry)
        return processor.run(segments, axes)

    def map_walls(
        self,
        centerlines: list[CenterLine],
        frames: list[SapFrame],
        config: MappingConfig | None = None,
        origin_offset: Point2D | None = None,
    ) -> list[MappingResult]:
        engine = MappingEngine(config or MappingConfig())
        return engine.map_centerlines(centerlines, frames, origin_offset)

    def list_stages(self) -> list[dict[str, str]]:
        return [
            {"id": s.get_id(), "name": s.get_name()}
            for s in self.registry.list_stages()
        ]
