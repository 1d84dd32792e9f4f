"""Wall segment processor — runs the reconstruction pipeline."""

from __future__ import annotations
import logging

from wallaxis.models import (
    AxisLine, CenterLine, ProcessingContext, ProcessorConfig, WallSegment,
)
from wallaxis.core.registry import StageRegistry, create_default_registry

logger = logging.getLogger(__name__)


class WallSegmentProcessor:
    """
    Turns raw floor-plan lines into a minimal set of wall centerlines.

    The processor keeps only its configuration and stage registry; every
    call works on a fresh context holding copies of the input segments,
    so repeated calls on the same input give the same result.
    """

    def __init__(
        self,
        config: ProcessorConfig | None = None,
        registry: StageRegistry | None = None,
    ) -> None:
        self.config = config or ProcessorConfig()
        self.registry = registry or create_default_registry()

    def process(
        self,
        segments: list[WallSegment],
        axes: list[AxisLine] | None = None,
    ) -> list[CenterLine]:
        """Return the de-duplicated centerlines for one batch of segments."""
        return self.run(segments, axes).centerlines

    def run(
        self,
        segments: list[WallSegment],
        axes: list[AxisLine] | None = None,
    ) -> ProcessingContext:
        """Run the full pipeline and return the context (centerlines + stats)."""
        context = ProcessingContext(
            segments=self._prepare(segments),
            axes=list(axes or []),
            config=self.config,
        )

        if not context.active_segments():
            logger.info("No usable segments, nothing to process")
            context.centerlines = []
            return context

        stages = self.registry.get_applicable_stages(context)
        for stage in stages:
            count = stage.run(context)
            context.stats.record(stage.get_id(), count)
            logger.debug("Stage %s changed %d items", stage.get_id(), count)

        logger.info(
            "Processed %d segments into %d centerlines (%d merged, %d pairs, %d gaps)",
            len(context.segments),
            len(context.centerlines),
            context.stats.merged_segments,
            context.stats.detected_pairs,
            context.stats.recovered_gaps,
        )
        return context

    def _prepare(self, segments: list[WallSegment]) -> list[WallSegment]:
        """Copy the input into the arena and reset processing state."""
        arena: list[WallSegment] = []
        for i, seg in enumerate(segments):
            copy = seg.model_copy()
            copy.reset_state(i)
            # Zero-length lines are not geometry
            if not copy.is_valid:
                copy.is_active = False
            arena.append(copy)
        return arena
