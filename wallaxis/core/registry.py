"""Stage registry — the catalogue of reconstruction stages and their run order."""

from __future__ import annotations
import logging

from wallaxis.models.context import ProcessingContext
from wallaxis.models.parameters import ProcessorConfig
from wallaxis.stages.base import ProcessingStage

logger = logging.getLogger(__name__)


class StageRegistry:
    """
    Stages keyed by id.

    A pipeline is the selected stages ordered by priority, with every stage
    moved after the stages it depends on. A dependency that is not part of
    the selection is skipped, so a partial pipeline still runs.
    """

    def __init__(self) -> None:
        self._stages: dict[str, ProcessingStage] = {}

    def register(self, stage: ProcessingStage) -> None:
        """Add a stage, replacing any stage with the same id."""
        self._stages[stage.get_id()] = stage

    def unregister(self, stage_id: str) -> None:
        self._stages.pop(stage_id, None)

    def get_stage(self, stage_id: str) -> ProcessingStage | None:
        return self._stages.get(stage_id)

    def list_stages(self) -> list[ProcessingStage]:
        """Every registered stage in pipeline order."""
        return _pipeline_order(list(self._stages.values()))

    def get_applicable_stages(self, context: ProcessingContext) -> list[ProcessingStage]:
        """
        The stages to run for one reconstruction.

        A stage runs when the config selects it (`enabled_stages`, minus
        `disabled_stages`) and its `applies()` accepts the context.
        """
        config = context.config
        selected = [
            stage for stage in self._stages.values()
            if _is_selected(stage.get_id(), config) and stage.applies(context)
        ]
        return _pipeline_order(selected)


def _is_selected(stage_id: str, config: ProcessorConfig) -> bool:
    # An empty enabled list selects every stage
    if config.enabled_stages and stage_id not in config.enabled_stages:
        return False
    return stage_id not in config.disabled_stages


def _pipeline_order(stages: list[ProcessingStage]) -> list[ProcessingStage]:
    by_id = {stage.get_id(): stage for stage in stages}
    placed: set[str] = set()
    ordered: list[ProcessingStage] = []

    def place(stage: ProcessingStage) -> None:
        stage_id = stage.get_id()
        if stage_id in placed:
            return
        placed.add(stage_id)
        for dep_id in stage.dependencies:
            dependency = by_id.get(dep_id)
            if dependency is None:
                logger.debug("Stage %s: dependency %s not selected", stage_id, dep_id)
                continue
            place(dependency)
        ordered.append(stage)

    for stage in sorted(stages, key=lambda s: s.priority):
        place(stage)
    return ordered


def create_default_registry() -> StageRegistry:
    """Registry holding the full reconstruction pipeline."""
    from wallaxis.stages.segments import (
        NormalizeAnglesStage, AngleGroupingStage, MergeSegmentsStage, PairDetectionStage,
    )
    from wallaxis.stages.centerlines import (
        PairCenterlineStage, SingleLineStage, GapRecoveryStage,
        OverlapMergeStage, AutoExtendStage, CleanupStage,
    )
    from wallaxis.stages.axes import AxisSnapStage, GridBreakStage, GridExtendStage

    registry = StageRegistry()
    for stage in (
        NormalizeAnglesStage(), AngleGroupingStage(), MergeSegmentsStage(),
        PairDetectionStage(), PairCenterlineStage(), SingleLineStage(),
        GapRecoveryStage(), OverlapMergeStage(), AxisSnapStage(),
        AutoExtendStage(), GridBreakStage(), GridExtendStage(), CleanupStage(),
    ):
        registry.register(stage)
    return registry
