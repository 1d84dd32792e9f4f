"""Abstract base class for all processing stages.

Every step of centerline reconstruction implements this interface. Stages are:
- Self-contained: each performs one transformation of the processing context
- Composable: the registry orders them into a pipeline by priority
- Conditional: each stage decides if it applies to the current context
"""

from __future__ import annotations
from abc import ABC, abstractmethod

from wallaxis.models.context import ProcessingContext


class ProcessingStage(ABC):
    """
    Base class for all processing stages.

    Subclasses implement `applies()` and `run()`.
    The processor queries the registry, filters by `applies()`,
    sorts by `priority`, and calls `run()` in order.
    """

    # Lower priority = runs first. Default 100.
    priority: int = 100

    # IDs of stages that must run before this one.
    dependencies: list[str] = []

    @abstractmethod
    def get_id(self) -> str:
        """Unique identifier for this stage (e.g., 'segments.merge')."""
        ...

    @abstractmethod
    def get_name(self) -> str:
        """Human-readable name (e.g., 'Merge Collinear Segments')."""
        ...

    def applies(self, context: ProcessingContext) -> bool:
        """Return True if this stage should run for the given context."""
        return True

    @abstractmethod
    def run(self, context: ProcessingContext) -> int:
        """
        Transform the context in place.

        Returns the number of changes made (merges, pairs, snaps, ...),
        which the processor records in the context statistics.
        """
        ...
