"""Phase-based orchestrator for the bulk import pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Protocol

from demokit.domain.ports import RemoteServiceError

from .context import PhaseResult
from .errors import BulkImportError, PhaseFailedError

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from .context import PipelineContext

log = getLogger(__name__)


class PipelinePhase(Protocol):
    """Contract implemented by each import phase."""

    name: str

    def run(self, context: PipelineContext) -> PhaseResult: ...


@dataclass(slots=True)
class ImportRunResult:
    phases: list[PhaseResult] = field(default_factory=list[PhaseResult])

    @property
    def errors(self) -> int:
        return sum(phase.errors for phase in self.phases)

    def for_phase(self, name: str) -> PhaseResult | None:
        return next((phase for phase in self.phases if phase.phase == name), None)


@dataclass(slots=True)
class ImportPipeline:
    """Compose and execute the ordered import phases.

    Phases run strictly in sequence. The first phase to fail stops the run with a
    ``PhaseFailedError`` naming it; earlier phases are not rolled back.
    """

    phases: Sequence[PipelinePhase] = field(default_factory=tuple)

    def with_phase(self, phase: PipelinePhase) -> ImportPipeline:
        """Return a new pipeline appending ``phase`` at the end."""

        return ImportPipeline(phases=(*self.phases, phase))

    def extend(self, phases: Iterable[PipelinePhase]) -> ImportPipeline:
        """Return a new pipeline with the provided ``phases`` concatenated."""

        return ImportPipeline(phases=(*self.phases, *tuple(phases)))

    @property
    def phase_names(self) -> list[str]:
        return [phase.name for phase in self.phases]

    def run(self, context: PipelineContext) -> ImportRunResult:
        """Execute the configured phases in-order against ``context``."""

        context.reset()
        run_result = ImportRunResult()
        try:
            for phase in self.phases:
                log.info("Starting phase %s", phase.name)
                try:
                    phase_result = phase.run(context)
                except (BulkImportError, RemoteServiceError, OSError) as exc:
                    raise PhaseFailedError(phase.name, exc) from exc
                run_result.phases.append(phase_result)
                log.info(
                    "Phase %s done: processed=%d, skipped=%d, errors=%d",
                    phase.name,
                    phase_result.processed,
                    phase_result.skipped,
                    phase_result.errors,
                )
        finally:
            context.clear_relationships()
        return run_result
