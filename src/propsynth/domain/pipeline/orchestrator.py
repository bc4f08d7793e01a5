"""Phase-based orchestrator for the proposal build."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

from .context import BuildContext, BuildState

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence


class PipelinePhase(Protocol):
    """Contract implemented by each build phase."""

    name: str

    def run(self, state: BuildState, *, context: BuildContext) -> None: ...


@dataclass(slots=True)
class ProposalPipeline:
    """Compose and execute the ordered build phases."""

    phases: Sequence[PipelinePhase] = field(default_factory=tuple)

    def with_phase(self, phase: PipelinePhase) -> ProposalPipeline:
        """Return a new pipeline appending ``phase`` at the end."""

        return ProposalPipeline(phases=(*self.phases, phase))

    def extend(self, phases: Iterable[PipelinePhase]) -> ProposalPipeline:
        """Return a new pipeline with the provided ``phases`` concatenated."""

        return ProposalPipeline(phases=(*self.phases, *tuple(phases)))

    def run(self, state: BuildState, *, context: BuildContext | None = None) -> BuildState:
        """Execute the configured phases in-order against ``state``."""

        active_context = context or BuildContext()
        for phase in self.phases:
            phase.run(state, context=active_context)
        return state
