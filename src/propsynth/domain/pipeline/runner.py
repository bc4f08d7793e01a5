"""Entry points for running the proposal build."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .aggregation import ProposalAggregationPhase
from .context import BuildState
from .extraction import SelectionCriteriaPhase
from .orchestrator import ProposalPipeline
from .routing import AnomalyRoutingPhase
from .temporal import TemporalReconciliationPhase

if TYPE_CHECKING:
    from collections.abc import Sequence

    from propsynth.domain.model import CertificateSplitRecord

    from .context import BuildContext


def default_pipeline() -> ProposalPipeline:
    return ProposalPipeline(
        phases=(
            SelectionCriteriaPhase(),
            AnomalyRoutingPhase(),
            ProposalAggregationPhase(),
            TemporalReconciliationPhase(),
        )
    )


def build_proposals(
    records: Sequence[CertificateSplitRecord],
    *,
    context: BuildContext | None = None,
    pipeline: ProposalPipeline | None = None,
) -> BuildState:
    """Run the full in-memory build over a complete, already-loaded record set."""

    active_pipeline = pipeline or default_pipeline()
    return active_pipeline.run(BuildState(records=records), context=context)
