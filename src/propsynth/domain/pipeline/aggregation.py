"""Proposal aggregation keyed by (group id, configuration hash)."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from propsynth.domain.model import Proposal

from .orchestrator import PipelinePhase

if TYPE_CHECKING:
    from collections.abc import Iterable

    from propsynth.domain.model import Digest, GroupId, SelectionCriteria

    from .context import BuildContext, BuildState
    from .identity import HashRegistry

log = logging.getLogger(__name__)


def proposal_id(group_id: GroupId, ordinal: int) -> str:
    return f"PROP-{group_id}-{ordinal}"


def aggregate_proposals(
    criteria: Iterable[SelectionCriteria],
    *,
    registry: HashRegistry | None = None,
) -> list[Proposal]:
    """Merge criteria sharing group and configuration into proposals.

    Proposal ordinals are assigned per group in first-occurrence order. When a
    registry is given every participant's hierarchy hash must be known to it.
    """

    index: dict[tuple[GroupId, Digest], Proposal] = {}
    ordinals: dict[GroupId, int] = {}
    for item in criteria:
        key = (item.group_id, item.configuration.config_hash)
        proposal = index.get(key)
        if proposal is not None:
            proposal.absorb(item)
            continue
        ordinals[item.group_id] = ordinals.get(item.group_id, 0) + 1
        index[key] = Proposal.from_criteria(proposal_id(item.group_id, ordinals[item.group_id]), item)

    proposals = list(index.values())
    for proposal in proposals:
        if registry is not None:
            for participant in proposal.configuration.participants:
                registry.require_hierarchy(participant.hierarchy_hash)
        proposal.attach_hierarchies()
    return proposals


class ProposalAggregationPhase(PipelinePhase):
    """Merges accepted criteria into proposals."""

    name: str = "proposal-aggregation"

    def run(self, state: BuildState, *, context: BuildContext) -> None:
        state.proposals = aggregate_proposals(state.criteria, registry=context.registry)
        context.stats.proposals = len(state.proposals)
        context.stats.hierarchies = sum(len(p.hierarchies) for p in state.proposals)
        log.info(
            "Aggregated %d criteria into %d proposals across %d groups",
            len(state.criteria),
            len(state.proposals),
            len({p.group_id for p in state.proposals}),
        )
