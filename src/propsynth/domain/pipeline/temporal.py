"""Temporal range reconciliation of a group's proposals.

Within a group every (product, plan) pair must be claimed by a chain of proposal
intervals that is contiguous and never overlaps. Proposals are ordered by their
certificate-derived start date (then id). A proposal opens its start to the
beginning of time unless an earlier proposal shares one of its pairs, and ends the
day before the nearest later proposal sharing a pair. Pairs the truncating
proposal does not claim carry on in continuation proposals, which are truncated
the same way when an even later proposal picks the pair up.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from propsynth.domain.model import (
    OPEN_END,
    OPEN_START,
    ContinuationProposal,
    DateRange,
    day_after,
    day_before,
)

from .errors import CoverageError
from .orchestrator import PipelinePhase

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from datetime import date

    from propsynth.domain.model import GroupId, ProductPlan, Proposal

    from .context import BuildContext, BuildState

log = logging.getLogger(__name__)


def _timeline_key(proposal: Proposal) -> tuple[date, str]:
    return (proposal.original_range.start, proposal.id)


def _hand_over_same_day_pairs(ordered: Sequence[Proposal]) -> None:
    # the later proposal in timeline order keeps a pair both claim from the same day
    for index, proposal in enumerate(ordered):
        start = proposal.original_range.start
        shared: set[ProductPlan] = set()
        for later in ordered[index + 1 :]:
            if later.original_range.start != start:
                break
            shared |= proposal.product_plans & later.product_plans
        if shared:
            proposal.drop_pairs(shared)
            if not proposal.is_active:
                log.warning(
                    "Proposal %s is superseded by proposals starting on %s",
                    proposal.id,
                    start.isoformat(),
                )


def continuation_id(source_id: str, ordinal: int) -> str:
    return f"{source_id}-CONT" if ordinal == 1 else f"{source_id}-CONT-{ordinal}"


def _continuation(
    source: Proposal,
    *,
    ordinal: int,
    pairs: set[ProductPlan],
    effective: DateRange,
    truncated_by: str,
) -> ContinuationProposal:
    products = {product for product, _ in pairs}
    continuation = ContinuationProposal(
        id=continuation_id(source.id, ordinal),
        group_id=source.group_id,
        group_name=source.group_name,
        configuration=source.configuration,
        situs_state=source.situs_state,
        original_range=DateRange(start=effective.start, end=effective.start),
        product_codes=products,
        plan_codes={plan for _, plan in pairs},
        product_plans=set(pairs),
        state_products={
            (state, product) for state, product in source.state_products if product in products
        },
        effective_range=effective,
        source_proposal_id=source.id,
        truncated_by=truncated_by,
    )
    continuation.attach_hierarchies()
    return continuation


def reconcile_group(proposals: Sequence[Proposal]) -> list[ContinuationProposal]:
    """Assign effective ranges to one group's proposals; return new continuations."""

    ordered = sorted(proposals, key=_timeline_key)
    _hand_over_same_day_pairs(ordered)
    timeline = [proposal for proposal in ordered if proposal.is_active]

    if len(timeline) == 1:
        timeline[0].effective_range = DateRange(start=OPEN_START, end=OPEN_END)
        return []

    continuations: list[ContinuationProposal] = []
    for index, proposal in enumerate(timeline):
        earlier = timeline[:index]
        later = timeline[index + 1 :]
        pairs = proposal.product_plans

        shares_earlier = any(pairs & other.product_plans for other in earlier)
        start = proposal.original_range.start if shares_earlier else OPEN_START

        # per pair: the day before the next proposal claiming it, and who that is
        ends: dict[ProductPlan, tuple[date, str]] = {}
        for pair in pairs:
            successor = next((other for other in later if pair in other.product_plans), None)
            if successor is None:
                ends[pair] = (OPEN_END, "")
            else:
                ends[pair] = (day_before(successor.original_range.start), successor.id)

        boundaries = sorted({end for end, _ in ends.values()})
        proposal.effective_range = DateRange(start=start, end=boundaries[0])

        segment_start = day_after(boundaries[0])
        for ordinal, boundary in enumerate(boundaries[1:], start=1):
            previous = boundaries[ordinal - 1]
            remaining = {pair for pair, (end, _) in ends.items() if end > previous}
            truncated_by = min(
                (successor for end, successor in ends.values() if end == previous), default=""
            )
            continuation = _continuation(
                proposal,
                ordinal=ordinal,
                pairs=remaining,
                effective=DateRange(start=segment_start, end=boundary),
                truncated_by=truncated_by,
            )
            continuations.append(continuation)
            log.debug(
                "Continuation %s from %s for %d pairs not in %s",
                continuation.id,
                segment_start.isoformat(),
                len(remaining),
                truncated_by,
            )
            segment_start = day_after(boundary)

    return continuations


def check_coverage(group_id: GroupId, proposals: Iterable[Proposal]) -> None:
    """Raise :class:`CoverageError` unless each pair's intervals chain without gap or overlap."""

    claims: dict[ProductPlan, list[DateRange]] = {}
    for proposal in proposals:
        if not proposal.is_active:
            continue
        if proposal.effective_range is None:
            raise CoverageError(
                group_id=group_id,
                pair=next(iter(sorted(proposal.product_plans)), ("", "")),
                detail=f"{proposal.id} has no effective range",
            )
        for pair in proposal.product_plans:
            claims.setdefault(pair, []).append(proposal.effective_range)

    for pair, ranges in sorted(claims.items()):
        ranges.sort(key=lambda item: item.start)
        for current, following in zip(ranges, ranges[1:], strict=False):
            if current.overlaps(following):
                raise CoverageError(
                    group_id=group_id,
                    pair=pair,
                    detail=f"{current} overlaps {following}",
                )
            if not current.adjoins(following):
                raise CoverageError(
                    group_id=group_id,
                    pair=pair,
                    detail=f"gap between {current} and {following}",
                )


def reconcile_proposals(proposals: Sequence[Proposal]) -> list[ContinuationProposal]:
    """Reconcile every group independently and verify coverage afterwards."""

    grouped: dict[GroupId, list[Proposal]] = {}
    for proposal in proposals:
        grouped.setdefault(proposal.group_id, []).append(proposal)

    continuations: list[ContinuationProposal] = []
    for group_id, members in grouped.items():
        created = reconcile_group(members)
        check_coverage(group_id, [*members, *created])
        continuations.extend(created)
    return continuations


class TemporalReconciliationPhase(PipelinePhase):
    """Assigns effective ranges and appends continuation proposals."""

    name: str = "temporal-reconciliation"

    def run(self, state: BuildState, *, context: BuildContext) -> None:
        continuations = reconcile_proposals(state.proposals)
        state.proposals = [*state.proposals, *continuations]

        stats = context.stats
        stats.continuations = len(continuations)
        stats.superseded = sum(1 for p in state.proposals if not p.is_active)
        stats.hierarchies += sum(len(c.hierarchies) for c in continuations)
        log.info(
            "Reconciled date ranges: %d continuations, %d superseded proposals",
            stats.continuations,
            stats.superseded,
        )
