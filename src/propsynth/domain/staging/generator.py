"""Map the in-memory build result onto flat staging records."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING, Final

from propsynth.domain.model import (
    OPEN_END,
    ContinuationProposal,
    broker_number,
    is_blank,
)

from .records import (
    ASSIGNMENT_ACTIVE,
    ASSIGNMENT_FULL,
    DEFAULT_ASSIGNMENT_PROPOSAL,
    ENTITY_BROKER,
    HIERARCHY_ACTIVE,
    HIERARCHY_VERSION_ACTIVE,
    PROPOSAL_ACTIVE,
    PROPOSAL_SUPERSEDED,
    SPLIT_VERSION_ACTIVE,
    STATE_RULE_INCLUDE,
    CommissionAssignmentRecipientRow,
    CommissionAssignmentVersionRow,
    HierarchyParticipantRow,
    HierarchyRow,
    HierarchySplitRow,
    HierarchyVersionRow,
    PolicyHierarchyAssignmentRow,
    PolicyHierarchyParticipantRow,
    PremiumSplitParticipantRow,
    PremiumSplitVersionRow,
    ProposalKeyMappingRow,
    ProposalProductRow,
    ProposalRow,
    SplitDistributionRow,
    StagingOutput,
    StateRuleRow,
    StateRuleStateRow,
)
from .states import state_name

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from propsynth.domain.model import (
        BrokerAssignment,
        GroupId,
        HierarchyTier,
        Proposal,
        ProposalHierarchy,
        QuarantineRecord,
    )
    from propsynth.domain.pipeline import BuildContext, BuildState

log = logging.getLogger(__name__)

_SKIPPED_PRODUCT_CODES: Final[frozenset[str]] = frozenset({"N/A", "*"})
_HUNDRED: Final[Decimal] = Decimal(100)
_SHARE_QUANTUM: Final[Decimal] = Decimal("0.0001")


def equal_share(participants: int) -> Decimal:
    return (_HUNDRED / participants).quantize(_SHARE_QUANTUM, rounding=ROUND_HALF_UP)


class ScheduleResolver:
    """Resolve free-text schedule codes to numeric schedule ids."""

    def __init__(self, schedule_ids: Mapping[str, int], *, context: BuildContext) -> None:
        self._schedule_ids = {code.strip(): value for code, value in schedule_ids.items()}
        self._context = context

    def resolve(self, code: str | None) -> int | None:
        if is_blank(code):
            return None
        key = (code or "").strip()
        schedule_id = self._schedule_ids.get(key)
        if schedule_id is None and key not in self._context.stats.unresolved_schedules:
            self._context.stats.unresolved_schedules.add(key)
            self._context.warn("Schedule code %r has no schedule id", key)
        return schedule_id


@dataclass(slots=True)
class StagingGenerator:
    schedules: ScheduleResolver
    context: BuildContext
    output: StagingOutput = field(default_factory=StagingOutput)
    _placeholder_brokers: set[str] = field(default_factory=set[str])

    def generate(self, state: BuildState) -> StagingOutput:
        last_years = _last_certificate_years(state.proposals)
        for proposal in state.proposals:
            if proposal.is_active:
                self._proposal(proposal, last_year=last_years.get(proposal.group_id))
            else:
                self._superseded_proposal(proposal)
        for record in state.quarantine:
            self._quarantine(record)
        for broker_id in sorted(state.broker_assignments):
            self._broker_assignment(state.broker_assignments[broker_id])
        log.info("Generated staging records: %s", self.output.counts())
        return self.output

    def broker_name(self, tier: HierarchyTier) -> str:
        if not is_blank(tier.broker_name):
            return (tier.broker_name or "").strip()
        if tier.broker_id not in self._placeholder_brokers:
            self._placeholder_brokers.add(tier.broker_id)
            self.context.warn("Broker %s has no display name; using a placeholder", tier.broker_id)
        return f"Broker {tier.broker_id}"

    # proposals ---------------------------------------------------------------

    def _proposal_row(self, proposal: Proposal, *, status: int, notes: str) -> ProposalRow:
        effective = proposal.effective_range or proposal.original_range
        writing = proposal.primary_participant.writing_broker
        if isinstance(proposal, ContinuationProposal):
            year_from, year_to = effective.start.year, effective.end.year
        else:
            year_from, year_to = proposal.original_range.start.year, proposal.original_range.end.year
        return ProposalRow(
            id=proposal.id,
            proposal_number=proposal.id,
            status=status,
            situs_state=proposal.situs_state,
            group_id=proposal.group_id,
            group_name=proposal.group_name,
            broker_id=broker_number(writing.broker_id),
            broker_name=self.broker_name(writing),
            broker_unique_party_id=writing.broker_id,
            product_codes=",".join(sorted(proposal.product_codes)),
            plan_codes=",".join(sorted(proposal.plan_codes)),
            split_config_hash=proposal.config_hash,
            date_range_from=year_from,
            date_range_to=year_to,
            effective_date_from=effective.start,
            effective_date_to=effective.end,
            notes=notes,
        )

    def _superseded_proposal(self, proposal: Proposal) -> None:
        self.output.proposals.append(
            self._proposal_row(
                proposal,
                status=PROPOSAL_SUPERSEDED,
                notes=(
                    "Superseded: every product+plan pair is claimed by a proposal starting "
                    f"{proposal.original_range.start.isoformat()}"
                ),
            )
        )

    def _proposal(self, proposal: Proposal, *, last_year: int | None) -> None:
        if isinstance(proposal, ContinuationProposal):
            notes = (
                f"Continuation of {proposal.source_proposal_id} for product+plan pairs "
                f"not in {proposal.truncated_by}"
            )
        else:
            notes = f"Certificates: {len(proposal.certificate_ids)}"
        self.output.proposals.append(
            self._proposal_row(proposal, status=PROPOSAL_ACTIVE, notes=notes)
        )
        self._proposal_products(proposal)
        self._key_mappings(proposal, last_year=last_year)
        self._premium_split(proposal)
        for hierarchy in proposal.hierarchies:
            self._hierarchy(proposal, hierarchy)

    def _proposal_products(self, proposal: Proposal) -> None:
        for raw_code in sorted(proposal.product_codes):
            code = raw_code.strip()
            if not code:
                self.context.warn("Proposal %s has an empty product code; skipped", proposal.id)
                continue
            if code in _SKIPPED_PRODUCT_CODES:
                continue
            self.output.proposal_products.append(
                ProposalProductRow(
                    id=f"PP-{proposal.id}-{code}",
                    proposal_id=proposal.id,
                    product_code=code,
                    product_name=f"{code} Product",
                )
            )

    def _key_mappings(self, proposal: Proposal, *, last_year: int | None) -> None:
        if isinstance(proposal, ContinuationProposal):
            first = proposal.original_range.start.year
            years: Iterable[int] = range(first, max(first, last_year or first) + 1)
        else:
            years = proposal.original_range.years()
        pairs = sorted(pair for pair in proposal.product_plans if not is_blank(pair[0]))
        for year in years:
            for product_code, plan_code in pairs:
                self.output.proposal_key_mappings.append(
                    ProposalKeyMappingRow(
                        group_id=proposal.group_id,
                        effective_year=year,
                        product_code=product_code,
                        plan_code=plan_code,
                        proposal_id=proposal.id,
                        split_config_hash=proposal.config_hash,
                    )
                )

    def _premium_split(self, proposal: Proposal) -> None:
        effective = proposal.effective_range or proposal.original_range
        version_id = f"PSV-{proposal.id}"
        self.output.premium_split_versions.append(
            PremiumSplitVersionRow(
                id=version_id,
                group_id=proposal.group_id,
                group_name=proposal.group_name,
                proposal_id=proposal.id,
                version_number="V1",
                effective_from=effective.start,
                effective_to=effective.end,
                total_split_percent=proposal.configuration.total_percent,
                status=SPLIT_VERSION_ACTIVE,
            )
        )
        for hierarchy in proposal.hierarchies:
            participant = hierarchy.participant
            writing = participant.writing_broker
            self.output.premium_split_participants.append(
                PremiumSplitParticipantRow(
                    id=f"PSP-{proposal.id}-{participant.split_seq}",
                    version_id=version_id,
                    broker_id=broker_number(writing.broker_id),
                    broker_name=self.broker_name(writing),
                    broker_npn=writing.broker_npn,
                    broker_unique_party_id=writing.broker_id,
                    split_percent=participant.split_percent,
                    is_writing_agent=True,
                    hierarchy_id=hierarchy.id,
                    sequence=participant.split_seq,
                    writing_broker_id=broker_number(writing.broker_id),
                    group_id=proposal.group_id,
                    effective_from=effective.start,
                    effective_to=effective.end,
                )
            )

    # hierarchies -------------------------------------------------------------

    def _hierarchy(self, proposal: Proposal, hierarchy: ProposalHierarchy) -> None:
        effective = proposal.effective_range or proposal.original_range
        writing = hierarchy.participant.writing_broker
        self.output.hierarchies.append(
            HierarchyRow(
                id=hierarchy.id,
                name=f"Hierarchy for {proposal.group_id}",
                group_id=proposal.group_id,
                group_name=proposal.group_name,
                broker_id=broker_number(writing.broker_id),
                broker_name=self.broker_name(writing),
                proposal_id=proposal.id,
                current_version_id=hierarchy.version_id,
                effective_date=effective.start,
                situs_state=proposal.situs_state,
                status=HIERARCHY_ACTIVE,
            )
        )
        self.output.hierarchy_versions.append(
            HierarchyVersionRow(
                id=hierarchy.version_id,
                hierarchy_id=hierarchy.id,
                version_number="V1",
                effective_from=effective.start,
                effective_to=effective.end,
                status=HIERARCHY_VERSION_ACTIVE,
            )
        )
        participants = [
            HierarchyParticipantRow(
                id=f"{hierarchy.id}-L{tier.level}",
                hierarchy_version_id=hierarchy.version_id,
                entity_id=tier.broker_id,
                entity_name=self.broker_name(tier),
                entity_type=ENTITY_BROKER,
                level=tier.level,
                schedule_code=tier.schedule_code,
                schedule_id=self.schedules.resolve(tier.schedule_code),
            )
            for tier in hierarchy.tiers
        ]
        self.output.hierarchy_participants.extend(participants)
        self._state_rules(proposal, hierarchy, participants)

    def _state_rules(
        self,
        proposal: Proposal,
        hierarchy: ProposalHierarchy,
        participants: list[HierarchyParticipantRow],
    ) -> None:
        products_by_state: dict[str, set[str]] = {}
        for state_code, product_code in proposal.state_products:
            products_by_state.setdefault(state_code, set()).add(product_code)

        # one rule per observed state; downstream joins match on the state code
        for sort_order, state_code in enumerate(sorted(products_by_state), start=1):
            rule_id = f"SR-{hierarchy.version_id}-{state_code}"
            self.output.state_rules.append(
                StateRuleRow(
                    id=rule_id,
                    hierarchy_version_id=hierarchy.version_id,
                    short_name=state_code,
                    name=state_code,
                    description=f"State rule for {state_code} in hierarchy {hierarchy.id}",
                    type=STATE_RULE_INCLUDE,
                    sort_order=sort_order,
                )
            )
            self.output.state_rule_states.append(
                StateRuleStateRow(
                    id=f"SRS-{rule_id}-{state_code}",
                    state_rule_id=rule_id,
                    state_code=state_code,
                    state_name=state_name(state_code),
                )
            )
            products = sorted(p for p in products_by_state[state_code] if not is_blank(p))
            for product_order, product_code in enumerate(products, start=1):
                split_id = f"HS-{rule_id}-{product_code}"
                self.output.hierarchy_splits.append(
                    HierarchySplitRow(
                        id=split_id,
                        state_rule_id=rule_id,
                        product_id=product_code,
                        product_code=product_code,
                        product_name=f"{product_code} Product",
                        sort_order=product_order,
                    )
                )
                self._split_distributions(split_id, participants)

    def _split_distributions(
        self, split_id: str, participants: list[HierarchyParticipantRow]
    ) -> None:
        if not participants:
            return
        share = equal_share(len(participants))
        for participant in participants:
            self.output.split_distributions.append(
                SplitDistributionRow(
                    id=f"SD-{split_id}-{participant.id}",
                    hierarchy_split_id=split_id,
                    hierarchy_participant_id=participant.id,
                    participant_entity_id=broker_number(participant.entity_id),
                    percentage=share,
                    schedule_id=participant.schedule_id,
                    schedule_name=participant.schedule_code,
                )
            )

    # quarantine and broker assignments ---------------------------------------

    def _quarantine(self, record: QuarantineRecord) -> None:
        criteria = record.criteria
        participant = record.participant
        writing = participant.writing_broker
        version_id = f"HV-{record.id}"
        self.output.hierarchies.append(
            HierarchyRow(
                id=record.hierarchy_id,
                name=f"PHA Hierarchy for Policy {criteria.certificate_id}",
                group_id=criteria.group_id,
                group_name=criteria.group_name,
                broker_id=broker_number(writing.broker_id),
                broker_name=self.broker_name(writing),
                proposal_id=None,
                current_version_id=version_id,
                effective_date=criteria.effective_date,
                situs_state=criteria.situs_state,
                status=HIERARCHY_ACTIVE,
            )
        )
        self.output.hierarchy_versions.append(
            HierarchyVersionRow(
                id=version_id,
                hierarchy_id=record.hierarchy_id,
                version_number="V1",
                effective_from=criteria.effective_date,
                effective_to=OPEN_END,
                status=HIERARCHY_VERSION_ACTIVE,
            )
        )
        for tier in participant.tiers:
            self.output.hierarchy_participants.append(
                HierarchyParticipantRow(
                    id=f"HP-{record.id}-L{tier.level}",
                    hierarchy_version_id=version_id,
                    entity_id=tier.broker_id,
                    entity_name=self.broker_name(tier),
                    entity_type=ENTITY_BROKER,
                    level=tier.level,
                    schedule_code=tier.schedule_code,
                    schedule_id=self.schedules.resolve(tier.schedule_code),
                )
            )
        self.output.policy_hierarchy_assignments.append(
            PolicyHierarchyAssignmentRow(
                id=record.id,
                policy_id=criteria.certificate_id,
                hierarchy_id=record.hierarchy_id,
                writing_broker_id=broker_number(writing.broker_id),
                split_sequence=participant.split_seq,
                split_percent=participant.split_percent,
                non_conformant_reason=str(record.reason),
                entry_type=record.entry_type,
            )
        )
        for tier in participant.tiers:
            self.output.policy_hierarchy_participants.append(
                PolicyHierarchyParticipantRow(
                    id=f"PHP-{record.id}-L{tier.level}",
                    assignment_id=record.id,
                    broker_id=tier.broker_id,
                    broker_name=tier.broker_name,
                    level=tier.level,
                    schedule_code=tier.schedule_code,
                )
            )

    def _broker_assignment(self, assignment: BrokerAssignment) -> None:
        version_id = f"CAV-{assignment.source_broker_id}"
        source = assignment.source_broker_name or assignment.source_broker_id
        target = assignment.target_broker_name or assignment.target_broker_id
        self.output.commission_assignment_versions.append(
            CommissionAssignmentVersionRow(
                id=version_id,
                broker_id=broker_number(assignment.source_broker_id),
                broker_name=assignment.source_broker_name,
                proposal_id=DEFAULT_ASSIGNMENT_PROPOSAL,
                version_number="1",
                effective_from=assignment.effective_date,
                effective_to=OPEN_END,
                status=ASSIGNMENT_ACTIVE,
                type=ASSIGNMENT_FULL,
                change_description=f"Broker assignment: {source} -> {target}",
                total_assigned_percent=_HUNDRED,
            )
        )
        self.output.commission_assignment_recipients.append(
            CommissionAssignmentRecipientRow(
                id=f"CAR-{assignment.source_broker_id}",
                version_id=version_id,
                recipient_broker_id=broker_number(assignment.target_broker_id),
                recipient_name=assignment.target_broker_name,
                percentage=_HUNDRED,
                notes=(
                    "Broker assignment - most recent effective "
                    f"{assignment.effective_date.isoformat()}"
                ),
            )
        )


def _last_certificate_years(proposals: Iterable[Proposal]) -> dict[GroupId, int]:
    years: dict[GroupId, int] = {}
    for proposal in proposals:
        if isinstance(proposal, ContinuationProposal):
            continue
        year = proposal.original_range.end.year
        years[proposal.group_id] = max(year, years.get(proposal.group_id, year))
    return years


def generate_staging(
    state: BuildState,
    *,
    context: BuildContext,
    schedule_ids: Mapping[str, int] | None = None,
) -> StagingOutput:
    """Materialize staging records for a finished build."""

    resolver = ScheduleResolver(schedule_ids or {}, context=context)
    return StagingGenerator(schedules=resolver, context=context).generate(state)
