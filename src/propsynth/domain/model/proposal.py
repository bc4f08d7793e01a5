"""Proposals: the aggregation unit keyed by (group id, configuration hash)."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .enums import ProposalKind, ProposalStatus
from .primitives import DateRange

if TYPE_CHECKING:
    from .criteria import SelectionCriteria
    from .hierarchy import HierarchyTier, SplitConfiguration, SplitParticipant
    from .primitives import (
        CertificateId,
        Digest,
        GroupId,
        PlanCode,
        ProductCode,
        ProductPlan,
        StateCode,
    )


def hierarchy_id(proposal_id: str, participant: SplitParticipant) -> str:
    return f"H-{proposal_id}-{participant.writing_broker.broker_id}-{participant.split_seq}"


@dataclass(frozen=True, slots=True, kw_only=True)
class ProposalHierarchy:
    """A hierarchy owned by exactly one proposal for one split participant."""

    id: str
    proposal_id: str
    participant: SplitParticipant

    @property
    def tiers(self) -> tuple[HierarchyTier, ...]:
        return self.participant.tiers

    @property
    def version_id(self) -> str:
        return f"{self.id}-V1"


@dataclass(slots=True, kw_only=True)
class Proposal:
    id: str
    group_id: GroupId
    group_name: str | None
    configuration: SplitConfiguration
    situs_state: StateCode | None
    original_range: DateRange
    product_codes: set[ProductCode] = field(default_factory=set[str])
    plan_codes: set[PlanCode] = field(default_factory=set[str])
    product_plans: set[ProductPlan] = field(default_factory=set[tuple[str, str]])
    state_products: set[tuple[StateCode, ProductCode]] = field(
        default_factory=set[tuple[str, str]]
    )
    certificate_ids: list[CertificateId] = field(default_factory=list[str])
    hierarchies: list[ProposalHierarchy] = field(default_factory=list[ProposalHierarchy])
    effective_range: DateRange | None = None
    status: ProposalStatus = ProposalStatus.ACTIVE
    _certificate_index: set[CertificateId] = field(default_factory=set[str], repr=False)

    @classmethod
    def from_criteria(cls, proposal_id: str, criteria: SelectionCriteria) -> Proposal:
        proposal = cls(
            id=proposal_id,
            group_id=criteria.group_id,
            group_name=criteria.group_name,
            configuration=criteria.configuration,
            situs_state=criteria.situs_state,
            original_range=DateRange(start=criteria.effective_date, end=criteria.effective_date),
        )
        proposal.absorb(criteria)
        return proposal

    @property
    def kind(self) -> ProposalKind:
        return ProposalKind.REGULAR

    @property
    def config_hash(self) -> Digest:
        return self.configuration.config_hash

    @property
    def primary_participant(self) -> SplitParticipant:
        return self.configuration.primary

    @property
    def is_active(self) -> bool:
        return self.status is ProposalStatus.ACTIVE

    def absorb(self, criteria: SelectionCriteria) -> None:
        """Expand this proposal with another certificate sharing its configuration."""

        self.product_codes.add(criteria.product_code)
        self.plan_codes.add(criteria.plan_code)
        self.product_plans.add(criteria.product_plan)
        if criteria.situs_state:
            self.state_products.add((criteria.situs_state, criteria.product_code))
        self.original_range = self.original_range.widen(criteria.effective_date)
        if criteria.certificate_id not in self._certificate_index:
            self._certificate_index.add(criteria.certificate_id)
            self.certificate_ids.append(criteria.certificate_id)

    def attach_hierarchies(self) -> None:
        self.hierarchies = [
            ProposalHierarchy(
                id=hierarchy_id(self.id, participant),
                proposal_id=self.id,
                participant=participant,
            )
            for participant in sorted(
                self.configuration.participants, key=lambda item: item.split_seq
            )
        ]

    def drop_pairs(self, pairs: set[ProductPlan]) -> None:
        """Hand ``pairs`` over to another proposal starting on the same date."""

        self.product_plans -= pairs
        self.product_codes = {product for product, _ in self.product_plans}
        self.plan_codes = {plan for _, plan in self.product_plans}
        self.state_products = {
            (state, product)
            for state, product in self.state_products
            if product in self.product_codes
        }
        if not self.product_plans:
            self.status = ProposalStatus.SUPERSEDED


@dataclass(slots=True, kw_only=True)
class ContinuationProposal(Proposal):
    """Follow-on proposal keeping pairs covered after a truncation orphaned them."""

    source_proposal_id: str
    truncated_by: str = ""

    @property
    def kind(self) -> ProposalKind:
        return ProposalKind.CONTINUATION
