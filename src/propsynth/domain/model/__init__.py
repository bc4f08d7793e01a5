"""Public domain model surface."""

from __future__ import annotations

from propsynth.domain.model.certificate import CertificateSplitRecord
from propsynth.domain.model.criteria import BrokerAssignment, SelectionCriteria
from propsynth.domain.model.enums import ProposalKind, ProposalStatus, QuarantineReason
from propsynth.domain.model.hierarchy import (
    HierarchyTier,
    InvalidTierChainError,
    SplitConfiguration,
    SplitParticipant,
    check_tier_chain,
)
from propsynth.domain.model.primitives import (
    OPEN_END,
    OPEN_START,
    BrokerId,
    CertificateId,
    DateRange,
    Digest,
    GroupId,
    PlanCode,
    ProductCode,
    ProductPlan,
    StateCode,
    broker_number,
    day_after,
    day_before,
    is_blank,
    is_invalid_group_id,
    normalize_group_id,
)
from propsynth.domain.model.proposal import (
    ContinuationProposal,
    Proposal,
    ProposalHierarchy,
    hierarchy_id,
)
from propsynth.domain.model.quarantine import (
    ENTRY_TYPE_BY_REASON,
    QuarantineRecord,
    quarantine_criteria,
)

__all__ = [  # noqa: RUF022
    # inputs
    "CertificateSplitRecord",
    # hierarchy
    "HierarchyTier",
    "InvalidTierChainError",
    "SplitConfiguration",
    "SplitParticipant",
    "check_tier_chain",
    # criteria
    "BrokerAssignment",
    "SelectionCriteria",
    # proposals
    "ContinuationProposal",
    "Proposal",
    "ProposalHierarchy",
    "ProposalKind",
    "ProposalStatus",
    "hierarchy_id",
    # quarantine
    "ENTRY_TYPE_BY_REASON",
    "QuarantineReason",
    "QuarantineRecord",
    "quarantine_criteria",
    # primitives
    "OPEN_END",
    "OPEN_START",
    "BrokerId",
    "CertificateId",
    "DateRange",
    "Digest",
    "GroupId",
    "PlanCode",
    "ProductCode",
    "ProductPlan",
    "StateCode",
    "broker_number",
    "day_after",
    "day_before",
    "is_blank",
    "is_invalid_group_id",
    "normalize_group_id",
]
