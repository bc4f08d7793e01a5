"""Flat staging records handed to the persistence layer."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from datetime import date
    from decimal import Decimal

PROPOSAL_ACTIVE: Final[int] = 1
PROPOSAL_SUPERSEDED: Final[int] = 2
SPLIT_VERSION_ACTIVE: Final[int] = 1
HIERARCHY_ACTIVE: Final[int] = 0
HIERARCHY_VERSION_ACTIVE: Final[int] = 1
ASSIGNMENT_ACTIVE: Final[int] = 3
ASSIGNMENT_FULL: Final[int] = 1
ENTITY_BROKER: Final[int] = 1
STATE_RULE_INCLUDE: Final[int] = 0
DEFAULT_ASSIGNMENT_PROPOSAL: Final[str] = "__DEFAULT__"


@dataclass(frozen=True, slots=True, kw_only=True)
class ProposalRow:
    id: str
    proposal_number: str
    status: int
    situs_state: str | None
    group_id: str
    group_name: str | None
    broker_id: int
    broker_name: str | None
    broker_unique_party_id: str | None
    product_codes: str
    plan_codes: str
    split_config_hash: str
    date_range_from: int
    date_range_to: int
    effective_date_from: date
    effective_date_to: date
    notes: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class ProposalProductRow:
    id: str
    proposal_id: str
    product_code: str
    product_name: str


@dataclass(frozen=True, slots=True, kw_only=True)
class ProposalKeyMappingRow:
    group_id: str
    effective_year: int
    product_code: str
    plan_code: str
    proposal_id: str
    split_config_hash: str


@dataclass(frozen=True, slots=True, kw_only=True)
class PremiumSplitVersionRow:
    id: str
    group_id: str
    group_name: str | None
    proposal_id: str
    version_number: str
    effective_from: date
    effective_to: date
    total_split_percent: Decimal
    status: int


@dataclass(frozen=True, slots=True, kw_only=True)
class PremiumSplitParticipantRow:
    id: str
    version_id: str
    broker_id: int
    broker_name: str | None
    broker_npn: str | None
    broker_unique_party_id: str
    split_percent: Decimal
    is_writing_agent: bool
    hierarchy_id: str
    sequence: int
    writing_broker_id: int
    group_id: str
    effective_from: date
    effective_to: date


@dataclass(frozen=True, slots=True, kw_only=True)
class HierarchyRow:
    id: str
    name: str
    group_id: str
    group_name: str | None
    broker_id: int
    broker_name: str | None
    proposal_id: str | None
    current_version_id: str
    effective_date: date
    situs_state: str | None
    status: int


@dataclass(frozen=True, slots=True, kw_only=True)
class HierarchyVersionRow:
    id: str
    hierarchy_id: str
    version_number: str
    effective_from: date
    effective_to: date
    status: int


@dataclass(frozen=True, slots=True, kw_only=True)
class HierarchyParticipantRow:
    id: str
    hierarchy_version_id: str
    entity_id: str
    entity_name: str | None
    entity_type: int
    level: int
    schedule_code: str | None
    schedule_id: int | None


@dataclass(frozen=True, slots=True, kw_only=True)
class StateRuleRow:
    id: str
    hierarchy_version_id: str
    short_name: str
    name: str
    description: str | None
    type: int
    sort_order: int


@dataclass(frozen=True, slots=True, kw_only=True)
class StateRuleStateRow:
    id: str
    state_rule_id: str
    state_code: str
    state_name: str


@dataclass(frozen=True, slots=True, kw_only=True)
class HierarchySplitRow:
    id: str
    state_rule_id: str
    product_id: str
    product_code: str
    product_name: str
    sort_order: int


@dataclass(frozen=True, slots=True, kw_only=True)
class SplitDistributionRow:
    id: str
    hierarchy_split_id: str
    hierarchy_participant_id: str
    participant_entity_id: int
    percentage: Decimal
    schedule_id: int | None
    schedule_name: str | None


@dataclass(frozen=True, slots=True, kw_only=True)
class PolicyHierarchyAssignmentRow:
    id: str
    policy_id: str
    hierarchy_id: str
    writing_broker_id: int
    split_sequence: int
    split_percent: Decimal
    non_conformant_reason: str
    entry_type: int


@dataclass(frozen=True, slots=True, kw_only=True)
class PolicyHierarchyParticipantRow:
    id: str
    assignment_id: str
    broker_id: str
    broker_name: str | None
    level: int
    schedule_code: str | None


@dataclass(frozen=True, slots=True, kw_only=True)
class CommissionAssignmentVersionRow:
    id: str
    broker_id: int
    broker_name: str | None
    proposal_id: str
    version_number: str
    effective_from: date
    effective_to: date
    status: int
    type: int
    change_description: str
    total_assigned_percent: Decimal


@dataclass(frozen=True, slots=True, kw_only=True)
class CommissionAssignmentRecipientRow:
    id: str
    version_id: str
    recipient_broker_id: int
    recipient_name: str | None
    percentage: Decimal
    notes: str | None


type StagingRow = (
    ProposalRow
    | ProposalProductRow
    | ProposalKeyMappingRow
    | PremiumSplitVersionRow
    | PremiumSplitParticipantRow
    | HierarchyRow
    | HierarchyVersionRow
    | HierarchyParticipantRow
    | StateRuleRow
    | StateRuleStateRow
    | HierarchySplitRow
    | SplitDistributionRow
    | PolicyHierarchyAssignmentRow
    | PolicyHierarchyParticipantRow
    | CommissionAssignmentVersionRow
    | CommissionAssignmentRecipientRow
)


@dataclass(slots=True)
class StagingOutput:
    """Complete output of one batch, one list per record set."""

    proposals: list[ProposalRow] = field(default_factory=list[ProposalRow])
    proposal_products: list[ProposalProductRow] = field(default_factory=list[ProposalProductRow])
    proposal_key_mappings: list[ProposalKeyMappingRow] = field(
        default_factory=list[ProposalKeyMappingRow]
    )
    premium_split_versions: list[PremiumSplitVersionRow] = field(
        default_factory=list[PremiumSplitVersionRow]
    )
    premium_split_participants: list[PremiumSplitParticipantRow] = field(
        default_factory=list[PremiumSplitParticipantRow]
    )
    hierarchies: list[HierarchyRow] = field(default_factory=list[HierarchyRow])
    hierarchy_versions: list[HierarchyVersionRow] = field(default_factory=list[HierarchyVersionRow])
    hierarchy_participants: list[HierarchyParticipantRow] = field(
        default_factory=list[HierarchyParticipantRow]
    )
    state_rules: list[StateRuleRow] = field(default_factory=list[StateRuleRow])
    state_rule_states: list[StateRuleStateRow] = field(default_factory=list[StateRuleStateRow])
    hierarchy_splits: list[HierarchySplitRow] = field(default_factory=list[HierarchySplitRow])
    split_distributions: list[SplitDistributionRow] = field(
        default_factory=list[SplitDistributionRow]
    )
    policy_hierarchy_assignments: list[PolicyHierarchyAssignmentRow] = field(
        default_factory=list[PolicyHierarchyAssignmentRow]
    )
    policy_hierarchy_participants: list[PolicyHierarchyParticipantRow] = field(
        default_factory=list[PolicyHierarchyParticipantRow]
    )
    commission_assignment_versions: list[CommissionAssignmentVersionRow] = field(
        default_factory=list[CommissionAssignmentVersionRow]
    )
    commission_assignment_recipients: list[CommissionAssignmentRecipientRow] = field(
        default_factory=list[CommissionAssignmentRecipientRow]
    )

    def record_sets(self) -> dict[str, list[StagingRow]]:
        """Return every record set keyed by name, parents before children."""

        return {item.name: list(getattr(self, item.name)) for item in fields(self)}

    def counts(self) -> dict[str, int]:
        return {name: len(rows) for name, rows in self.record_sets().items()}


def row_values(row: StagingRow) -> dict[str, object]:
    return asdict(row)


ROW_TYPES_BY_RECORD_SET: Final[dict[str, type[StagingRow]]] = {
    "proposals": ProposalRow,
    "proposal_products": ProposalProductRow,
    "proposal_key_mappings": ProposalKeyMappingRow,
    "premium_split_versions": PremiumSplitVersionRow,
    "premium_split_participants": PremiumSplitParticipantRow,
    "hierarchies": HierarchyRow,
    "hierarchy_versions": HierarchyVersionRow,
    "hierarchy_participants": HierarchyParticipantRow,
    "state_rules": StateRuleRow,
    "state_rule_states": StateRuleStateRow,
    "hierarchy_splits": HierarchySplitRow,
    "split_distributions": SplitDistributionRow,
    "policy_hierarchy_assignments": PolicyHierarchyAssignmentRow,
    "policy_hierarchy_participants": PolicyHierarchyParticipantRow,
    "commission_assignment_versions": CommissionAssignmentVersionRow,
    "commission_assignment_recipients": CommissionAssignmentRecipientRow,
}
