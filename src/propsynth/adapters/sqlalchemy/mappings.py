"""SQLAlchemy table metadata for the staging record sets."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    ForeignKey,
    Integer,
    MetaData,
    Numeric,
    PrimaryKeyConstraint,
    String,
    Table,
)

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

metadata = MetaData(
    naming_convention={
        "ix": "ix_%(column_0_label)s",
        "uq": "uq_%(table_name)s_%(column_0_name)s",
        "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
        "pk": "pk_%(table_name)s",
    }
)

PercentType = Numeric(9, 4, asdecimal=True)

proposal_table = Table(
    "stg_proposals",
    metadata,
    Column("id", String, primary_key=True),
    Column("proposal_number", String, nullable=False),
    Column("status", Integer, nullable=False),
    Column("situs_state", String(2), nullable=True),
    Column("group_id", String, nullable=False, index=True),
    Column("group_name", String, nullable=True),
    Column("broker_id", Integer, nullable=False),
    Column("broker_name", String, nullable=True),
    Column("broker_unique_party_id", String, nullable=True),
    Column("product_codes", String, nullable=False),
    Column("plan_codes", String, nullable=False),
    Column("split_config_hash", String(64), nullable=False),
    Column("date_range_from", Integer, nullable=False),
    Column("date_range_to", Integer, nullable=False),
    Column("effective_date_from", Date, nullable=False),
    Column("effective_date_to", Date, nullable=False),
    Column("notes", String, nullable=True),
)

proposal_product_table = Table(
    "stg_proposal_products",
    metadata,
    Column("id", String, primary_key=True),
    Column("proposal_id", String, ForeignKey("stg_proposals.id"), nullable=False),
    Column("product_code", String, nullable=False),
    Column("product_name", String, nullable=False),
)

proposal_key_mapping_table = Table(
    "stg_proposal_key_mappings",
    metadata,
    Column("group_id", String, nullable=False),
    Column("effective_year", Integer, nullable=False),
    Column("product_code", String, nullable=False),
    Column("plan_code", String, nullable=False),
    Column("proposal_id", String, ForeignKey("stg_proposals.id"), nullable=False),
    Column("split_config_hash", String(64), nullable=False),
    PrimaryKeyConstraint("group_id", "effective_year", "product_code", "plan_code", "proposal_id"),
)

premium_split_version_table = Table(
    "stg_premium_split_versions",
    metadata,
    Column("id", String, primary_key=True),
    Column("group_id", String, nullable=False),
    Column("group_name", String, nullable=True),
    Column("proposal_id", String, ForeignKey("stg_proposals.id"), nullable=False),
    Column("version_number", String, nullable=False),
    Column("effective_from", Date, nullable=False),
    Column("effective_to", Date, nullable=False),
    Column("total_split_percent", PercentType, nullable=False),
    Column("status", Integer, nullable=False),
)

hierarchy_table = Table(
    "stg_hierarchies",
    metadata,
    Column("id", String, primary_key=True),
    Column("name", String, nullable=False),
    Column("group_id", String, nullable=False),
    Column("group_name", String, nullable=True),
    Column("broker_id", Integer, nullable=False),
    Column("broker_name", String, nullable=True),
    Column("proposal_id", String, ForeignKey("stg_proposals.id"), nullable=True),
    Column("current_version_id", String, nullable=False),
    Column("effective_date", Date, nullable=False),
    Column("situs_state", String(2), nullable=True),
    Column("status", Integer, nullable=False),
)

premium_split_participant_table = Table(
    "stg_premium_split_participants",
    metadata,
    Column("id", String, primary_key=True),
    Column(
        "version_id", String, ForeignKey("stg_premium_split_versions.id"), nullable=False
    ),
    Column("broker_id", Integer, nullable=False),
    Column("broker_name", String, nullable=True),
    Column("broker_npn", String, nullable=True),
    Column("broker_unique_party_id", String, nullable=False),
    Column("split_percent", PercentType, nullable=False),
    Column("is_writing_agent", Boolean, nullable=False),
    Column("hierarchy_id", String, ForeignKey("stg_hierarchies.id"), nullable=False),
    Column("sequence", Integer, nullable=False),
    Column("writing_broker_id", Integer, nullable=False),
    Column("group_id", String, nullable=False),
    Column("effective_from", Date, nullable=False),
    Column("effective_to", Date, nullable=False),
)

hierarchy_version_table = Table(
    "stg_hierarchy_versions",
    metadata,
    Column("id", String, primary_key=True),
    Column("hierarchy_id", String, ForeignKey("stg_hierarchies.id"), nullable=False),
    Column("version_number", String, nullable=False),
    Column("effective_from", Date, nullable=False),
    Column("effective_to", Date, nullable=False),
    Column("status", Integer, nullable=False),
)

hierarchy_participant_table = Table(
    "stg_hierarchy_participants",
    metadata,
    Column("id", String, primary_key=True),
    Column(
        "hierarchy_version_id", String, ForeignKey("stg_hierarchy_versions.id"), nullable=False
    ),
    Column("entity_id", String, nullable=False),
    Column("entity_name", String, nullable=True),
    Column("entity_type", Integer, nullable=False),
    Column("level", Integer, nullable=False),
    Column("schedule_code", String, nullable=True),
    Column("schedule_id", Integer, nullable=True),
)

state_rule_table = Table(
    "stg_state_rules",
    metadata,
    Column("id", String, primary_key=True),
    Column(
        "hierarchy_version_id", String, ForeignKey("stg_hierarchy_versions.id"), nullable=False
    ),
    Column("short_name", String, nullable=False),
    Column("name", String, nullable=False),
    Column("description", String, nullable=True),
    Column("type", Integer, nullable=False),
    Column("sort_order", Integer, nullable=False),
)

state_rule_state_table = Table(
    "stg_state_rule_states",
    metadata,
    Column("id", String, primary_key=True),
    Column("state_rule_id", String, ForeignKey("stg_state_rules.id"), nullable=False),
    Column("state_code", String(2), nullable=False),
    Column("state_name", String, nullable=False),
)

hierarchy_split_table = Table(
    "stg_hierarchy_splits",
    metadata,
    Column("id", String, primary_key=True),
    Column("state_rule_id", String, ForeignKey("stg_state_rules.id"), nullable=False),
    Column("product_id", String, nullable=False),
    Column("product_code", String, nullable=False),
    Column("product_name", String, nullable=False),
    Column("sort_order", Integer, nullable=False),
)

split_distribution_table = Table(
    "stg_split_distributions",
    metadata,
    Column("id", String, primary_key=True),
    Column(
        "hierarchy_split_id", String, ForeignKey("stg_hierarchy_splits.id"), nullable=False
    ),
    Column(
        "hierarchy_participant_id",
        String,
        ForeignKey("stg_hierarchy_participants.id"),
        nullable=False,
    ),
    Column("participant_entity_id", Integer, nullable=False),
    Column("percentage", PercentType, nullable=False),
    Column("schedule_id", Integer, nullable=True),
    Column("schedule_name", String, nullable=True),
)

policy_hierarchy_assignment_table = Table(
    "stg_policy_hierarchy_assignments",
    metadata,
    Column("id", String, primary_key=True),
    Column("policy_id", String, nullable=False, index=True),
    Column("hierarchy_id", String, ForeignKey("stg_hierarchies.id"), nullable=False),
    Column("writing_broker_id", Integer, nullable=False),
    Column("split_sequence", Integer, nullable=False),
    Column("split_percent", PercentType, nullable=False),
    Column("non_conformant_reason", String, nullable=False),
    Column("entry_type", Integer, nullable=False),
)

policy_hierarchy_participant_table = Table(
    "stg_policy_hierarchy_participants",
    metadata,
    Column("id", String, primary_key=True),
    Column(
        "assignment_id",
        String,
        ForeignKey("stg_policy_hierarchy_assignments.id"),
        nullable=False,
    ),
    Column("broker_id", String, nullable=False),
    Column("broker_name", String, nullable=True),
    Column("level", Integer, nullable=False),
    Column("schedule_code", String, nullable=True),
)

commission_assignment_version_table = Table(
    "stg_commission_assignment_versions",
    metadata,
    Column("id", String, primary_key=True),
    Column("broker_id", Integer, nullable=False),
    Column("broker_name", String, nullable=True),
    Column("proposal_id", String, nullable=False),
    Column("version_number", String, nullable=False),
    Column("effective_from", Date, nullable=False),
    Column("effective_to", Date, nullable=False),
    Column("status", Integer, nullable=False),
    Column("type", Integer, nullable=False),
    Column("change_description", String, nullable=False),
    Column("total_assigned_percent", PercentType, nullable=False),
)

commission_assignment_recipient_table = Table(
    "stg_commission_assignment_recipients",
    metadata,
    Column("id", String, primary_key=True),
    Column(
        "version_id",
        String,
        ForeignKey("stg_commission_assignment_versions.id"),
        nullable=False,
    ),
    Column("recipient_broker_id", Integer, nullable=False),
    Column("recipient_name", String, nullable=True),
    Column("percentage", PercentType, nullable=False),
    Column("notes", String, nullable=True),
)

# record set name -> table, in insert order (parents before children)
TABLES_BY_RECORD_SET: Final[dict[str, Table]] = {
    "proposals": proposal_table,
    "proposal_products": proposal_product_table,
    "proposal_key_mappings": proposal_key_mapping_table,
    "premium_split_versions": premium_split_version_table,
    "hierarchies": hierarchy_table,
    "premium_split_participants": premium_split_participant_table,
    "hierarchy_versions": hierarchy_version_table,
    "hierarchy_participants": hierarchy_participant_table,
    "state_rules": state_rule_table,
    "state_rule_states": state_rule_state_table,
    "hierarchy_splits": hierarchy_split_table,
    "split_distributions": split_distribution_table,
    "policy_hierarchy_assignments": policy_hierarchy_assignment_table,
    "policy_hierarchy_participants": policy_hierarchy_participant_table,
    "commission_assignment_versions": commission_assignment_version_table,
    "commission_assignment_recipients": commission_assignment_recipient_table,
}


def create_schema(engine: Engine) -> None:
    """Create any missing staging tables."""

    metadata.create_all(engine, checkfirst=True)
