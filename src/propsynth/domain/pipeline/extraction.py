"""Selection criteria extraction: one SelectionCriteria per certificate."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from propsynth.domain.model import (
    BrokerAssignment,
    HierarchyTier,
    InvalidTierChainError,
    SelectionCriteria,
    SplitConfiguration,
    SplitParticipant,
    check_tier_chain,
    is_blank,
    normalize_group_id,
)

from .errors import HashCollisionError
from .identity import HashCollision, configuration_payload, hierarchy_payload
from .orchestrator import PipelinePhase

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from decimal import Decimal

    from propsynth.domain.model import BrokerId, CertificateSplitRecord

    from .context import BuildContext, BuildState, GroupFilter
    from .identity import HashRegistry

log = logging.getLogger(__name__)


@dataclass(slots=True)
class ExtractionResult:
    criteria: list[SelectionCriteria] = field(default_factory=list[SelectionCriteria])
    broker_assignments: dict[BrokerId, BrokerAssignment] = field(
        default_factory=dict[str, BrokerAssignment]
    )
    certificates: int = 0
    excluded_records: int = 0
    mixed_certificates: list[str] = field(default_factory=list[str])
    invalid_tier_chains: list[tuple[str, InvalidTierChainError]] = field(
        default_factory=list[tuple[str, InvalidTierChainError]]
    )
    conflicting_groups: list[tuple[str, tuple[str, ...]]] = field(
        default_factory=list[tuple[str, tuple[str, ...]]]
    )
    collision: HashCollision | None = None


def ordered_records(records: Iterable[CertificateSplitRecord]) -> list[CertificateSplitRecord]:
    """Sort records into the processing order every output id depends on."""

    return sorted(records, key=lambda record: record.sort_key)


def group_by_certificate(
    records: Sequence[CertificateSplitRecord],
) -> dict[str, list[CertificateSplitRecord]]:
    grouped: dict[str, list[CertificateSplitRecord]] = {}
    for record in records:
        grouped.setdefault(record.certificate_id, []).append(record)
    return grouped


def split_conflicting_groups(
    rows: Sequence[CertificateSplitRecord],
) -> tuple[list[CertificateSplitRecord], tuple[str, ...]]:
    """Keep the rows filed under the certificate's first group id.

    Returns the kept rows and the other (normalized) group ids the certificate
    also appeared under.
    """

    group_id = normalize_group_id(rows[0].group_id)
    kept: list[CertificateSplitRecord] = []
    others: set[str] = set()
    for row in rows:
        row_group = normalize_group_id(row.group_id)
        if row_group == group_id:
            kept.append(row)
        else:
            others.add(row_group)
    return kept, tuple(sorted(others))


def _tiers(rows: Sequence[CertificateSplitRecord]) -> tuple[HierarchyTier, ...]:
    by_level: dict[int, HierarchyTier] = {}
    for row in sorted(rows, key=lambda item: item.tier_level):
        # repeated rows for the same tier collapse onto the first one
        by_level.setdefault(
            row.tier_level,
            HierarchyTier(
                level=row.tier_level,
                broker_id=row.broker_id,
                broker_name=row.broker_name,
                broker_npn=row.broker_npn,
                schedule_code=row.schedule_code.strip() if row.schedule_code else None,
                paid_broker_id=row.paid_broker_id,
                paid_broker_name=row.paid_broker_name,
            ),
        )
    return tuple(by_level.values())


def _build_configuration(
    group_id: str,
    rows: Sequence[CertificateSplitRecord],
    registry: HashRegistry,
) -> SplitConfiguration | HashCollision:
    by_split: dict[int, list[CertificateSplitRecord]] = {}
    for row in rows:
        by_split.setdefault(row.split_seq, []).append(row)

    # every chain is checked before any hash reaches the registry
    chains: list[tuple[int, Decimal, tuple[HierarchyTier, ...]]] = []
    for split_seq in sorted(by_split):
        split_rows = by_split[split_seq]
        tiers = _tiers(split_rows)
        check_tier_chain(split_seq, tiers)
        chains.append((split_seq, split_rows[0].split_percent, tiers))

    participants: list[SplitParticipant] = []
    for split_seq, split_percent, tiers in chains:
        outcome = registry.register(
            hierarchy_payload(group_id=group_id, split_percent=split_percent, tiers=tiers),
            kind="hierarchy",
        )
        if isinstance(outcome, HashCollision):
            return outcome
        participants.append(
            SplitParticipant(
                split_seq=split_seq,
                split_percent=split_percent,
                tiers=tiers,
                hierarchy_hash=outcome.digest,
            )
        )

    config_outcome = registry.register(
        configuration_payload((p.split_percent, p.hierarchy_hash) for p in participants),
        kind="configuration",
    )
    if isinstance(config_outcome, HashCollision):
        return config_outcome
    return SplitConfiguration(participants=tuple(participants), config_hash=config_outcome.digest)


def _collect_assignments(
    rows: Sequence[CertificateSplitRecord],
    assignments: dict[BrokerId, BrokerAssignment],
) -> None:
    for row in rows:
        if is_blank(row.paid_broker_id) or is_blank(row.broker_id):
            continue
        if row.paid_broker_id == row.broker_id:
            continue
        candidate = BrokerAssignment(
            source_broker_id=row.broker_id,
            source_broker_name=row.broker_name,
            target_broker_id=row.paid_broker_id or "",
            target_broker_name=row.paid_broker_name,
            effective_date=row.effective_date,
            certificate_id=row.certificate_id,
        )
        current = assignments.get(row.broker_id)
        if current is None or candidate.supersedes(current):
            assignments[row.broker_id] = candidate


def extract_selection_criteria(
    records: Iterable[CertificateSplitRecord],
    *,
    registry: HashRegistry,
    group_filter: GroupFilter | None = None,
) -> ExtractionResult:
    """Group records by certificate and build each certificate's split configuration.

    Records are re-sorted by (certificate id, group id, split sequence, tier level)
    first. A certificate filed under several group ids keeps only the rows of its
    first group, and a certificate with a broken tier chain is left out. Both are
    reported on the result. Extraction stops at the first hash collision.
    """

    result = ExtractionResult()
    admitted: list[CertificateSplitRecord] = []
    for record in ordered_records(records):
        if group_filter is not None and not group_filter.admits(
            normalize_group_id(record.group_id)
        ):
            result.excluded_records += 1
            continue
        admitted.append(record)

    for certificate_id, certificate_rows in group_by_certificate(admitted).items():
        result.certificates += 1
        rows, other_groups = split_conflicting_groups(certificate_rows)
        if other_groups:
            result.conflicting_groups.append((certificate_id, other_groups))
        group_id = normalize_group_id(rows[0].group_id)
        try:
            configuration = _build_configuration(group_id, rows, registry)
        except InvalidTierChainError as exc:
            result.invalid_tier_chains.append((certificate_id, exc))
            continue
        if isinstance(configuration, HashCollision):
            result.collision = configuration
            return result

        first = rows[0]
        if any(row.product_code != first.product_code for row in rows):
            result.mixed_certificates.append(certificate_id)
        _collect_assignments(rows, result.broker_assignments)
        result.criteria.append(
            SelectionCriteria(
                certificate_id=certificate_id,
                group_id=group_id,
                group_name=first.group_name,
                product_code=first.product_code,
                plan_code=first.plan_code,
                effective_date=first.effective_date,
                situs_state=first.situs_state,
                configuration=configuration,
            )
        )
    return result


class SelectionCriteriaPhase(PipelinePhase):
    """Builds one selection criteria per certificate and registers its hashes."""

    name: str = "selection-criteria"

    def run(self, state: BuildState, *, context: BuildContext) -> None:
        result = extract_selection_criteria(
            state.records,
            registry=context.registry,
            group_filter=context.group_filter,
        )
        if result.collision is not None:
            raise HashCollisionError(result.collision)

        for certificate_id in result.mixed_certificates:
            context.warn("Certificate %s spans several products; using its first row", certificate_id)
        for certificate_id, other_groups in result.conflicting_groups:
            context.warn(
                "Certificate %s also appears under groups %s; keeping its first group",
                certificate_id,
                ", ".join(other_groups),
            )
        for certificate_id, error in result.invalid_tier_chains:
            context.warn("Certificate %s skipped: %s", certificate_id, error)
        state.criteria = result.criteria
        state.broker_assignments = result.broker_assignments

        stats = context.stats
        stats.records = len(state.records)
        stats.excluded_records = result.excluded_records
        stats.certificates = result.certificates
        stats.invalid_tier_chains = len(result.invalid_tier_chains)
        stats.conflicting_groups = len(result.conflicting_groups)
        stats.selection_criteria = len(result.criteria)
        stats.broker_assignments = len(result.broker_assignments)
        stats.hash_entries = len(context.registry)
        log.info(
            "Extracted %d selection criteria from %d certificates (%d records excluded)",
            len(result.criteria),
            result.certificates,
            result.excluded_records,
        )
