"""Shared state threaded through the proposal build phases."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .identity import HashRegistry

if TYPE_CHECKING:
    from collections.abc import Sequence

    from propsynth.config import EntropyThresholds
    from propsynth.domain.model import (
        BrokerAssignment,
        BrokerId,
        CertificateSplitRecord,
        GroupId,
        Proposal,
        QuarantineReason,
        QuarantineRecord,
        SelectionCriteria,
    )

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class GroupFilter:
    """Optional allow-list and exclusion list of (normalized) group ids."""

    include: frozenset[GroupId] | None = None
    exclude: frozenset[GroupId] = frozenset()

    def admits(self, group_id: GroupId) -> bool:
        if group_id in self.exclude:
            return False
        return self.include is None or group_id in self.include


@dataclass(slots=True)
class BuildStats:
    certificates: int = 0
    records: int = 0
    excluded_records: int = 0
    invalid_tier_chains: int = 0
    conflicting_groups: int = 0
    selection_criteria: int = 0
    proposals: int = 0
    continuations: int = 0
    superseded: int = 0
    hierarchies: int = 0
    hash_entries: int = 0
    broker_assignments: int = 0
    quarantined: Counter[QuarantineReason] = field(default_factory=Counter["QuarantineReason"])
    unresolved_schedules: set[str] = field(default_factory=set[str])
    warnings: list[str] = field(default_factory=list[str])

    @property
    def quarantine_total(self) -> int:
        return sum(self.quarantined.values())

    def as_dict(self) -> dict[str, object]:
        return {
            "certificates": self.certificates,
            "records": self.records,
            "excluded_records": self.excluded_records,
            "invalid_tier_chains": self.invalid_tier_chains,
            "conflicting_groups": self.conflicting_groups,
            "selection_criteria": self.selection_criteria,
            "proposals": self.proposals,
            "continuations": self.continuations,
            "superseded": self.superseded,
            "hierarchies": self.hierarchies,
            "hash_entries": self.hash_entries,
            "broker_assignments": self.broker_assignments,
            "quarantined": {str(reason): count for reason, count in sorted(self.quarantined.items())},
            "unresolved_schedules": sorted(self.unresolved_schedules),
            "warnings": len(self.warnings),
        }


@dataclass(slots=True)
class BuildContext:
    """Configuration and counters shared across phases of one batch."""

    thresholds: EntropyThresholds | None = None
    group_filter: GroupFilter = field(default_factory=GroupFilter)
    registry: HashRegistry = field(default_factory=HashRegistry)
    stats: BuildStats = field(default_factory=BuildStats)

    def warn(self, message: str, *args: object) -> None:
        """Log a recoverable issue and keep it for the batch summary."""

        log.warning(message, *args)
        self.stats.warnings.append(message % args if args else message)


@dataclass(slots=True)
class BuildState:
    """Accumulator for one batch: each phase reads its input and fills its output."""

    records: Sequence[CertificateSplitRecord]
    criteria: list[SelectionCriteria] = field(default_factory=list["SelectionCriteria"])
    broker_assignments: dict[BrokerId, BrokerAssignment] = field(
        default_factory=dict[str, "BrokerAssignment"]
    )
    quarantine: list[QuarantineRecord] = field(default_factory=list["QuarantineRecord"])
    proposals: list[Proposal] = field(default_factory=list["Proposal"])
