"""Quarantine (PHA) records for certificates routed around aggregation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from .enums import QuarantineReason

if TYPE_CHECKING:
    from .criteria import SelectionCriteria
    from .hierarchy import SplitParticipant

ENTRY_TYPE_BY_REASON: Final[dict[QuarantineReason, int]] = {
    QuarantineReason.SPLIT_PERCENT_MISMATCH: 1,
    QuarantineReason.INVALID_GROUP: 2,
    QuarantineReason.HIGH_ENTROPY: 2,
    QuarantineReason.HUMAN_ERROR_OUTLIER: 1,
}


@dataclass(frozen=True, slots=True, kw_only=True)
class QuarantineRecord:
    """One quarantined (certificate, split) with its private hierarchy."""

    criteria: SelectionCriteria
    participant: SplitParticipant
    reason: QuarantineReason

    @property
    def id(self) -> str:
        return f"PHA-{self.criteria.certificate_id}-{self.participant.split_seq}"

    @property
    def hierarchy_id(self) -> str:
        return f"H-{self.id}"

    @property
    def entry_type(self) -> int:
        return ENTRY_TYPE_BY_REASON[self.reason]


def quarantine_criteria(
    criteria: SelectionCriteria, reason: QuarantineReason
) -> list[QuarantineRecord]:
    return [
        QuarantineRecord(criteria=criteria, participant=participant, reason=reason)
        for participant in sorted(
            criteria.configuration.participants, key=lambda item: item.split_seq
        )
    ]
