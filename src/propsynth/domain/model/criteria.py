"""Per-certificate selection criteria and broker-level reassignments."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import date

    from .hierarchy import SplitConfiguration
    from .primitives import (
        BrokerId,
        CertificateId,
        GroupId,
        PlanCode,
        ProductCode,
        ProductPlan,
        StateCode,
    )


@dataclass(frozen=True, slots=True, kw_only=True)
class SelectionCriteria:
    """One certificate's grouping attributes and split configuration."""

    certificate_id: CertificateId
    group_id: GroupId
    group_name: str | None
    product_code: ProductCode
    plan_code: PlanCode
    effective_date: date
    situs_state: StateCode | None
    configuration: SplitConfiguration

    @property
    def product_plan(self) -> ProductPlan:
        return (self.product_code, self.plan_code)


@dataclass(frozen=True, slots=True, kw_only=True)
class BrokerAssignment:
    """Most recent payment reassignment observed for a source broker."""

    source_broker_id: BrokerId
    source_broker_name: str | None
    target_broker_id: BrokerId
    target_broker_name: str | None
    effective_date: date
    certificate_id: CertificateId

    def supersedes(self, other: BrokerAssignment) -> bool:
        return (self.effective_date, self.certificate_id) > (
            other.effective_date,
            other.certificate_id,
        )
