"""Immutable certificate split input records."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import date
    from decimal import Decimal

    from .primitives import BrokerId, CertificateId, GroupId, PlanCode, ProductCode, StateCode


@dataclass(frozen=True, slots=True, kw_only=True)
class CertificateSplitRecord:
    """One row per (certificate, split sequence, tier)."""

    certificate_id: CertificateId
    group_id: GroupId
    effective_date: date
    product_code: ProductCode
    plan_code: PlanCode
    split_seq: int
    split_percent: Decimal
    tier_level: int
    broker_id: BrokerId
    group_name: str | None = None
    cert_status: str | None = None
    situs_state: StateCode | None = None
    premium: Decimal | None = None
    broker_name: str | None = None
    broker_npn: str | None = None
    schedule_code: str | None = None
    paid_broker_id: BrokerId | None = None
    paid_broker_name: str | None = None

    @property
    def sort_key(self) -> tuple[str, str, int, int]:
        return (self.certificate_id, self.group_id, self.split_seq, self.tier_level)
