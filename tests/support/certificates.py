"""Factories for certificate split records used across the test-suite."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING

from propsynth.domain.model import CertificateSplitRecord

if TYPE_CHECKING:
    from collections.abc import Sequence

type SplitSpec = tuple[str, Sequence[str]]


def split_record(  # noqa: PLR0913
    *,
    certificate_id: str = "C1",
    group_id: str = "G1",
    effective_date: date = date(2024, 1, 1),
    product_code: str = "P1",
    plan_code: str = "PL1",
    split_seq: int = 1,
    split_percent: str = "100",
    tier_level: int = 1,
    broker_id: str = "P100",
    broker_name: str | None = "Broker One",
    schedule_code: str | None = "SCH1",
    situs_state: str | None = "TX",
    paid_broker_id: str | None = None,
    paid_broker_name: str | None = None,
) -> CertificateSplitRecord:
    return CertificateSplitRecord(
        certificate_id=certificate_id,
        group_id=group_id,
        group_name=f"Group {group_id}",
        effective_date=effective_date,
        product_code=product_code,
        plan_code=plan_code,
        cert_status="A",
        situs_state=situs_state,
        premium=Decimal("125.50"),
        split_seq=split_seq,
        split_percent=Decimal(split_percent),
        tier_level=tier_level,
        broker_id=broker_id,
        broker_name=broker_name,
        broker_npn=f"NPN{broker_id}",
        schedule_code=schedule_code,
        paid_broker_id=paid_broker_id,
        paid_broker_name=paid_broker_name,
    )


def certificate(
    certificate_id: str,
    *,
    group_id: str = "G1",
    effective_date: date = date(2024, 1, 1),
    product_code: str = "P1",
    plan_code: str = "PL1",
    splits: Sequence[SplitSpec] = (("100", ("P100",)),),
    situs_state: str | None = "TX",
    schedule_code: str | None = "SCH1",
) -> list[CertificateSplitRecord]:
    """Build every row of one certificate.

    ``splits`` lists ``(percent, brokers)`` per split sequence; brokers are ordered by
    tier level starting at 1.
    """

    rows: list[CertificateSplitRecord] = []
    for split_seq, (percent, brokers) in enumerate(splits, start=1):
        for tier_level, broker_id in enumerate(brokers, start=1):
            rows.append(
                split_record(
                    certificate_id=certificate_id,
                    group_id=group_id,
                    effective_date=effective_date,
                    product_code=product_code,
                    plan_code=plan_code,
                    split_seq=split_seq,
                    split_percent=percent,
                    tier_level=tier_level,
                    broker_id=broker_id,
                    broker_name=f"Broker {broker_id[1:]}",
                    schedule_code=schedule_code,
                    situs_state=situs_state,
                )
            )
    return rows


def records(*certificates: list[CertificateSplitRecord]) -> list[CertificateSplitRecord]:
    return [row for rows in certificates for row in rows]


def group_two_records() -> list[CertificateSplitRecord]:
    """Proposal A covers X and Y from 2024; proposal B covers X from 2025."""

    return records(
        certificate("A1", group_id="G2", product_code="X", plan_code="PL"),
        certificate("A2", group_id="G2", product_code="Y", plan_code="PL"),
        certificate(
            "B1",
            group_id="G2",
            product_code="X",
            plan_code="PL",
            effective_date=date(2025, 1, 1),
            splits=(("100", ("P200",)),),
        ),
    )
