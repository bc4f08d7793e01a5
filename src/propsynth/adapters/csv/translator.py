"""Translate validated CSV rows into domain records."""

from __future__ import annotations

from typing import TYPE_CHECKING

from propsynth.domain.model import CertificateSplitRecord

if TYPE_CHECKING:
    from .schema import CertificateRow


def translate_certificate_row(row: CertificateRow) -> CertificateSplitRecord:
    return CertificateSplitRecord(
        certificate_id=row.certificate_id,
        group_id=row.group_id,
        group_name=row.group_name,
        effective_date=row.effective_date,
        product_code=row.product_code,
        plan_code=row.plan_code,
        cert_status=row.cert_status,
        situs_state=row.situs_state,
        premium=row.premium,
        split_seq=row.split_seq,
        split_percent=row.split_percent,
        tier_level=row.tier_level,
        broker_id=row.broker_id,
        broker_name=row.broker_name,
        broker_npn=row.broker_npn,
        schedule_code=row.schedule_code,
        paid_broker_id=row.paid_broker_id,
        paid_broker_name=row.paid_broker_name,
    )
