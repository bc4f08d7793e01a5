"""Pydantic models describing the CSV input files."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


def _strip(value: object) -> object:
    if isinstance(value, str):
        return value.strip()
    return value


class CsvBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)


class CertificateRow(CsvBaseModel):
    """One row of the certificate split export (``input_certificate_info`` layout)."""

    certificate_id: str = Field(alias="CertificateId", min_length=1)
    group_id: str = Field(default="", alias="GroupId")
    group_name: str | None = Field(default=None, alias="GroupName")
    effective_date: date = Field(alias="CertEffectiveDate")
    product_code: str = Field(default="", alias="Product")
    plan_code: str = Field(default="", alias="PlanCode")
    cert_status: str | None = Field(default=None, alias="CertStatus")
    rec_status: str | None = Field(default=None, alias="RecStatus")
    situs_state: str | None = Field(default=None, alias="CertIssuedState")
    premium: Decimal | None = Field(default=None, alias="CertPremium")
    split_seq: int = Field(alias="CertSplitSeq")
    split_percent: Decimal = Field(alias="CertSplitPercent")
    tier_level: int = Field(alias="SplitBrokerSeq")
    broker_id: str = Field(alias="SplitBrokerId", min_length=1)
    broker_name: str | None = Field(default=None, alias="SplitBrokerName")
    broker_npn: str | None = Field(default=None, alias="SplitBrokerNPN")
    schedule_code: str | None = Field(default=None, alias="CommissionsSchedule")
    paid_broker_id: str | None = Field(default=None, alias="PaidBrokerId")
    paid_broker_name: str | None = Field(default=None, alias="PaidBrokerName")

    _strip_required = field_validator(
        "certificate_id", "group_id", "product_code", "plan_code", "broker_id", mode="before"
    )(_strip)
    _normalize_optional = field_validator(
        "group_name",
        "cert_status",
        "rec_status",
        "situs_state",
        "premium",
        "broker_name",
        "broker_npn",
        "schedule_code",
        "paid_broker_id",
        "paid_broker_name",
        mode="before",
    )(_blank_to_none)

    @field_validator("plan_code", "group_id", mode="before")
    @classmethod
    def _none_to_empty(cls, value: object) -> object:
        return "" if value is None else value

    @field_validator("effective_date", mode="before")
    @classmethod
    def _parse_date(cls, value: object) -> object:
        if isinstance(value, str):
            stripped = value.strip()
            # exports carry either plain dates or ISO timestamps
            if "T" in stripped or " " in stripped:
                return datetime.fromisoformat(stripped.replace("Z", "+00:00")).date()
            return stripped
        return value

    @field_validator("situs_state", mode="after")
    @classmethod
    def _upper_state(cls, value: str | None) -> str | None:
        return value.upper() if value else value

    @property
    def is_active(self) -> bool:
        cert_active = self.cert_status is None or self.cert_status.upper() == "A"
        rec_active = self.rec_status is None or self.rec_status.upper() == "A"
        return cert_active and rec_active


class ScheduleRow(CsvBaseModel):
    schedule_id: int = Field(alias="ScheduleId")
    schedule_code: str | None = Field(default=None, alias="ScheduleCode")

    _normalize_code = field_validator("schedule_code", mode="before")(_blank_to_none)
