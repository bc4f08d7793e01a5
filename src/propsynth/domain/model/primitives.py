"""Domain primitives: scalar aliases, date sentinels and identifier helpers."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Final

type GroupId = str
type CertificateId = str
type BrokerId = str
type ProductCode = str
type PlanCode = str
type StateCode = str
type Digest = str
type ProductPlan = tuple[ProductCode, PlanCode]

OPEN_START: Final[date] = date(1901, 1, 1)
OPEN_END: Final[date] = date(2099, 1, 1)

_ONE_DAY: Final[timedelta] = timedelta(days=1)
_INVALID_GROUP = re.compile(r"^G?0*$", re.IGNORECASE)
_BROKER_PREFIX = re.compile(r"^[A-Za-z]+")


def day_before(value: date) -> date:
    return value - _ONE_DAY


def day_after(value: date) -> date:
    return value + _ONE_DAY


@dataclass(frozen=True, slots=True)
class DateRange:
    """Inclusive effective-date interval."""

    start: date
    end: date

    def overlaps(self, other: DateRange) -> bool:
        return self.start <= other.end and other.start <= self.end

    def adjoins(self, following: DateRange) -> bool:
        return day_after(self.end) == following.start

    def widen(self, value: date) -> DateRange:
        return DateRange(start=min(self.start, value), end=max(self.end, value))

    def years(self) -> range:
        return range(self.start.year, self.end.year + 1)


def is_invalid_group_id(group_id: str | None) -> bool:
    """Return whether ``group_id`` is empty, all zeros or ``G`` followed by zeros."""

    if group_id is None:
        return True
    stripped = group_id.strip()
    return not stripped or bool(_INVALID_GROUP.match(stripped))


def normalize_group_id(group_id: str) -> GroupId:
    """Return the canonical ``G``-prefixed form of ``group_id``."""

    stripped = group_id.strip()
    if stripped.upper().startswith("G"):
        return "G" + stripped[1:]
    return f"G{stripped}"


def broker_number(broker_id: str | None) -> int:
    """Convert an external broker id such as ``P12345`` to its numeric form.

    Returns 0 when nothing numeric remains after stripping the letter prefix.
    """

    if not broker_id:
        return 0
    digits = _BROKER_PREFIX.sub("", broker_id.strip())
    return int(digits) if digits.isdigit() else 0


def is_blank(value: str | None) -> bool:
    return value is None or not value.strip()
