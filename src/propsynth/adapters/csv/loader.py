"""CSV-backed loaders for certificates, schedules and group lists."""

from __future__ import annotations

import csv
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from pydantic import ValidationError

from propsynth.domain.model import normalize_group_id

from .schema import CertificateRow, ScheduleRow
from .translator import translate_certificate_row

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

    from propsynth.domain.model import CertificateSplitRecord, GroupId

log = logging.getLogger(__name__)


class InputValidationError(ValueError):
    """Raised when a CSV row fails validation."""

    def __init__(self, *, path: Path, line: int, error: ValidationError) -> None:
        self.path = path
        self.line = line
        self.error = error
        super().__init__(f"{path}:{line}: {error}")


def _rows(path: Path) -> Iterator[tuple[int, dict[str, str]]]:
    with path.open(newline="", encoding="utf-8-sig") as handle:
        reader = csv.DictReader(handle)
        # line 1 is the header
        for line, row in enumerate(reader, start=2):
            yield line, row


@dataclass(frozen=True, slots=True)
class CsvCertificateSource:
    path: Path
    active_only: bool = True

    def load(self) -> list[CertificateSplitRecord]:
        records: list[CertificateSplitRecord] = []
        inactive = 0
        for line, raw in _rows(self.path):
            try:
                row = CertificateRow.model_validate(raw)
            except ValidationError as exc:
                raise InputValidationError(path=self.path, line=line, error=exc) from exc
            if self.active_only and not row.is_active:
                inactive += 1
                continue
            records.append(translate_certificate_row(row))
        log.info(
            "Loaded %d certificate split rows from %s (%d inactive skipped)",
            len(records),
            self.path,
            inactive,
        )
        return records


@dataclass(frozen=True, slots=True)
class CsvScheduleSource:
    path: Path

    def load(self) -> dict[str, int]:
        schedules: dict[str, int] = {}
        for line, raw in _rows(self.path):
            try:
                row = ScheduleRow.model_validate(raw)
            except ValidationError as exc:
                raise InputValidationError(path=self.path, line=line, error=exc) from exc
            if row.schedule_code:
                schedules[row.schedule_code] = row.schedule_id
        log.info("Loaded %d schedule mappings from %s", len(schedules), self.path)
        return schedules


@dataclass(frozen=True, slots=True)
class TextGroupListSource:
    """Group ids one per line; blank lines and ``#`` comments are ignored."""

    path: Path

    def load(self) -> frozenset[GroupId]:
        groups: set[GroupId] = set()
        with self.path.open(encoding="utf-8") as handle:
            for raw in handle:
                value = raw.split("#", 1)[0].strip()
                if value:
                    groups.add(normalize_group_id(value))
        log.info("Loaded %d group ids from %s", len(groups), self.path)
        return frozenset(groups)
