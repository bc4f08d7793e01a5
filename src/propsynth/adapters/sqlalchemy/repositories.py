"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import delete, func, insert, select

from propsynth.adapters.sqlalchemy.mappings import TABLES_BY_RECORD_SET
from propsynth.domain.staging import ROW_TYPES_BY_RECORD_SET, row_values

if TYPE_CHECKING:
    from sqlalchemy import Table
    from sqlalchemy.orm import Session

    from propsynth.domain.staging import StagingOutput, StagingRow

log = logging.getLogger(__name__)


def _table(record_set: str) -> Table:
    try:
        return TABLES_BY_RECORD_SET[record_set]
    except KeyError:
        raise ValueError(f"Unknown staging record set: {record_set}") from None


class SqlAlchemyStagingRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add_all(self, output: StagingOutput) -> dict[str, int]:
        """Insert every record set of ``output``; returns rows written per set."""

        record_sets = output.record_sets()
        written: dict[str, int] = {}
        for name, table in TABLES_BY_RECORD_SET.items():
            rows = record_sets.get(name, [])
            if rows:
                self.session.execute(insert(table), [row_values(row) for row in rows])
            written[name] = len(rows)
        log.debug("Staged rows: %s", written)
        return written

    def clear(self) -> None:
        for table in reversed(list(TABLES_BY_RECORD_SET.values())):
            self.session.execute(delete(table))

    def count(self, record_set: str) -> int:
        table = _table(record_set)
        stmt = select(func.count()).select_from(table)
        return int(self.session.execute(stmt).scalar_one())

    def rows(self, record_set: str) -> list[StagingRow]:
        table = _table(record_set)
        row_type = ROW_TYPES_BY_RECORD_SET[record_set]
        result = self.session.execute(select(table))
        return [row_type(**dict(mapping)) for mapping in result.mappings()]
