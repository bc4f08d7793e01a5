"""SQLAlchemy persistence adapter for staging output."""

from __future__ import annotations

from propsynth.adapters.sqlalchemy.mappings import TABLES_BY_RECORD_SET, create_schema, metadata
from propsynth.adapters.sqlalchemy.repositories import SqlAlchemyStagingRepository

__all__ = [
    "TABLES_BY_RECORD_SET",
    "SqlAlchemyStagingRepository",
    "create_schema",
    "metadata",
]
