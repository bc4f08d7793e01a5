"""Staging output records and their generator."""

from __future__ import annotations

from .generator import ScheduleResolver, StagingGenerator, equal_share, generate_staging
from .publish import publish_staging
from .records import ROW_TYPES_BY_RECORD_SET, StagingOutput, StagingRow, row_values
from .states import state_name

__all__ = [
    "ROW_TYPES_BY_RECORD_SET",
    "ScheduleResolver",
    "StagingGenerator",
    "StagingOutput",
    "StagingRow",
    "equal_share",
    "generate_staging",
    "publish_staging",
    "row_values",
    "state_name",
]
