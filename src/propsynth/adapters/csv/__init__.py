"""CSV input adapter."""

from __future__ import annotations

from .loader import CsvCertificateSource, CsvScheduleSource, InputValidationError, TextGroupListSource
from .schema import CertificateRow, ScheduleRow
from .translator import translate_certificate_row

__all__ = [
    "CertificateRow",
    "CsvCertificateSource",
    "CsvScheduleSource",
    "InputValidationError",
    "ScheduleRow",
    "TextGroupListSource",
    "translate_certificate_row",
]
