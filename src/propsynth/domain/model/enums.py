"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class QuarantineReason(StrEnum):
    SPLIT_PERCENT_MISMATCH = "NonConformant-CertificateSplitMismatch"
    INVALID_GROUP = "Invalid GroupId (null/empty/zeros)"
    HIGH_ENTROPY = "BusinessDrivenEntropy"
    HUMAN_ERROR_OUTLIER = "HumanErrorOutlier"


class ProposalStatus(StrEnum):
    ACTIVE = "active"
    SUPERSEDED = "superseded"


class ProposalKind(StrEnum):
    REGULAR = "regular"
    CONTINUATION = "continuation"
