"""Ports connecting the domain to input loaders and persistence adapters."""

from __future__ import annotations

from .loading import CertificateSource, GroupListSource, ScheduleSource
from .persistence import StagingRepository
from .unit_of_work import RepositoryCollection, StagingRepositories, StagingUnitOfWork, UnitOfWork

__all__ = [
    "CertificateSource",
    "GroupListSource",
    "RepositoryCollection",
    "ScheduleSource",
    "StagingRepositories",
    "StagingRepository",
    "StagingUnitOfWork",
    "UnitOfWork",
]
