"""Ports for loading batch inputs."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from propsynth.domain.model import CertificateSplitRecord, GroupId


@runtime_checkable
class CertificateSource(Protocol):
    """Supplies the complete set of active certificate split records for a batch."""

    def load(self) -> Sequence[CertificateSplitRecord]: ...


@runtime_checkable
class ScheduleSource(Protocol):
    """Supplies the schedule code to numeric schedule id lookup."""

    def load(self) -> Mapping[str, int]: ...


@runtime_checkable
class GroupListSource(Protocol):
    """Supplies a list of group ids (for example groups excluded from the batch)."""

    def load(self) -> frozenset[GroupId]: ...
