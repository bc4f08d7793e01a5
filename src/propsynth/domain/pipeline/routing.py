"""Anomaly routing: conformance check followed by per-group entropy routing."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from propsynth.domain.model import QuarantineReason, is_invalid_group_id, quarantine_criteria

from .orchestrator import PipelinePhase

if TYPE_CHECKING:
    from collections.abc import Iterable

    from propsynth.config import EntropyThresholds
    from propsynth.domain.model import Digest, GroupId, QuarantineRecord, SelectionCriteria

    from .context import BuildContext, BuildState

log = logging.getLogger(__name__)


@dataclass(slots=True)
class RoutingResult:
    accepted: list[SelectionCriteria] = field(default_factory=list["SelectionCriteria"])
    quarantined: list[QuarantineRecord] = field(default_factory=list["QuarantineRecord"])

    def quarantine(self, criteria: SelectionCriteria, reason: QuarantineReason) -> None:
        self.quarantined.extend(quarantine_criteria(criteria, reason))


@dataclass(frozen=True, slots=True)
class GroupEntropy:
    """Spread of configuration hashes within one group."""

    total: int
    cluster_sizes: tuple[int, ...]

    @classmethod
    def from_clusters(cls, clusters: dict[Digest, list[SelectionCriteria]]) -> GroupEntropy:
        sizes = tuple(len(members) for members in clusters.values())
        return cls(total=sum(sizes), cluster_sizes=sizes)

    @property
    def unique_ratio(self) -> float:
        return len(self.cluster_sizes) / self.total

    @property
    def dominant_coverage(self) -> float:
        return max(self.cluster_sizes) / self.total

    @property
    def shannon(self) -> float:
        probabilities = (size / self.total for size in self.cluster_sizes)
        return -sum(p * math.log2(p) for p in probabilities)

    def is_high(self, thresholds: EntropyThresholds) -> bool:
        return (
            self.unique_ratio > thresholds.unique_ratio
            or self.shannon > thresholds.shannon_entropy
            or self.dominant_coverage < thresholds.dominant_coverage
        )


def _by_group(criteria: Iterable[SelectionCriteria]) -> dict[GroupId, list[SelectionCriteria]]:
    grouped: dict[GroupId, list[SelectionCriteria]] = {}
    for item in criteria:
        grouped.setdefault(item.group_id, []).append(item)
    return grouped


def _clusters(criteria: Iterable[SelectionCriteria]) -> dict[Digest, list[SelectionCriteria]]:
    clusters: dict[Digest, list[SelectionCriteria]] = {}
    for item in criteria:
        clusters.setdefault(item.configuration.config_hash, []).append(item)
    return clusters


def route_group(
    group_id: GroupId,
    criteria: list[SelectionCriteria],
    *,
    thresholds: EntropyThresholds | None,
    result: RoutingResult,
) -> None:
    if is_invalid_group_id(group_id):
        for item in criteria:
            result.quarantine(item, QuarantineReason.INVALID_GROUP)
        return

    if thresholds is None:
        result.accepted.extend(criteria)
        return

    clusters = _clusters(criteria)
    entropy = GroupEntropy.from_clusters(clusters)
    log.debug(
        "Entropy %s: unique=%d total=%d unique_ratio=%.3f shannon=%.3f dominant=%.3f",
        group_id,
        len(clusters),
        entropy.total,
        entropy.unique_ratio,
        entropy.shannon,
        entropy.dominant_coverage,
    )
    if entropy.is_high(thresholds):
        for item in criteria:
            result.quarantine(item, QuarantineReason.HIGH_ENTROPY)
        return

    for members in clusters.values():
        if len(members) < thresholds.min_cluster_size:
            for item in members:
                result.quarantine(item, QuarantineReason.HUMAN_ERROR_OUTLIER)
        else:
            result.accepted.extend(members)


def route_criteria(
    criteria: Iterable[SelectionCriteria], *, thresholds: EntropyThresholds | None
) -> RoutingResult:
    """Split criteria into accepted ones and quarantine records.

    Accepted criteria keep their incoming relative order.
    """

    result = RoutingResult()
    conformant: list[SelectionCriteria] = []
    for item in criteria:
        if item.configuration.is_conformant:
            conformant.append(item)
        else:
            result.quarantine(item, QuarantineReason.SPLIT_PERCENT_MISMATCH)

    for group_id, members in _by_group(conformant).items():
        route_group(group_id, members, thresholds=thresholds, result=result)

    order = {id(item): index for index, item in enumerate(conformant)}
    result.accepted.sort(key=lambda item: order[id(item)])
    return result


class AnomalyRoutingPhase(PipelinePhase):
    """Moves non-conformant and anomalous criteria into quarantine."""

    name: str = "anomaly-routing"

    def run(self, state: BuildState, *, context: BuildContext) -> None:
        total = len(state.criteria)
        result = route_criteria(state.criteria, thresholds=context.thresholds)
        state.criteria = result.accepted
        state.quarantine = result.quarantined
        for record in result.quarantined:
            context.stats.quarantined[record.reason] += 1
        log.info(
            "Routed %d criteria: %d accepted, %d quarantine records",
            total,
            len(result.accepted),
            len(result.quarantined),
        )
