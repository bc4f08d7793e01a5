"""Application orchestration entry points."""

from __future__ import annotations

import json
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from propsynth.adapters.sqlalchemy.unit_of_work import SqlAlchemyStagingUnitOfWork, startup
from propsynth.config import get_entropy_thresholds
from propsynth.domain.model import normalize_group_id
from propsynth.domain.pipeline import BuildContext, GroupFilter, build_proposals
from propsynth.domain.ports.unit_of_work import StagingUnitOfWork
from propsynth.domain.staging import generate_staging, publish_staging

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from propsynth.config import EntropyThresholds
    from propsynth.domain.model import CertificateSplitRecord
    from propsynth.domain.pipeline import BuildState, BuildStats
    from propsynth.domain.ports import CertificateSource, GroupListSource, ScheduleSource
    from propsynth.domain.staging import StagingOutput

UnitOfWorkFactory = Callable[[], StagingUnitOfWork]

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class BuildReport:
    stats: BuildStats
    counts: dict[str, int]
    written: dict[str, int] | None = None


def synthesize_staging(
    records: Sequence[CertificateSplitRecord],
    *,
    context: BuildContext,
    schedule_ids: Mapping[str, int] | None = None,
) -> tuple[BuildState, StagingOutput]:
    """Run the in-memory build and map it onto staging records."""

    state = build_proposals(records, context=context)
    output = generate_staging(state, context=context, schedule_ids=schedule_ids)
    return state, output


def build_staging(
    *,
    certificates: CertificateSource,
    schedules: ScheduleSource | None = None,
    excluded_groups: GroupListSource | None = None,
    groups: Iterable[str] | None = None,
    thresholds: EntropyThresholds | None = None,
    entropy_from_env: bool = True,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    database_uri: str | None = None,
    dry_run: bool = False,
    replace: bool = True,
) -> BuildReport:
    """Load inputs, synthesize proposals and write the staging record sets."""

    group_filter = GroupFilter(
        include=frozenset(normalize_group_id(g) for g in groups) if groups else None,
        exclude=excluded_groups.load() if excluded_groups is not None else frozenset(),
    )
    if thresholds is None and entropy_from_env:
        thresholds = get_entropy_thresholds()
    context = BuildContext(thresholds=thresholds, group_filter=group_filter)
    log.info(
        "Starting proposal build: entropy_routing=%s, groups=%s, excluded_groups=%d, dry_run=%s",
        context.thresholds is not None,
        len(group_filter.include) if group_filter.include is not None else "all",
        len(group_filter.exclude),
        dry_run,
    )

    records = certificates.load()
    schedule_ids = schedules.load() if schedules is not None else {}
    _, output = synthesize_staging(records, context=context, schedule_ids=schedule_ids)

    written: dict[str, int] | None = None
    if not dry_run:
        if unit_of_work_factory is None:
            startup(database_uri=database_uri, force=True)
        written = publish_staging(
            output,
            unit_of_work_factory=unit_of_work_factory or SqlAlchemyStagingUnitOfWork,
            replace=replace,
        )

    stats = context.stats
    log.info("Build summary: %s", json.dumps(stats.as_dict(), sort_keys=True))
    if stats.quarantine_total or stats.warnings:
        log.warning(
            "Operator review: %d quarantine records, %d warnings",
            stats.quarantine_total,
            len(stats.warnings),
        )
    return BuildReport(stats=stats, counts=output.counts(), written=written)
