"""Exercise the SQLAlchemy staging repository and unit of work."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlalchemy.exc import IntegrityError

from propsynth.adapters.sqlalchemy import TABLES_BY_RECORD_SET
from propsynth.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyStagingUnitOfWork,
    StartupError,
    is_started,
    shutdown,
    startup,
)
from propsynth.domain.pipeline import BuildContext, build_proposals
from propsynth.domain.staging import ROW_TYPES_BY_RECORD_SET, generate_staging, publish_staging
from tests.support.certificates import certificate, group_two_records, records, split_record

if TYPE_CHECKING:
    from collections.abc import Callable

    from propsynth.domain.staging import StagingOutput


def _output() -> StagingOutput:
    context = BuildContext()
    rows = records(
        group_two_records(),
        certificate("Q1", splits=(("95", ("P100",)),)),
        [split_record(certificate_id="R1", group_id="G9", paid_broker_id="P500")],
    )
    state = build_proposals(rows, context=context)
    return generate_staging(state, context=context, schedule_ids={"SCH1": 7})


def test_record_sets_match_tables() -> None:
    assert list(TABLES_BY_RECORD_SET) == list(ROW_TYPES_BY_RECORD_SET)


def test_publish_round_trips_rows(
    staging_unit_of_work: Callable[[], SqlAlchemyStagingUnitOfWork],
) -> None:
    output = _output()

    written = publish_staging(output, unit_of_work_factory=staging_unit_of_work)

    assert written == output.counts()
    with staging_unit_of_work() as uow:
        repository = uow.repositories.staging
        assert repository.count("proposals") == 3
        assert sorted(row.id for row in repository.rows("proposals")) == sorted(
            row.id for row in output.proposals
        )
        stored = {row.id: row for row in repository.rows("hierarchy_participants")}
        for row in output.hierarchy_participants:
            assert stored[row.id] == row


def test_publish_replaces_previous_batch(
    staging_unit_of_work: Callable[[], SqlAlchemyStagingUnitOfWork],
) -> None:
    output = _output()

    publish_staging(output, unit_of_work_factory=staging_unit_of_work)
    publish_staging(output, unit_of_work_factory=staging_unit_of_work)

    with staging_unit_of_work() as uow:
        counts = {name: uow.repositories.staging.count(name) for name in TABLES_BY_RECORD_SET}
    assert counts == output.counts()


def test_failed_publish_rolls_back(
    staging_unit_of_work: Callable[[], SqlAlchemyStagingUnitOfWork],
) -> None:
    output = _output()
    publish_staging(output, unit_of_work_factory=staging_unit_of_work)

    # appending the same batch again violates primary keys
    with pytest.raises(IntegrityError, match="UNIQUE"):
        publish_staging(output, unit_of_work_factory=staging_unit_of_work, replace=False)

    with staging_unit_of_work() as uow:
        assert uow.repositories.staging.count("proposals") == len(output.proposals)


def test_unknown_record_set_is_rejected(
    staging_unit_of_work: Callable[[], SqlAlchemyStagingUnitOfWork],
) -> None:
    with staging_unit_of_work() as uow, pytest.raises(ValueError, match="Unknown"):
        uow.repositories.staging.count("nope")


def test_unit_of_work_requires_startup() -> None:
    shutdown()
    assert not is_started()

    with pytest.raises(StartupError):
        SqlAlchemyStagingUnitOfWork()


def test_startup_twice_requires_force(
    staging_unit_of_work: Callable[[], SqlAlchemyStagingUnitOfWork],
) -> None:
    assert is_started()

    with pytest.raises(StartupError, match="already initialised"):
        startup(database_uri="sqlite+pysqlite:///:memory:")


def test_repositories_unavailable_outside_context(
    staging_unit_of_work: Callable[[], SqlAlchemyStagingUnitOfWork],
) -> None:
    uow = staging_unit_of_work()

    with pytest.raises(StartupError):
        _ = uow.repositories
