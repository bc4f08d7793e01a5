from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine  # noqa: TC002

from propsynth.adapters.sqlalchemy import create_schema
from propsynth.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyStagingUnitOfWork,
    shutdown,
    startup,
)
from propsynth.domain.pipeline import BuildContext

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator


_ENTROPY_VARS = (
    "PROPSYNTH_ENTROPY_ENABLED",
    "PROPSYNTH_ENTROPY_UNIQUE_RATIO",
    "PROPSYNTH_ENTROPY_SHANNON",
    "PROPSYNTH_ENTROPY_DOMINANT_COVERAGE",
    "PROPSYNTH_ENTROPY_MIN_CLUSTER_SIZE",
)


@pytest.fixture(autouse=True)
def _clear_entropy_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENTROPY_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def build_context() -> BuildContext:
    return BuildContext()


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    create_schema(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def staging_unit_of_work(
    sqlite_engine: Engine,
) -> Iterator[Callable[[], SqlAlchemyStagingUnitOfWork]]:
    startup(engine=sqlite_engine, force=True)

    def factory() -> SqlAlchemyStagingUnitOfWork:
        return SqlAlchemyStagingUnitOfWork()

    try:
        yield factory
    finally:
        shutdown()
