"""Hand a finished staging output to a persistence unit of work."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

    from propsynth.domain.ports.unit_of_work import StagingUnitOfWork

    from .records import StagingOutput

log = logging.getLogger(__name__)


def publish_staging(
    output: StagingOutput,
    *,
    unit_of_work_factory: Callable[[], StagingUnitOfWork],
    replace: bool = True,
) -> dict[str, int]:
    """Write ``output`` in one transaction; with ``replace`` existing rows go first."""

    with unit_of_work_factory() as uow:
        repository = uow.repositories.staging
        if replace:
            repository.clear()
        written = repository.add_all(output)
        uow.commit()
    log.info("Published %d staging rows", sum(written.values()))
    return written
