"""Repository ports for persisting staging output."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Sequence

    from propsynth.domain.staging import StagingOutput, StagingRow


class StagingRepository(Protocol):
    """Writes staging record sets and reads them back for verification."""

    def add_all(self, output: StagingOutput) -> dict[str, int]: ...

    def clear(self) -> None: ...

    def count(self, record_set: str) -> int: ...

    def rows(self, record_set: str) -> Sequence[StagingRow]: ...
