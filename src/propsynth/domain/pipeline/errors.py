"""Fatal conditions that abort a proposal build."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from propsynth.domain.model import ProductPlan

    from .identity import HashCollision


class FatalBuildError(RuntimeError):
    """Base class for conditions that abort the whole batch."""


class HashCollisionError(FatalBuildError):
    """Two different canonical inputs produced the same digest."""

    def __init__(self, collision: HashCollision) -> None:
        self.collision = collision
        super().__init__(
            f"Hash collision on {collision.kind} digest {collision.digest}: "
            f"{collision.existing!r} != {collision.incoming!r}"
        )


class UnknownHierarchyError(FatalBuildError, KeyError):
    """A hierarchy hash was referenced without registered hierarchy data."""

    def __init__(self, digest: str) -> None:
        self.digest = digest
        super().__init__(f"No hierarchy registered for digest {digest}")

    def __str__(self) -> str:
        return self.args[0]


class CoverageError(FatalBuildError):
    """Reconciled proposal ranges overlap or leave a gap for a (product, plan) pair."""

    def __init__(self, *, group_id: str, pair: ProductPlan, detail: str) -> None:
        self.group_id = group_id
        self.pair = pair
        super().__init__(f"Coverage broken for {group_id} {pair[0]}/{pair[1]}: {detail}")
