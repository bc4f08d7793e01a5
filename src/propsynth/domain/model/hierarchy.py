"""Payout hierarchy value objects: tiers, split participants and configurations."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .primitives import BrokerId, Digest


class InvalidTierChainError(ValueError):
    """Raised when a split's tier levels are not strictly increasing from 1."""

    def __init__(self, *, split_seq: int, levels: tuple[int, ...]) -> None:
        self.split_seq = split_seq
        self.levels = levels
        super().__init__(
            f"Split {split_seq} has tier levels {list(levels)}; expected a strictly "
            "increasing chain starting at 1"
        )


@dataclass(frozen=True, slots=True, kw_only=True)
class HierarchyTier:
    level: int
    broker_id: BrokerId
    broker_name: str | None = None
    broker_npn: str | None = None
    schedule_code: str | None = None
    # payment routing only, never part of the hierarchy identity
    paid_broker_id: BrokerId | None = None
    paid_broker_name: str | None = None


def check_tier_chain(split_seq: int, tiers: Sequence[HierarchyTier]) -> None:
    levels = tuple(tier.level for tier in tiers)
    if not levels or levels[0] != 1:
        raise InvalidTierChainError(split_seq=split_seq, levels=levels)
    if any(later <= earlier for earlier, later in zip(levels, levels[1:], strict=False)):
        raise InvalidTierChainError(split_seq=split_seq, levels=levels)


@dataclass(frozen=True, slots=True, kw_only=True)
class SplitParticipant:
    """One split sequence's writing broker with its ordered tier chain."""

    split_seq: int
    split_percent: Decimal
    tiers: tuple[HierarchyTier, ...]
    hierarchy_hash: Digest

    def __post_init__(self) -> None:
        check_tier_chain(self.split_seq, self.tiers)

    @property
    def writing_broker(self) -> HierarchyTier:
        return self.tiers[0]


@dataclass(frozen=True, slots=True, kw_only=True)
class SplitConfiguration:
    participants: tuple[SplitParticipant, ...]
    config_hash: Digest

    @property
    def total_percent(self) -> Decimal:
        return sum((p.split_percent for p in self.participants), Decimal(0))

    @property
    def is_conformant(self) -> bool:
        return self.total_percent == Decimal(100)

    @property
    def primary(self) -> SplitParticipant:
        return min(self.participants, key=lambda participant: participant.split_seq)
