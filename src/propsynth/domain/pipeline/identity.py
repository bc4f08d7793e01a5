"""Content-addressed identity for hierarchy chains and split configurations.

Digests are full-width SHA-256 values in upper-case hex computed over a canonical
JSON serialization. A registry remembers which canonical input produced each
digest so that two different inputs landing on the same digest surface as a
:class:`HashCollision` instead of silently merging unrelated hierarchies.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING, Literal

from .errors import UnknownHierarchyError

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from propsynth.domain.model import Digest, HierarchyTier

type DigestKind = Literal["hierarchy", "configuration"]


def sha256_hex(data: bytes) -> Digest:
    return hashlib.sha256(data).hexdigest().upper()


def canonical_json(payload: object) -> str:
    return json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def format_percent(value: Decimal) -> str:
    """Render a percentage without exponent or trailing zeros (``100.00`` -> ``100``)."""

    normalized = value.normalize()
    if normalized == normalized.to_integral():
        normalized = normalized.quantize(Decimal(1))
    return format(normalized, "f")


def hierarchy_payload(
    *, group_id: str, split_percent: Decimal, tiers: Iterable[HierarchyTier]
) -> dict[str, object]:
    # the reassignment target tracks payment routing and stays out of the identity
    return {
        "groupId": group_id,
        "splitPercent": format_percent(split_percent),
        "tiers": [
            {
                "level": tier.level,
                "brokerId": tier.broker_id,
                "schedule": tier.schedule_code or "",
            }
            for tier in tiers
        ],
    }


def configuration_payload(entries: Iterable[tuple[Decimal, Digest]]) -> list[dict[str, str]]:
    return [
        {"pct": format_percent(percent), "hierarchyHash": digest}
        for percent, digest in sorted(entries, key=lambda item: (item[1], item[0]))
    ]


@dataclass(frozen=True, slots=True)
class HashAccepted:
    digest: Digest
    kind: DigestKind
    status: Literal["accepted"] = "accepted"


@dataclass(frozen=True, slots=True)
class HashCollision:
    digest: Digest
    kind: DigestKind
    existing: str
    incoming: str
    status: Literal["collision"] = "collision"


type HashOutcome = HashAccepted | HashCollision


class HashRegistry:
    """Digest registry that detects collisions between distinct inputs."""

    def __init__(self, *, digest: Callable[[bytes], Digest] = sha256_hex) -> None:
        self._digest = digest
        self._inputs: dict[Digest, str] = {}
        self._kinds: dict[Digest, DigestKind] = {}

    def __len__(self) -> int:
        return len(self._inputs)

    def __contains__(self, digest: object) -> bool:
        return digest in self._inputs

    def register(self, payload: object, *, kind: DigestKind) -> HashOutcome:
        canonical = canonical_json(payload)
        digest = self._digest(canonical.encode("utf-8"))
        existing = self._inputs.get(digest)
        if existing is None:
            self._inputs[digest] = canonical
            self._kinds[digest] = kind
            return HashAccepted(digest=digest, kind=kind)
        if existing != canonical:
            return HashCollision(digest=digest, kind=kind, existing=existing, incoming=canonical)
        return HashAccepted(digest=digest, kind=kind)

    def canonical_input(self, digest: Digest) -> str:
        try:
            return self._inputs[digest]
        except KeyError:
            raise UnknownHierarchyError(digest) from None

    def require_hierarchy(self, digest: Digest) -> None:
        self.canonical_input(digest)
        if self._kinds[digest] != "hierarchy":
            raise UnknownHierarchyError(digest)
