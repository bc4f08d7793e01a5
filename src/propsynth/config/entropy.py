"""Thresholds for entropy-based anomaly routing."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from .env import env_flag, present_env_vars
from .errors import ConfigurationError, MissingConfigurationError

ENTROPY_ENABLED_VAR: Final[str] = "PROPSYNTH_ENTROPY_ENABLED"
UNIQUE_RATIO_VAR: Final[str] = "PROPSYNTH_ENTROPY_UNIQUE_RATIO"
SHANNON_VAR: Final[str] = "PROPSYNTH_ENTROPY_SHANNON"
DOMINANT_COVERAGE_VAR: Final[str] = "PROPSYNTH_ENTROPY_DOMINANT_COVERAGE"
MIN_CLUSTER_SIZE_VAR: Final[str] = "PROPSYNTH_ENTROPY_MIN_CLUSTER_SIZE"

_THRESHOLD_VARS: Final[tuple[str, ...]] = (
    UNIQUE_RATIO_VAR,
    SHANNON_VAR,
    DOMINANT_COVERAGE_VAR,
    MIN_CLUSTER_SIZE_VAR,
)


@dataclass(frozen=True, slots=True, kw_only=True)
class EntropyThresholds:
    """Operator-tunable limits for a group's configuration spread.

    A group is quarantined as a whole when ``unique_ratio`` or ``shannon_entropy`` is
    exceeded or its dominant cluster covers less than ``dominant_coverage``. Clusters
    smaller than ``min_cluster_size`` are quarantined individually otherwise.
    """

    unique_ratio: float
    shannon_entropy: float
    dominant_coverage: float
    min_cluster_size: int

    def __post_init__(self) -> None:
        if not 0 <= self.unique_ratio <= 1:
            raise ConfigurationError("unique_ratio must be within [0, 1]")
        if self.shannon_entropy < 0:
            raise ConfigurationError("shannon_entropy must be non-negative")
        if not 0 <= self.dominant_coverage <= 1:
            raise ConfigurationError("dominant_coverage must be within [0, 1]")
        if self.min_cluster_size < 1:
            raise ConfigurationError("min_cluster_size must be at least 1")


def _parse_float(name: str, value: str) -> float:
    try:
        return float(value)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid number for {name}: {value!r}") from exc


def _parse_int(name: str, value: str) -> int:
    try:
        return int(value)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid integer for {name}: {value!r}") from exc


def get_entropy_thresholds() -> EntropyThresholds | None:
    """Load entropy thresholds from the environment.

    Returns ``None`` when routing is disabled or none of the threshold variables are
    set. Setting only some of them is treated as a misconfiguration.
    """

    if not env_flag(ENTROPY_ENABLED_VAR, default=True):
        return None

    values = present_env_vars(_THRESHOLD_VARS)
    if not values:
        return None
    missing = [name for name in _THRESHOLD_VARS if name not in values]
    if missing:
        missing_list = ", ".join(sorted(missing))
        raise MissingConfigurationError(f"Missing configuration for: {missing_list}")

    return EntropyThresholds(
        unique_ratio=_parse_float(UNIQUE_RATIO_VAR, values[UNIQUE_RATIO_VAR]),
        shannon_entropy=_parse_float(SHANNON_VAR, values[SHANNON_VAR]),
        dominant_coverage=_parse_float(DOMINANT_COVERAGE_VAR, values[DOMINANT_COVERAGE_VAR]),
        min_cluster_size=_parse_int(MIN_CLUSTER_SIZE_VAR, values[MIN_CLUSTER_SIZE_VAR]),
    )
