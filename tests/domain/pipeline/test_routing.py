from __future__ import annotations

import pytest

from propsynth.config import EntropyThresholds
from propsynth.domain.model import QuarantineReason, SelectionCriteria
from propsynth.domain.pipeline import (
    AnomalyRoutingPhase,
    BuildContext,
    BuildState,
    GroupEntropy,
    HashRegistry,
    extract_selection_criteria,
    route_criteria,
)
from tests.support.certificates import certificate, records

_THRESHOLDS = EntropyThresholds(
    unique_ratio=0.5,
    shannon_entropy=5.0,
    dominant_coverage=0.5,
    min_cluster_size=2,
)


def _criteria(*certificates: list) -> list[SelectionCriteria]:
    return extract_selection_criteria(records(*certificates), registry=HashRegistry()).criteria


def test_split_percent_mismatch_quarantines_every_split() -> None:
    criteria = _criteria(
        certificate("C1", splits=(("60", ("P100",)), ("35", ("P200", "P900")))),
        certificate("C2"),
    )

    result = route_criteria(criteria, thresholds=None)

    assert [item.certificate_id for item in result.accepted] == ["C2"]
    assert [(q.id, q.reason) for q in result.quarantined] == [
        ("PHA-C1-1", QuarantineReason.SPLIT_PERCENT_MISMATCH),
        ("PHA-C1-2", QuarantineReason.SPLIT_PERCENT_MISMATCH),
    ]
    assert result.quarantined[0].entry_type == 1
    assert result.quarantined[1].hierarchy_id == "H-PHA-C1-2"


@pytest.mark.parametrize("group_id", ["0000", "G000", ""])
def test_invalid_group_is_quarantined_without_thresholds(group_id: str) -> None:
    criteria = _criteria(certificate("C1", group_id=group_id))

    result = route_criteria(criteria, thresholds=None)

    assert result.accepted == []
    assert [q.reason for q in result.quarantined] == [QuarantineReason.INVALID_GROUP]
    assert result.quarantined[0].entry_type == 2


def test_high_entropy_quarantines_whole_group() -> None:
    criteria = _criteria(
        certificate("C1", group_id="G1", splits=(("100", ("P100",)),)),
        certificate("C2", group_id="G1", splits=(("100", ("P200",)),)),
        certificate("C3", group_id="G1", splits=(("100", ("P300",)),)),
        certificate("C4", group_id="G2"),
        certificate("C5", group_id="G2"),
    )

    result = route_criteria(criteria, thresholds=_THRESHOLDS)

    assert [item.certificate_id for item in result.accepted] == ["C4", "C5"]
    assert {q.reason for q in result.quarantined} == {QuarantineReason.HIGH_ENTROPY}
    assert len(result.quarantined) == 3


def test_small_clusters_are_human_error_outliers() -> None:
    criteria = _criteria(
        certificate("C1"),
        certificate("C2"),
        certificate("C3", splits=(("100", ("P999",)),)),
        certificate("C4"),
        certificate("C5"),
    )

    result = route_criteria(criteria, thresholds=_THRESHOLDS)

    assert [item.certificate_id for item in result.accepted] == ["C1", "C2", "C4", "C5"]
    assert [(q.id, q.reason) for q in result.quarantined] == [
        ("PHA-C3-1", QuarantineReason.HUMAN_ERROR_OUTLIER),
    ]


def test_without_thresholds_every_conformant_certificate_is_accepted() -> None:
    criteria = _criteria(
        certificate("C1", splits=(("100", ("P100",)),)),
        certificate("C2", splits=(("100", ("P200",)),)),
    )

    result = route_criteria(criteria, thresholds=None)

    assert len(result.accepted) == 2
    assert result.quarantined == []


def test_group_entropy_metrics() -> None:
    entropy = GroupEntropy(total=4, cluster_sizes=(2, 2))

    assert entropy.unique_ratio == pytest.approx(0.5)
    assert entropy.dominant_coverage == pytest.approx(0.5)
    assert entropy.shannon == pytest.approx(1.0)
    assert not entropy.is_high(_THRESHOLDS)
    assert GroupEntropy(total=3, cluster_sizes=(1, 1, 1)).is_high(_THRESHOLDS)


def test_phase_counts_quarantine_reasons() -> None:
    criteria = _criteria(
        certificate("C1", splits=(("95", ("P100",)),)),
        certificate("C2", group_id="0"),
        certificate("C3"),
    )
    context = BuildContext()
    state = BuildState(records=[], criteria=criteria)

    AnomalyRoutingPhase().run(state, context=context)

    assert [item.certificate_id for item in state.criteria] == ["C3"]
    assert context.stats.quarantined == {
        QuarantineReason.SPLIT_PERCENT_MISMATCH: 1,
        QuarantineReason.INVALID_GROUP: 1,
    }
    assert context.stats.quarantine_total == 2
