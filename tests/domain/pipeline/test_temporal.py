from __future__ import annotations

from datetime import date

import pytest

from propsynth.domain.model import (
    OPEN_END,
    OPEN_START,
    ContinuationProposal,
    DateRange,
    Proposal,
    ProposalStatus,
)
from propsynth.domain.pipeline import (
    CoverageError,
    HashRegistry,
    aggregate_proposals,
    check_coverage,
    continuation_id,
    extract_selection_criteria,
    reconcile_proposals,
)
from tests.support.certificates import certificate, group_two_records, records


def _proposals(rows: list) -> list[Proposal]:
    registry = HashRegistry()
    criteria = extract_selection_criteria(rows, registry=registry).criteria
    return aggregate_proposals(criteria, registry=registry)


def _by_id(proposals: list[Proposal]) -> dict[str, Proposal]:
    return {proposal.id: proposal for proposal in proposals}


def test_single_proposal_is_stretched_over_all_time() -> None:
    proposals = _proposals(certificate("C1", effective_date=date(2024, 5, 1)))

    continuations = reconcile_proposals(proposals)

    assert continuations == []
    assert proposals[0].effective_range == DateRange(start=OPEN_START, end=OPEN_END)


def test_later_proposal_truncates_and_orphaned_pair_continues() -> None:
    proposals = _proposals(group_two_records())

    continuations = reconcile_proposals(proposals)

    by_id = _by_id([*proposals, *continuations])
    assert set(by_id) == {"PROP-G2-1", "PROP-G2-2", "PROP-G2-1-CONT"}
    assert by_id["PROP-G2-1"].effective_range == DateRange(
        start=OPEN_START, end=date(2024, 12, 31)
    )
    assert by_id["PROP-G2-2"].effective_range == DateRange(start=date(2025, 1, 1), end=OPEN_END)

    (continuation,) = continuations
    assert isinstance(continuation, ContinuationProposal)
    assert continuation.effective_range == DateRange(start=date(2025, 1, 1), end=OPEN_END)
    assert continuation.product_plans == {("Y", "PL")}
    assert continuation.product_codes == {"Y"}
    assert continuation.source_proposal_id == "PROP-G2-1"
    assert continuation.truncated_by == "PROP-G2-2"
    assert continuation.config_hash == by_id["PROP-G2-1"].config_hash
    assert [h.id for h in continuation.hierarchies] == ["H-PROP-G2-1-CONT-P100-1"]


def test_chain_of_truncations_creates_bounded_continuation() -> None:
    proposals = _proposals(
        records(
            certificate("A1", group_id="G3", product_code="X"),
            certificate("A2", group_id="G3", product_code="Y"),
            certificate(
                "B1",
                group_id="G3",
                product_code="X",
                effective_date=date(2025, 1, 1),
                splits=(("100", ("P200",)),),
            ),
            certificate(
                "C1",
                group_id="G3",
                product_code="Y",
                effective_date=date(2026, 1, 1),
                splits=(("100", ("P300",)),),
            ),
        )
    )

    continuations = reconcile_proposals(proposals)

    by_id = _by_id([*proposals, *continuations])
    assert by_id["PROP-G3-1"].effective_range == DateRange(
        start=OPEN_START, end=date(2024, 12, 31)
    )
    assert by_id["PROP-G3-1-CONT"].effective_range == DateRange(
        start=date(2025, 1, 1), end=date(2025, 12, 31)
    )
    assert by_id["PROP-G3-2"].effective_range == DateRange(start=date(2025, 1, 1), end=OPEN_END)
    assert by_id["PROP-G3-3"].effective_range == DateRange(start=date(2026, 1, 1), end=OPEN_END)
    assert [c.id for c in continuations] == ["PROP-G3-1-CONT"]


def test_unrelated_later_proposal_opens_its_start() -> None:
    proposals = _proposals(
        records(
            certificate("A1", product_code="X"),
            certificate(
                "B1",
                product_code="Z",
                effective_date=date(2025, 1, 1),
                splits=(("100", ("P200",)),),
            ),
        )
    )

    assert reconcile_proposals(proposals) == []
    first, second = proposals
    assert first.effective_range == DateRange(start=OPEN_START, end=OPEN_END)
    assert second.effective_range == DateRange(start=OPEN_START, end=OPEN_END)


def test_same_day_proposal_claiming_every_pair_supersedes() -> None:
    proposals = _proposals(
        records(
            certificate("A1", product_code="X"),
            certificate("B1", product_code="X", splits=(("100", ("P200",)),)),
        )
    )

    reconcile_proposals(proposals)

    first, second = proposals
    assert first.status is ProposalStatus.SUPERSEDED
    assert first.product_plans == set()
    assert second.effective_range == DateRange(start=OPEN_START, end=OPEN_END)


def test_multiple_groups_are_reconciled_independently() -> None:
    proposals = _proposals(
        records(
            *[
                certificate(f"G1-{year}", group_id="G1", effective_date=date(year, 1, 1))
                for year in (2023, 2024)
            ],
            group_two_records(),
        )
    )

    continuations = reconcile_proposals(proposals)

    assert [c.id for c in continuations] == ["PROP-G2-1-CONT"]
    (group_one,) = [p for p in proposals if p.group_id == "G1"]
    assert group_one.effective_range == DateRange(start=OPEN_START, end=OPEN_END)


def test_continuation_ids() -> None:
    assert continuation_id("PROP-G1-1", 1) == "PROP-G1-1-CONT"
    assert continuation_id("PROP-G1-1", 3) == "PROP-G1-1-CONT-3"


def test_check_coverage_rejects_overlap_and_gap() -> None:
    first, second = _proposals(
        records(
            certificate("A1", product_code="X"),
            certificate(
                "B1",
                product_code="X",
                effective_date=date(2025, 1, 1),
                splits=(("100", ("P200",)),),
            ),
        )
    )
    first.effective_range = DateRange(start=OPEN_START, end=date(2025, 1, 1))
    second.effective_range = DateRange(start=date(2025, 1, 1), end=OPEN_END)

    with pytest.raises(CoverageError, match="overlaps"):
        check_coverage("G1", [first, second])

    first.effective_range = DateRange(start=OPEN_START, end=date(2024, 6, 30))
    with pytest.raises(CoverageError, match="gap") as exc:
        check_coverage("G1", [first, second])
    assert exc.value.pair == ("X", "PL1")

    first.effective_range = None
    with pytest.raises(CoverageError, match="no effective range"):
        check_coverage("G1", [first, second])
