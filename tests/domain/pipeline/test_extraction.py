from __future__ import annotations

from datetime import date
from decimal import Decimal

from propsynth.domain.pipeline import (
    BuildContext,
    BuildState,
    GroupFilter,
    HashRegistry,
    SelectionCriteriaPhase,
    extract_selection_criteria,
)
from tests.support.certificates import certificate, records, split_record


def test_one_criteria_per_certificate_with_tiers_in_order() -> None:
    rows = records(
        certificate("C2", splits=(("60", ("P100", "P900")), ("40", ("P200",)))),
        certificate("C1"),
    )

    result = extract_selection_criteria(list(reversed(rows)), registry=HashRegistry())

    assert [item.certificate_id for item in result.criteria] == ["C1", "C2"]
    configuration = result.criteria[1].configuration
    assert [p.split_seq for p in configuration.participants] == [1, 2]
    assert [tier.broker_id for tier in configuration.participants[0].tiers] == ["P100", "P900"]
    assert configuration.total_percent == Decimal(100)
    assert result.certificates == 2


def test_same_chain_in_same_group_shares_configuration_hash() -> None:
    result = extract_selection_criteria(
        records(certificate("C1"), certificate("C2", product_code="P2")),
        registry=HashRegistry(),
    )

    first, second = result.criteria
    assert first.configuration.config_hash == second.configuration.config_hash


def test_group_ids_are_normalized() -> None:
    result = extract_selection_criteria(certificate("C1", group_id="123"), registry=HashRegistry())

    assert result.criteria[0].group_id == "G123"


def test_group_filter_excludes_records() -> None:
    rows = records(certificate("C1", group_id="G1"), certificate("C2", group_id="G2"))

    result = extract_selection_criteria(
        rows,
        registry=HashRegistry(),
        group_filter=GroupFilter(exclude=frozenset({"G2"})),
    )

    assert [item.group_id for item in result.criteria] == ["G1"]
    assert result.excluded_records == 1


def test_group_filter_include_list() -> None:
    rows = records(certificate("C1", group_id="G1"), certificate("C2", group_id="G2"))

    result = extract_selection_criteria(
        rows,
        registry=HashRegistry(),
        group_filter=GroupFilter(include=frozenset({"G2"})),
    )

    assert [item.certificate_id for item in result.criteria] == ["C2"]


def test_most_recent_broker_assignment_wins() -> None:
    rows = [
        split_record(
            certificate_id="C1",
            effective_date=date(2023, 1, 1),
            paid_broker_id="P500",
            paid_broker_name="Old Target",
        ),
        split_record(
            certificate_id="C2",
            effective_date=date(2024, 6, 1),
            paid_broker_id="P600",
            paid_broker_name="New Target",
        ),
        split_record(certificate_id="C3", broker_id="P300", paid_broker_id="P300"),
    ]

    result = extract_selection_criteria(rows, registry=HashRegistry())

    assert list(result.broker_assignments) == ["P100"]
    assignment = result.broker_assignments["P100"]
    assert assignment.target_broker_id == "P600"
    assert assignment.effective_date == date(2024, 6, 1)


def test_paid_broker_does_not_change_configuration_hash() -> None:
    rows = [
        split_record(certificate_id="C1"),
        split_record(certificate_id="C2", paid_broker_id="P500"),
    ]

    result = extract_selection_criteria(rows, registry=HashRegistry())

    first, second = result.criteria
    assert first.configuration.config_hash == second.configuration.config_hash


def test_phase_warns_on_mixed_product_certificate() -> None:
    rows = [
        split_record(certificate_id="C1", split_seq=1, split_percent="50", product_code="A"),
        split_record(
            certificate_id="C1", split_seq=2, split_percent="50", product_code="B", broker_id="P200"
        ),
    ]
    context = BuildContext()
    state = BuildState(records=rows)

    SelectionCriteriaPhase().run(state, context=context)

    assert state.criteria[0].product_code == "A"
    assert any("C1" in warning for warning in context.stats.warnings)
    assert context.stats.records == 2
    assert context.stats.selection_criteria == 1
    assert context.stats.hash_entries == 3


def test_certificate_with_broken_tier_chain_is_left_out() -> None:
    registry = HashRegistry()
    rows = records(
        certificate("C1"),
        [split_record(certificate_id="C2", tier_level=2, broker_id="P500")],
    )

    result = extract_selection_criteria(rows, registry=registry)

    assert [item.certificate_id for item in result.criteria] == ["C1"]
    ((certificate_id, error),) = result.invalid_tier_chains
    assert certificate_id == "C2"
    assert error.levels == (2,)
    assert result.certificates == 2
    # C1's hierarchy and configuration only
    assert len(registry) == 2


def test_phase_warns_and_counts_broken_tier_chains() -> None:
    rows = records(
        certificate("C1"),
        [split_record(certificate_id="C2", tier_level=2, broker_id="P500")],
    )
    context = BuildContext()
    state = BuildState(records=rows)

    SelectionCriteriaPhase().run(state, context=context)

    assert [item.certificate_id for item in state.criteria] == ["C1"]
    assert context.stats.invalid_tier_chains == 1
    assert any("C2" in warning for warning in context.stats.warnings)


def test_certificate_under_two_groups_keeps_its_first_group() -> None:
    rows = records(
        certificate("C1", group_id="G2"),
        certificate("C1", group_id="G1", splits=(("100", ("P300",)),)),
    )
    context = BuildContext()
    state = BuildState(records=rows)

    SelectionCriteriaPhase().run(state, context=context)

    (criteria,) = state.criteria
    assert criteria.group_id == "G1"
    assert criteria.configuration.primary.writing_broker.broker_id == "P300"
    assert context.stats.conflicting_groups == 1
    assert any("C1" in warning and "G2" in warning for warning in context.stats.warnings)
