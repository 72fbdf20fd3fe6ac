import pytest

from fakes import make_rate
from tripcost.services.trip_costs.allowances import calculate_allowances


def test_short_single_day_earns_nothing():
    result = calculate_allowances(1, 7.5, make_rate())

    assert result.total == 0
    assert result.partial_day_count == 0
    assert result.days == ()
    assert result.explanation == "No daily allowances needed for this trip."


def test_long_single_day_earns_partial_rate():
    result = calculate_allowances(1, 12, make_rate())

    assert result.total == 50
    assert [d.day for d in result.days] == ["Day 1 (Single Day)"]


def test_exactly_eight_hours_is_not_enough():
    assert calculate_allowances(1, 8, make_rate()).total == 0


@pytest.mark.parametrize("days", [2, 3, 5, 10])
def test_multi_day_counts(days):
    result = calculate_allowances(days, 40, make_rate())

    assert result.partial_day_count == 2
    assert result.full_day_count == days - 2
    assert result.total == pytest.approx(2 * 50 + (days - 2) * 100)


def test_multi_day_labels_and_audit_trail():
    result = calculate_allowances(4, 30, make_rate())

    labels = [d.day for d in result.days]
    assert labels == ["Day 1 (Departure)", "Days 2-3 (2 Full Days)", "Day 4 (Return)"]
    full = result.days[1]
    assert full.type == "24h"
    assert full.count == 2
    assert full.final == 200
    assert "Day 4 (Return) = €50.00" in result.explanation


def test_two_day_trip_has_no_full_days():
    result = calculate_allowances(2, 20, make_rate())

    assert [d.type for d in result.days] == ["8h", "8h"]
    assert result.total_24h == 0


def test_reduction_never_goes_negative():
    result = calculate_allowances(3, 30, make_rate(), reduction=60)

    assert result.total_8h == 0
    assert result.total_24h == 40
    assert all(d.final >= 0 for d in result.days)
    assert result.days[0].reduction == 60
