from __future__ import annotations

import math

import pytest

from statswales.core.errors import NotFoundError
from statswales.core.measure import MeasureSeries


def _series(values=None, code="pop", label="Population") -> MeasureSeries:
    series = MeasureSeries(code, label)
    for year, value in (values or {}).items():
        series.set_value(year, value)
    return series


@pytest.mark.parametrize("codename", ["POP", "Pop", "pop", "PoP_Dens"])
def test_code_is_always_lowercase(codename):
    assert MeasureSeries(codename, "Label").code == codename.lower()


def test_get_value_missing_year_raises_not_found():
    series = _series({1991: 10})
    with pytest.raises(NotFoundError, match="1992"):
        series.get_value(1992)


def test_set_value_upserts():
    series = _series({1991: 10})
    series.set_value(1991, 12)
    series.set_value(1991, 12)
    assert series.get_value(1991) == 12
    assert series.size() == 1
    assert len(series) == 1


def test_years_iterate_in_ascending_order():
    series = _series({1993: 3, 1991: 1, 1992: 2})
    assert series.years() == [1991, 1992, 1993]
    assert series.items() == [(1991, 1.0), (1992, 2.0), (1993, 3.0)]


def test_difference():
    assert _series().get_difference() == 0
    assert _series({1991: 10}).get_difference() == 0
    assert _series({1992: 15, 1991: 10}).get_difference() == 5


def test_difference_as_percentage():
    assert _series().get_difference_as_percentage() == 0
    assert _series({1991: 10, 1992: 15}).get_difference_as_percentage() == pytest.approx(50.0)


def test_difference_as_percentage_from_zero_is_not_finite():
    assert _series({1991: 0, 1992: 5}).get_difference_as_percentage() == math.inf
    assert _series({1991: 0, 1992: -5}).get_difference_as_percentage() == -math.inf
    assert math.isnan(_series({1991: 0, 1992: 0}).get_difference_as_percentage())


def test_average():
    assert _series().get_average() == 0
    assert _series({1991: 10, 1992: 20, 1993: 30}).get_average() == pytest.approx(20.0)


def test_merge_other_wins_and_keeps_own_years():
    mine = _series({1991: 1, 1992: 2})
    theirs = _series({1992: 20, 1993: 30})

    result = mine.merge(theirs)

    assert result is mine
    assert mine.values == {1991: 1.0, 1992: 20.0, 1993: 30.0}
    assert theirs.values == {1992: 20.0, 1993: 30.0}


def test_copy_is_independent():
    original = _series({1991: 1})
    clone = original.copy()
    clone.set_value(1992, 2)
    assert original.years() == [1991]
    assert clone == _series({1991: 1, 1992: 2})


def test_equality_covers_code_label_and_values():
    assert _series({1991: 1}) == _series({1991: 1}, code="POP")
    assert _series({1991: 1}) != _series({1991: 2})
    assert _series({1991: 1}) != _series({1991: 1}, label="People")
    assert _series({1991: 1}) != _series({1991: 1}, code="dens")


def test_to_table_shares_one_width_across_columns():
    table = _series({1992: 15, 1991: 10}).to_table()

    assert table.split("\n") == [
        "Population (pop)",
        "     1991      1992   Average     Diff.   % Diff.",
        "10.000000 15.000000 12.500000  5.000000 50.000000",
    ]


def test_to_table_widens_for_negative_values():
    lines = _series({2000: -12.5}).to_table().split("\n")
    assert lines[1] == "      2000    Average      Diff.    % Diff."
    assert lines[2] == "-12.500000 -12.500000   0.000000   0.000000"


def test_to_table_empty_series():
    assert _series().to_table() == "Population (pop)\n<no data>"


def test_to_json_tree_uses_string_years():
    assert _series({1992: 2, 1991: 1}).to_json_tree() == {"1991": 1.0, "1992": 2.0}
