from __future__ import annotations

import pytest

from statswales.core.datasets import (
    AREAS,
    COMPLETE_AREA,
    COMPLETE_POP,
    COMPLETE_POPDEN,
    DATASETS,
    POPDEN,
    TRAINS,
    SourceColumn,
    SourceDataType,
    dataset_codes,
    get_dataset,
)
from statswales.core.errors import UnexpectedInputError


def test_dataset_codes_are_unique_and_exclude_areas():
    codes = dataset_codes()
    assert len(codes) == len(set(codes))
    assert AREAS.code not in codes
    assert codes[0] == "popden"


@pytest.mark.parametrize("key", ["popden", "POPDEN", " PopDen "])
def test_get_dataset_ignores_case_and_padding(key):
    assert get_dataset(key) is POPDEN


def test_get_dataset_unknown_key():
    with pytest.raises(UnexpectedInputError, match="No dataset matches key: census"):
        get_dataset("census")


def test_single_measure_datasets():
    assert TRAINS.has_single_measure()
    assert COMPLETE_POP.has_single_measure()
    assert not POPDEN.has_single_measure()
    assert not AREAS.has_single_measure()


def test_year_column_datasets_fix_their_measure():
    measures = {d.cols[SourceColumn.SINGLE_MEASURE_CODE] for d in (COMPLETE_POPDEN, COMPLETE_POP, COMPLETE_AREA)}
    assert measures == {"dens", "pop", "area"}
    for dataset in DATASETS:
        if dataset.data_type is SourceDataType.AUTHORITY_BY_YEAR_CSV:
            assert len(dataset.cols) == 3


def test_column_mappings_are_read_only():
    with pytest.raises(TypeError):
        POPDEN.cols[SourceColumn.VALUE] = "Other"  # type: ignore[index]


def test_data_type_accepts_plain_strings():
    assert SourceDataType("welsh_stats_json") is SourceDataType.WELSH_STATS_JSON
