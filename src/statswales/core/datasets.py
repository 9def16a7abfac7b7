"""
Static descriptions of the StatsWales exports this tool understands.

Each dataset names its file, the layout of that file and the column headings
that play each role (authority code, year, value, ...). Datasets that carry a
single measure throughout the file declare it through SINGLE_MEASURE_CODE /
SINGLE_MEASURE_NAME instead of a per-row measure column.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Dict, List, Mapping

from statswales.core.errors import UnexpectedInputError


class SourceDataType(str, Enum):
    AUTHORITY_CODE_CSV = "authority_code_csv"
    WELSH_STATS_JSON = "welsh_stats_json"
    AUTHORITY_BY_YEAR_CSV = "authority_by_year_csv"


class SourceColumn(str, Enum):
    AUTH_CODE = "auth_code"
    AUTH_NAME_ENG = "auth_name_eng"
    AUTH_NAME_CYM = "auth_name_cym"
    MEASURE_CODE = "measure_code"
    MEASURE_NAME = "measure_name"
    SINGLE_MEASURE_CODE = "single_measure_code"
    SINGLE_MEASURE_NAME = "single_measure_name"
    YEAR = "year"
    VALUE = "value"


SourceColumnMapping = Mapping[SourceColumn, str]


@dataclass(frozen=True)
class DatasetSource:
    name: str
    code: str
    file: str
    data_type: SourceDataType
    cols: SourceColumnMapping

    def has_single_measure(self) -> bool:
        return SourceColumn.SINGLE_MEASURE_CODE in self.cols


def _cols(mapping: Dict[SourceColumn, str]) -> SourceColumnMapping:
    return MappingProxyType(dict(mapping))


AREAS = DatasetSource(
    name="Areas",
    code="areas",
    file="areas.csv",
    data_type=SourceDataType.AUTHORITY_CODE_CSV,
    cols=_cols({
        SourceColumn.AUTH_CODE: "Local authority code",
        SourceColumn.AUTH_NAME_ENG: "Name (eng)",
        SourceColumn.AUTH_NAME_CYM: "Name (cym)",
    }),
)

POPDEN = DatasetSource(
    name="Population density",
    code="popden",
    file="popu1009.json",
    data_type=SourceDataType.WELSH_STATS_JSON,
    cols=_cols({
        SourceColumn.AUTH_CODE: "Localauthority_Code",
        SourceColumn.AUTH_NAME_ENG: "Localauthority_ItemName_ENG",
        SourceColumn.MEASURE_CODE: "Measure_Code",
        SourceColumn.MEASURE_NAME: "Measure_ItemName_ENG",
        SourceColumn.YEAR: "Year_Code",
        SourceColumn.VALUE: "Data",
    }),
)

BIZ = DatasetSource(
    name="Active Businesses",
    code="biz",
    file="econ0080.json",
    data_type=SourceDataType.WELSH_STATS_JSON,
    cols=_cols({
        SourceColumn.AUTH_CODE: "Area_Code",
        SourceColumn.AUTH_NAME_ENG: "Area_ItemName_ENG",
        SourceColumn.MEASURE_CODE: "Variable_Code",
        SourceColumn.MEASURE_NAME: "Variable_ItemName_ENG",
        SourceColumn.YEAR: "Year_Code",
        SourceColumn.VALUE: "Data",
    }),
)

AQI = DatasetSource(
    name="Air Quality Indicators",
    code="aqi",
    file="envi0201.json",
    data_type=SourceDataType.WELSH_STATS_JSON,
    cols=_cols({
        SourceColumn.AUTH_CODE: "Area_Code",
        SourceColumn.AUTH_NAME_ENG: "Area_ItemName_ENG",
        SourceColumn.MEASURE_CODE: "Pollutant_ItemName_ENG",
        SourceColumn.MEASURE_NAME: "Pollutant_ItemName_ENG",
        SourceColumn.YEAR: "Year_Code",
        SourceColumn.VALUE: "Data",
    }),
)

TRAINS = DatasetSource(
    name="Rail passenger journeys",
    code="trains",
    file="tran0152.json",
    data_type=SourceDataType.WELSH_STATS_JSON,
    cols=_cols({
        SourceColumn.AUTH_CODE: "LocalAuthorityCode",
        SourceColumn.AUTH_NAME_ENG: "LocalAuthority_ItemName_ENG",
        SourceColumn.YEAR: "Year_Code",
        SourceColumn.VALUE: "Data",
        SourceColumn.SINGLE_MEASURE_CODE: "rail",
        SourceColumn.SINGLE_MEASURE_NAME: "Rail passenger journeys",
    }),
)

COMPLETE_POPDEN = DatasetSource(
    name="Population density",
    code="complete-popden",
    file="complete-popu1009-popden.csv",
    data_type=SourceDataType.AUTHORITY_BY_YEAR_CSV,
    cols=_cols({
        SourceColumn.AUTH_CODE: "AuthorityCode",
        SourceColumn.SINGLE_MEASURE_CODE: "dens",
        SourceColumn.SINGLE_MEASURE_NAME: "Population density",
    }),
)

COMPLETE_POP = DatasetSource(
    name="Population",
    code="complete-pop",
    file="complete-popu1009-pop.csv",
    data_type=SourceDataType.AUTHORITY_BY_YEAR_CSV,
    cols=_cols({
        SourceColumn.AUTH_CODE: "AuthorityCode",
        SourceColumn.SINGLE_MEASURE_CODE: "pop",
        SourceColumn.SINGLE_MEASURE_NAME: "Population",
    }),
)

COMPLETE_AREA = DatasetSource(
    name="Land area",
    code="complete-area",
    file="complete-popu1009-area.csv",
    data_type=SourceDataType.AUTHORITY_BY_YEAR_CSV,
    cols=_cols({
        SourceColumn.AUTH_CODE: "AuthorityCode",
        SourceColumn.SINGLE_MEASURE_CODE: "area",
        SourceColumn.SINGLE_MEASURE_NAME: "Land area",
    }),
)

# Order used when every dataset is requested.
DATASETS: List[DatasetSource] = [
    POPDEN,
    BIZ,
    AQI,
    TRAINS,
    COMPLETE_POPDEN,
    COMPLETE_POP,
    COMPLETE_AREA,
]


def dataset_codes() -> List[str]:
    return [d.code for d in DATASETS]


def get_dataset(code: str) -> DatasetSource:
    key = str(code).strip().lower()
    for dataset in DATASETS:
        if dataset.code == key:
            return dataset
    raise UnexpectedInputError(f"No dataset matches key: {code}")
