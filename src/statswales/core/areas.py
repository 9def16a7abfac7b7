from __future__ import annotations

import json
import math
import re
from typing import Any, Dict, Iterable, Iterator, List, Optional, Set, Tuple

import logging
import pandas as pd

from statswales.core.area import Area
from statswales.core.datasets import SourceColumn, SourceColumnMapping, SourceDataType
from statswales.core.errors import (
    InvalidArgumentError,
    MalformedInputError,
    NotFoundError,
    ParseError,
    UnexpectedInputError,
)
from statswales.core.formatting import dump_json
from statswales.core.measure import MeasureSeries

logger = logging.getLogger(__name__)

StringFilter = Optional[Iterable[str]]
YearFilter = Optional[Tuple[int, int]]

# StatsWales JSON exports wrap their rows in an OData envelope under this key.
JSON_ROWS_KEY = "value"

FRAME_COLUMNS = ["authority_code", "name_eng", "name_cym", "measure", "label", "year", "value"]

_FOUR_DIGIT_YEAR = re.compile(r"^[0-9]{4}$")
_DIGITS = re.compile(r"^[0-9]+$")


# ---------------------------------------------------------------------------
# Filter helpers
# ---------------------------------------------------------------------------

def _upper_set(values: StringFilter) -> Set[str]:
    return {str(v).strip().upper() for v in values or () if str(v).strip()}


def _lower_set(values: StringFilter) -> Set[str]:
    return {str(v).strip().lower() for v in values or () if str(v).strip()}


def _area_passes(code: str, areas_filter: Set[str]) -> bool:
    return not areas_filter or code.upper() in areas_filter


def _measure_passes(code: str, measures_filter: Set[str]) -> bool:
    return not measures_filter or code.lower() in measures_filter


def _year_passes(year: int, years_filter: YearFilter) -> bool:
    if not years_filter:
        return True
    low, high = int(years_filter[0]), int(years_filter[1])
    if low == 0 and high == 0:
        return True
    return low <= year <= high


# ---------------------------------------------------------------------------
# Parsing helpers
# ---------------------------------------------------------------------------

def _read_text(stream: Any) -> str:
    try:
        data = stream.read()
    except UnicodeDecodeError as exc:
        raise MalformedInputError(f"Input is not valid UTF-8: {exc}") from exc
    if isinstance(data, (bytes, bytearray)):
        try:
            return bytes(data).decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise MalformedInputError(f"Input is not valid UTF-8: {exc}") from exc
    text = str(data)
    if text.startswith("\ufeff"):
        text = text[1:]
    return text


def _split_lines(text: str) -> List[str]:
    return [line.rstrip("\r") for line in text.split("\n")]


def _parse_header_year(cell: str) -> int:
    text = cell.strip()
    if not _FOUR_DIGIT_YEAR.match(text) or int(text) < 1000:
        raise ParseError(f"Expected a four digit year in header, got {cell!r}")
    return int(text)


def _parse_year(raw: Any) -> int:
    """
    Years arrive as text in StatsWales exports ("1991"); plain JSON integers
    are accepted too. Anything else (signs, decimals, words) is a ParseError.
    """
    if isinstance(raw, bool):
        raise ParseError(f"Year is not numeric: {raw!r}")
    if isinstance(raw, int):
        if raw < 0:
            raise ParseError(f"Year must be unsigned: {raw!r}")
        return raw
    if isinstance(raw, str) and _DIGITS.match(raw.strip()):
        return int(raw.strip())
    raise ParseError(f"Year is not numeric: {raw!r}")


def _parse_value(raw: Any) -> float:
    """Finite number, or a string holding one. NaN, inf and "1_000" are rejected."""
    if isinstance(raw, bool) or raw is None:
        raise ParseError(f"Value is not numeric: {raw!r}")
    if isinstance(raw, (int, float)):
        value = float(raw)
    elif isinstance(raw, str) and "_" not in raw:
        try:
            value = float(raw.strip())
        except ValueError as exc:
            raise ParseError(f"Value is not numeric: {raw!r}") from exc
    else:
        raise ParseError(f"Value is not numeric: {raw!r}")
    if not math.isfinite(value):
        raise ParseError(f"Value is not a finite number: {raw!r}")
    return value


def _parse_code(raw: Any, what: str, index: int) -> str:
    if not isinstance(raw, str) or not raw.strip():
        raise MalformedInputError(f"Row {index} has no usable {what}: {raw!r}")
    return raw


def _parse_cell(cell: str) -> Optional[float]:
    """Value cell of a year-columns CSV; None when blank or not a finite number."""
    text = cell.strip()
    if not text:
        return None
    try:
        value = float(text)
    except ValueError:
        return None
    if not math.isfinite(value):
        return None
    return value


def _require(row: Dict[str, Any], key: str, index: int) -> Any:
    try:
        return row[key]
    except KeyError as exc:
        raise MalformedInputError(f"Row {index} is missing expected key {key!r}") from exc


def _require_col(cols: SourceColumnMapping, column: SourceColumn) -> str:
    try:
        return cols[column]
    except KeyError:
        raise UnexpectedInputError(f"Column mapping does not declare {column.name}") from None


def _is_ready(stream: Any) -> bool:
    if stream is None or not hasattr(stream, "read"):
        return False
    if getattr(stream, "closed", False):
        return False
    readable = getattr(stream, "readable", None)
    if readable is None:
        return True
    try:
        return bool(readable())
    except ValueError:
        return False


# ---------------------------------------------------------------------------
# Collection
# ---------------------------------------------------------------------------

class AreaCollection:
    """
    Every Area imported during one run, keyed by authority code.

    Ingestion never mutates areas in place from a row: each row becomes a fresh
    Area (holding fresh MeasureSeries) handed to set_area, and the merge rules
    of Area / MeasureSeries combine it with whatever was imported before.
    """

    def __init__(self) -> None:
        self.areas: Dict[str, Area] = {}

    # ------------------------------------------------------------------
    # Container
    # ------------------------------------------------------------------

    def set_area(self, code: str, area: Area) -> None:
        if code != area.authority_code:
            raise InvalidArgumentError(
                f"Area {area.authority_code} cannot be stored under code {code}"
            )
        existing = self.areas.get(code)
        if existing is None:
            self.areas[code] = area.copy()
        else:
            existing.merge(area)

    def get_area(self, code: str) -> Area:
        try:
            return self.areas[code]
        except KeyError:
            raise NotFoundError(f"No area found matching {code}") from None

    def has_area(self, code: str) -> bool:
        return code in self.areas

    def codes(self) -> List[str]:
        return sorted(self.areas)

    def size(self) -> int:
        return len(self.areas)

    def __len__(self) -> int:
        return len(self.areas)

    def __iter__(self) -> Iterator[Area]:
        for code in self.codes():
            yield self.areas[code]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AreaCollection):
            return NotImplemented
        return self.areas == other.areas

    # ------------------------------------------------------------------
    # Ingestion
    # ------------------------------------------------------------------

    def populate_from_authority_code_csv(
        self,
        stream: Any,
        cols: SourceColumnMapping,
        areas_filter: StringFilter = None,
    ) -> None:
        """
        Import areas.csv: a header line, then "code,English name,Welsh name".

        Every field must be non-empty; there is no quoting support. Only the
        names are imported here, measures come from the other datasets.
        """
        if len(cols) != 3:
            raise UnexpectedInputError(
                f"Authority code CSV expects exactly 3 columns in mapping, got {len(cols)}"
            )
        wanted_areas = _upper_set(areas_filter)

        lines = _split_lines(_read_text(stream))
        imported = 0
        for line_no, line in enumerate(lines[1:], start=2):
            if not line.strip():
                continue

            fields = line.split(",")
            code, eng, cym = (fields + ["", "", ""])[:3]
            if not code or not eng or not cym:
                raise MalformedInputError(
                    f"Line {line_no} does not have three comma separated values: {line!r}"
                )

            if not _area_passes(code, wanted_areas):
                continue

            area = Area(code)
            area.set_name("eng", eng)
            area.set_name("cym", cym)
            self.set_area(code, area)
            imported += 1

        logger.info("Imported %d area names (%d areas in collection).", imported, len(self))

    def populate_from_welsh_stats_json(
        self,
        stream: Any,
        cols: SourceColumnMapping,
        areas_filter: StringFilter = None,
        measures_filter: StringFilter = None,
        years_filter: YearFilter = None,
    ) -> None:
        """
        Import a StatsWales JSON export: a list of flat row objects, either at
        the top level or under the envelope's "value" key.

        Per row the filters run in order area -> measure -> year and stop at the
        first miss. A row is committed only once every field has been read, so
        a broken row aborts the import without leaving partial data behind.
        """
        auth_code_key = _require_col(cols, SourceColumn.AUTH_CODE)
        auth_name_key = _require_col(cols, SourceColumn.AUTH_NAME_ENG)
        year_key = _require_col(cols, SourceColumn.YEAR)
        value_key = _require_col(cols, SourceColumn.VALUE)

        single_measure = SourceColumn.SINGLE_MEASURE_CODE in cols
        if single_measure:
            fixed_code = cols[SourceColumn.SINGLE_MEASURE_CODE]
            fixed_label = _require_col(cols, SourceColumn.SINGLE_MEASURE_NAME)
            measure_code_key = measure_name_key = ""
        else:
            fixed_code = fixed_label = ""
            measure_code_key = _require_col(cols, SourceColumn.MEASURE_CODE)
            measure_name_key = _require_col(cols, SourceColumn.MEASURE_NAME)

        wanted_areas = _upper_set(areas_filter)
        wanted_measures = _lower_set(measures_filter)

        try:
            document = json.loads(_read_text(stream))
        except json.JSONDecodeError as exc:
            raise MalformedInputError(f"Input is not valid JSON: {exc}") from exc

        if isinstance(document, dict):
            if JSON_ROWS_KEY not in document:
                raise MalformedInputError(f"JSON object has no {JSON_ROWS_KEY!r} list of rows")
            rows = document[JSON_ROWS_KEY]
        else:
            rows = document
        if not isinstance(rows, list):
            raise MalformedInputError(f"Expected a list of rows, got {type(rows).__name__}")

        imported = 0
        for index, row in enumerate(rows):
            if not isinstance(row, dict):
                raise MalformedInputError(f"Row {index} is not an object: {row!r}")

            code = _parse_code(_require(row, auth_code_key, index), "authority code", index)
            if not _area_passes(code, wanted_areas):
                continue

            if single_measure:
                measure_code = fixed_code
            else:
                measure_code = _parse_code(_require(row, measure_code_key, index), "measure code", index)
            if not _measure_passes(measure_code, wanted_measures):
                continue

            year = _parse_year(_require(row, year_key, index))
            if not _year_passes(year, years_filter):
                continue

            area_name = str(_require(row, auth_name_key, index))
            if single_measure:
                measure_label = fixed_label
            else:
                measure_label = str(_require(row, measure_name_key, index))
            value = _parse_value(_require(row, value_key, index))

            series = MeasureSeries(measure_code, measure_label)
            series.set_value(year, value)

            area = Area(code)
            area.set_name("eng", area_name)
            area.set_measure(series.code, series)

            self.set_area(code, area)
            imported += 1

        logger.info("Imported %d of %d JSON rows (%d areas in collection).", imported, len(rows), len(self))

    def populate_from_authority_by_year_csv(
        self,
        stream: Any,
        cols: SourceColumnMapping,
        areas_filter: StringFilter = None,
        measures_filter: StringFilter = None,
        years_filter: YearFilter = None,
    ) -> None:
        """
        Import a "complete" CSV: one measure for the whole file, one row per
        authority, one column per year.

          AuthorityCode,1991,1992,...
          W06000001,711.6801,711.6801,...

        Blank or non-numeric cells are skipped (StatsWales leaves gaps); a row
        shorter than the header is a MalformedInputError.
        """
        if len(cols) != 3:
            raise UnexpectedInputError(
                f"Authority by year CSV expects exactly 3 columns in mapping, got {len(cols)}"
            )
        measure_code = _require_col(cols, SourceColumn.SINGLE_MEASURE_CODE)
        measure_label = _require_col(cols, SourceColumn.SINGLE_MEASURE_NAME)

        if not _measure_passes(measure_code, _lower_set(measures_filter)):
            logger.info("Skipping file for measure %s: excluded by measure filter.", measure_code)
            return

        wanted_areas = _upper_set(areas_filter)

        lines = [line for line in _split_lines(_read_text(stream)) if line.strip()]
        if not lines:
            raise MalformedInputError("Year columns CSV is empty; expected a header line.")

        years = [_parse_header_year(cell) for cell in lines[0].split(",")[1:]]

        skipped_cells = 0
        for line_no, line in enumerate(lines[1:], start=2):
            cells = line.split(",")
            code = cells[0].strip()
            if not code:
                raise MalformedInputError(f"Line {line_no} has no authority code: {line!r}")
            if len(cells) - 1 < len(years):
                raise MalformedInputError(
                    f"Line {line_no} has {len(cells) - 1} values but the header declares {len(years)} years"
                )
            if len(cells) - 1 > len(years):
                logger.warning(
                    "Line %d has %d values for %d years; extra values ignored.",
                    line_no, len(cells) - 1, len(years),
                )

            if not _area_passes(code, wanted_areas):
                continue

            series = MeasureSeries(measure_code, measure_label)
            for year, cell in zip(years, cells[1:]):
                if not _year_passes(year, years_filter):
                    continue
                value = _parse_cell(cell)
                if value is None:
                    skipped_cells += 1
                    continue
                series.set_value(year, value)

            area = Area(code)
            area.set_measure(series.code, series)
            self.set_area(code, area)

        if skipped_cells:
            logger.warning("Skipped %d empty or non-numeric cells for measure %s.", skipped_cells, measure_code)
        logger.info("Imported measure %s (%d areas in collection).", measure_code, len(self))

    def populate(
        self,
        stream: Any,
        data_type: SourceDataType,
        cols: SourceColumnMapping,
        areas_filter: StringFilter = None,
        measures_filter: StringFilter = None,
        years_filter: YearFilter = None,
    ) -> None:
        """
        Hand the stream to the reader for `data_type`.

        The stream must be open and readable; it is left open for the caller.
        """
        if not _is_ready(stream):
            raise UnexpectedInputError("Input stream is not open or not readable")

        try:
            kind = SourceDataType(data_type)
        except ValueError:
            raise UnexpectedInputError(f"Unexpected data type: {data_type!r}") from None

        if kind is SourceDataType.AUTHORITY_CODE_CSV:
            self.populate_from_authority_code_csv(stream, cols, areas_filter)
        elif kind is SourceDataType.WELSH_STATS_JSON:
            self.populate_from_welsh_stats_json(stream, cols, areas_filter, measures_filter, years_filter)
        elif kind is SourceDataType.AUTHORITY_BY_YEAR_CSV:
            self.populate_from_authority_by_year_csv(stream, cols, areas_filter, measures_filter, years_filter)
        else:
            raise UnexpectedInputError(f"Unexpected data type: {data_type!r}")

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def to_json(self) -> str:
        return dump_json({area.authority_code: area.to_json_tree() for area in self})

    def to_table(self) -> str:
        return "\n".join(area.to_table() for area in self)

    def to_frame(self) -> pd.DataFrame:
        """
        Long-form table: one row per (area, measure, year).

        Areas without measures and series without values produce no rows.
        """
        records: List[Dict[str, Any]] = []
        for area in self:
            for series in area.iter_measures():
                for year, value in series.items():
                    records.append(
                        {
                            "authority_code": area.authority_code,
                            "name_eng": area.names.get("eng"),
                            "name_cym": area.names.get("cym"),
                            "measure": series.code,
                            "label": series.label,
                            "year": year,
                            "value": value,
                        }
                    )

        if not records:
            return pd.DataFrame(columns=FRAME_COLUMNS)

        df = pd.DataFrame.from_records(records, columns=FRAME_COLUMNS)
        return df.sort_values(["authority_code", "measure", "year"], ignore_index=True)

    def __str__(self) -> str:
        return self.to_table()
