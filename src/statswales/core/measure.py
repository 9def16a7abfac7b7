from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from statswales.core.errors import NotFoundError
from statswales.core.formatting import (
    NO_DATA_PLACEHOLDER,
    STAT_HEADINGS,
    column_width,
    format_heading,
    format_value,
    format_year,
    join_cells,
)


@dataclass
class MeasureSeries:
    """
    One statistical indicator (e.g. population) for one area, as year -> value.

    The codename is lowercased on construction so lookups by code never depend
    on how a source file spells it. Iteration helpers always walk years in
    ascending order regardless of insertion order.
    """
    code: str
    label: str
    values: Dict[int, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.code = str(self.code).lower()
        self.values = {int(y): float(v) for y, v in self.values.items()}

    # ------------------------------------------------------------------
    # Value store
    # ------------------------------------------------------------------

    def set_label(self, label: str) -> None:
        self.label = label

    def get_value(self, year: int) -> float:
        try:
            return self.values[int(year)]
        except KeyError:
            raise NotFoundError(f"No value found for year {year}") from None

    def set_value(self, year: int, value: float) -> None:
        self.values[int(year)] = float(value)

    def has_value(self, year: int) -> bool:
        return int(year) in self.values

    def years(self) -> List[int]:
        return sorted(self.values)

    def items(self) -> List[Tuple[int, float]]:
        return sorted(self.values.items())

    def size(self) -> int:
        return len(self.values)

    def __len__(self) -> int:
        return len(self.values)

    def copy(self) -> "MeasureSeries":
        return MeasureSeries(self.code, self.label, dict(self.values))

    def merge(self, other: "MeasureSeries") -> "MeasureSeries":
        """
        Fold `other` into this series.

        Years present in both take other's value; years only in self survive.
        The label and code of self are left untouched.
        """
        for year, value in other.values.items():
            self.values[year] = value
        return self

    # ------------------------------------------------------------------
    # Derived statistics
    # ------------------------------------------------------------------

    def get_difference(self) -> float:
        if not self.values:
            return 0.0
        ordered = self.items()
        return ordered[-1][1] - ordered[0][1]

    def get_difference_as_percentage(self) -> float:
        """
        Change from first to last year relative to the first year, in percent.

        A first value of 0 gives inf/-inf (or nan when the change is also 0),
        following IEEE-754 instead of raising ZeroDivisionError.
        """
        if not self.values:
            return 0.0
        first = self.items()[0][1]
        difference = self.get_difference()
        if first == 0:
            if difference == 0 or math.isnan(difference):
                return float("nan")
            return float("inf") if difference > 0 else float("-inf")
        # + 0.0 turns -0.0 into 0.0 so tables never show "-0.000000"
        return difference / first * 100 + 0.0

    def get_average(self) -> float:
        if not self.values:
            return 0.0
        return sum(self.values.values()) / len(self.values)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def to_table(self) -> str:
        header = f"{self.label} ({self.code})"
        if not self.values:
            return f"{header}\n{NO_DATA_PLACEHOLDER}"

        ordered = self.items()
        width = column_width(v for _, v in ordered)
        stats = (self.get_average(), self.get_difference(), self.get_difference_as_percentage())

        year_row = [format_year(y, width) for y, _ in ordered]
        year_row += [format_heading(h, width) for h in STAT_HEADINGS]

        value_row = [format_value(v, width) for _, v in ordered]
        value_row += [format_value(s, width) for s in stats]

        return "\n".join([header, join_cells(year_row), join_cells(value_row)])

    def to_json_tree(self) -> Dict[str, float]:
        # JSON object keys must be strings.
        return {str(year): value for year, value in self.items()}

    def __str__(self) -> str:
        return self.to_table()
