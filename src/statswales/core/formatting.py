"""
Shared rendering helpers for the fixed-width table report and the JSON export.

Table layout rules:
  - every column of one measure block shares a single width
  - width = integer part of the widest stored value (sign included) + 7,
    where 7 covers the decimal point and six fraction digits
  - cells are right aligned and separated by one space
"""
from __future__ import annotations

import json
from typing import Any, Dict, Iterable

DECIMAL_PLACES = 6
FRACTION_WIDTH = DECIMAL_PLACES + 1  # "." + six digits

NO_NAME_PLACEHOLDER = "Unnamed"
NO_MEASURES_PLACEHOLDER = "<no measures>"
NO_DATA_PLACEHOLDER = "<no data>"

STAT_HEADINGS = ("Average", "Diff.", "% Diff.")


def integer_width(value: float) -> int:
    """Number of characters before the decimal point, minus sign included."""
    return len(f"{value:.{DECIMAL_PLACES}f}") - FRACTION_WIDTH


def column_width(values: Iterable[float]) -> int:
    widest = max((integer_width(v) for v in values), default=1)
    return max(widest, 1) + FRACTION_WIDTH


def format_year(year: int, width: int) -> str:
    return f"{year:>{width}d}"


def format_value(value: float, width: int) -> str:
    return f"{value:>{width}.{DECIMAL_PLACES}f}"


def format_heading(heading: str, width: int) -> str:
    return f"{heading:>{width}s}"


def join_cells(cells: Iterable[str]) -> str:
    return " ".join(cells)


def display_name(names: Dict[str, str]) -> str:
    """
    Pick the label printed on an area's header line.

    English and Welsh together when both exist ("Swansea / Abertawe"),
    otherwise whichever single one is present, otherwise the placeholder.
    """
    eng = names.get("eng")
    cym = names.get("cym")
    if eng is not None and cym is not None:
        return f"{eng} / {cym}"
    if eng is not None:
        return eng
    if cym is not None:
        return cym
    return NO_NAME_PLACEHOLDER


def dump_json(tree: Dict[str, Any]) -> str:
    # Compact output, matching the StatsWales API style.
    if not tree:
        return "{}"
    return json.dumps(tree, ensure_ascii=False, allow_nan=False, separators=(",", ":"))
