#!/usr/bin/env python3
"""
Command line front end: import StatsWales exports and print them.

Examples:
  statswales -d popden -a W06000011 -y 1991-1993
  statswales -d complete-pop,complete-area -m pop,area --json
  statswales --dir ./datasets --csv > merged.csv

Areas, measures and datasets are comma-separated lists; "all" (or leaving the
option out) means no restriction. Years are YYYY or YYYY-ZZZZ, inclusive; 0
in either position means every year.
"""
from __future__ import annotations

import argparse
import logging
import re
import sys
from typing import List, Optional, Sequence, Set, Tuple

from statswales.config import APP_NAME, APP_VERSION, DATASETS_DIR, LOG_FORMAT, LOG_LEVEL
from statswales.core.areas import AreaCollection
from statswales.core.datasets import DATASETS, DatasetSource, dataset_codes, get_dataset
from statswales.core.errors import InvalidArgumentError, StatsWalesError
from statswales.core.loader import ImportFilters, load_areas, load_datasets

logger = logging.getLogger(__name__)

ALL_KEYWORD = "all"

_YEAR = re.compile(r"^[0-9]+$")


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------

def _split_list(value: Optional[str]) -> List[str]:
    if value is None:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def parse_datasets_arg(value: Optional[str]) -> List[DatasetSource]:
    parts = _split_list(value)
    if not parts or any(p.lower() == ALL_KEYWORD for p in parts):
        return list(DATASETS)
    return [get_dataset(p) for p in parts]


def parse_filter_arg(value: Optional[str]) -> Set[str]:
    """Areas / measures option: empty set when omitted or containing "all"."""
    parts = _split_list(value)
    if any(p.lower() == ALL_KEYWORD for p in parts):
        return set()
    return set(parts)


def _is_four_digit(year: int) -> bool:
    return 999 < year < 10000


def parse_years_arg(value: Optional[str]) -> Tuple[int, int]:
    if value is None or not value.strip():
        return 0, 0

    text = value.strip()
    if _YEAR.match(text):
        year = int(text)
        if year == 0:
            return 0, 0
        if _is_four_digit(year):
            return year, year
        raise InvalidArgumentError("Invalid input for years argument")

    first, sep, last = text.partition("-")
    if not sep or not _YEAR.match(first) or not _YEAR.match(last):
        raise InvalidArgumentError("Invalid input for years argument")

    start, end = int(first), int(last)
    if start == 0 or end == 0:
        return 0, 0
    if _is_four_digit(start) and _is_four_digit(end):
        return start, end
    raise InvalidArgumentError("Invalid input for years argument")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="statswales",
        description=f"{APP_NAME} {APP_VERSION}: parse official Welsh Government statistics data files.",
    )
    parser.add_argument(
        "--dir",
        default=str(DATASETS_DIR),
        help="Directory holding the input data files (default: %(default)s)",
    )
    parser.add_argument(
        "-d", "--datasets",
        help="Comma-separated dataset codes to import; omit or 'all' for every dataset. "
             f"Known codes: {', '.join(dataset_codes())}",
    )
    parser.add_argument(
        "-a", "--areas",
        help="Comma-separated authority codes to import; omit or 'all' for every area",
    )
    parser.add_argument(
        "-m", "--measures",
        help="Comma-separated measure codes to import; omit or 'all' for every measure",
    )
    parser.add_argument(
        "-y", "--years",
        default="0",
        help="A single year (YYYY) or an inclusive range (YYYY-ZZZZ); 0 for every year",
    )

    output = parser.add_mutually_exclusive_group()
    output.add_argument("-j", "--json", action="store_true", help="Print the output as JSON instead of tables")
    output.add_argument("--csv", action="store_true", help="Print the output as long-form CSV")

    parser.add_argument(
        "--log-level",
        default=LOG_LEVEL,
        choices=["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"],
        type=str.upper,
        help="Logging verbosity on stderr (default: %(default)s)",
    )
    return parser


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def run(args: argparse.Namespace, parser: argparse.ArgumentParser) -> int:
    try:
        datasets = parse_datasets_arg(args.datasets)
        filters = ImportFilters(
            areas=parse_filter_arg(args.areas),
            measures=parse_filter_arg(args.measures),
            years=parse_years_arg(args.years),
        )
    except StatsWalesError as exc:
        parser.error(str(exc))

    logger.info(
        "Importing %s (areas=%s, measures=%s, years=%s)",
        [d.code for d in datasets], sorted(filters.areas), sorted(filters.measures), filters.years,
    )

    collection = AreaCollection()
    try:
        load_areas(collection, args.dir, filters)
    except StatsWalesError as exc:
        print(f"Error importing areas: {exc}", file=sys.stderr)
        return 1

    failed = load_datasets(collection, args.dir, datasets, filters)
    if failed:
        logger.warning("%d dataset(s) failed to import: %s", len(failed), ", ".join(failed))

    if args.json:
        print(collection.to_json())
    elif args.csv:
        sys.stdout.write(collection.to_frame().to_csv(index=False))
    else:
        print(collection.to_table())
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level, format=LOG_FORMAT, stream=sys.stderr)
    return run(args, parser)


if __name__ == "__main__":
    sys.exit(main())
