from __future__ import annotations

import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Sequence, Set, Tuple, Union

import logging

from statswales.core.areas import AreaCollection
from statswales.core.datasets import AREAS, DatasetSource
from statswales.core.errors import StatsWalesError
from statswales.core.input_source import InputFile

logger = logging.getLogger(__name__)


@dataclass
class ImportFilters:
    """
    What to keep while importing.

    Empty sets mean "everything"; years (0, 0) means every year, otherwise
    an inclusive (first, last) range.
    """
    areas: Set[str] = field(default_factory=set)
    measures: Set[str] = field(default_factory=set)
    years: Tuple[int, int] = (0, 0)


def import_dataset(
    collection: AreaCollection,
    directory: Union[str, Path],
    dataset: DatasetSource,
    filters: ImportFilters,
) -> None:
    source = InputFile(Path(directory) / dataset.file)
    t0 = time.perf_counter()
    with source.open() as stream:
        collection.populate(
            stream,
            dataset.data_type,
            dataset.cols,
            areas_filter=filters.areas,
            measures_filter=filters.measures,
            years_filter=filters.years,
        )
    logger.info("Imported dataset %s from %s in %.2fs", dataset.code, source.source, time.perf_counter() - t0)


def load_areas(
    collection: AreaCollection,
    directory: Union[str, Path],
    filters: ImportFilters,
) -> None:
    """
    Import areas.csv (codes plus English/Welsh names).

    Errors propagate: without the area list there is nothing to report on.
    """
    import_dataset(collection, directory, AREAS, filters)


def load_datasets(
    collection: AreaCollection,
    directory: Union[str, Path],
    datasets: Sequence[DatasetSource],
    filters: ImportFilters,
) -> List[str]:
    """
    Import each dataset in turn into `collection`.

    Key behavior:
      - A dataset that fails (missing file, malformed row, ...) is logged and
        skipped; the remaining datasets still load.
      - Rows committed before a failure inside a dataset stay in the collection.

    Returns the codes of the datasets that failed.
    """
    failed: List[str] = []
    for dataset in datasets:
        try:
            import_dataset(collection, directory, dataset, filters)
        except StatsWalesError as exc:
            logger.error("Error importing dataset: %s\n%s", dataset.code, exc)
            failed.append(dataset.code)
    return failed
