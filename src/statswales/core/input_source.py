from __future__ import annotations

from pathlib import Path
from typing import TextIO, Union

import logging

from statswales.core.errors import InputSourceError

logger = logging.getLogger(__name__)


class InputFile:
    """
    A StatsWales export on local disk.

    open() hands back a text stream; closing it is the caller's job, so use it
    as a context manager:

        with InputFile(path).open() as stream:
            collection.populate(stream, ...)
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)

    @property
    def source(self) -> str:
        return str(self.path)

    def open(self) -> TextIO:
        logger.debug("Opening %s", self.path)
        try:
            # utf-8-sig drops the BOM that Excel-saved CSVs start with
            return self.path.open("r", encoding="utf-8-sig", newline="")
        except OSError as exc:
            raise InputSourceError(f"Failed to open file {self.source}: {exc}") from exc

    def __repr__(self) -> str:
        return f"InputFile({self.source!r})"
