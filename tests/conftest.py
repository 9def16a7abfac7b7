from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List

import pytest

AREAS_CSV = (
    "Local authority code,Name (eng),Name (cym)\n"
    "W06000011,Swansea,Abertawe\n"
    "W06000015,Cardiff,Caerdydd\n"
)

COMPLETE_POP_CSV = (
    "AuthorityCode,1991,1992,1993\r\n"
    "W06000011,230000,231000,\r\n"
    "W06000015,290000,,295000\r\n"
)


def popden_row(code: str, measure: str, year: str, value: Any, name: str = "Swansea") -> Dict[str, Any]:
    return {
        "Localauthority_Code": code,
        "Localauthority_ItemName_ENG": name,
        "Measure_Code": measure,
        "Measure_ItemName_ENG": {"pop": "Population", "dens": "Population density"}.get(measure.lower(), measure),
        "Year_Code": year,
        "Data": value,
    }


@pytest.fixture
def popden_rows() -> List[Dict[str, Any]]:
    return [
        popden_row("W06000011", "POP", "1991", 230000),
        popden_row("W06000011", "POP", "1992", "231000.5"),
        popden_row("W06000011", "dens", "1991", 607.5),
        popden_row("W06000015", "pop", "1991", 290000, name="Cardiff"),
    ]


@pytest.fixture
def datasets_dir(tmp_path: Path, popden_rows: List[Dict[str, Any]]) -> Path:
    """A directory laid out like the StatsWales download folder."""
    (tmp_path / "areas.csv").write_text(AREAS_CSV, encoding="utf-8")
    (tmp_path / "complete-popu1009-pop.csv").write_text(COMPLETE_POP_CSV, encoding="utf-8")
    envelope = {"odata.metadata": "https://example.invalid/$metadata", "value": popden_rows}
    (tmp_path / "popu1009.json").write_text(json.dumps(envelope), encoding="utf-8")
    return tmp_path
