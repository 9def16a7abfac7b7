from __future__ import annotations

import logging

import pytest

from statswales.core.areas import AreaCollection
from statswales.core.datasets import BIZ, COMPLETE_POP, POPDEN
from statswales.core.errors import InputSourceError
from statswales.core.input_source import InputFile
from statswales.core.loader import ImportFilters, load_areas, load_datasets


def test_input_file_missing_raises_input_source_error(tmp_path):
    source = InputFile(tmp_path / "missing.csv")
    with pytest.raises(InputSourceError, match="missing.csv") as excinfo:
        source.open()
    assert isinstance(excinfo.value, OSError)


def test_input_file_strips_bom(tmp_path):
    path = tmp_path / "bom.csv"
    path.write_bytes("\ufeffcode\n".encode("utf-8"))
    with InputFile(path).open() as stream:
        assert stream.read() == "code\n"


def test_load_areas_reads_names(datasets_dir):
    collection = AreaCollection()
    load_areas(collection, datasets_dir, ImportFilters())

    assert collection.codes() == ["W06000011", "W06000015"]
    assert collection.get_area("W06000015").get_name("cym") == "Caerdydd"


def test_load_areas_missing_file_propagates(tmp_path):
    with pytest.raises(InputSourceError):
        load_areas(AreaCollection(), tmp_path, ImportFilters())


def test_load_datasets_merges_and_reports_failures(datasets_dir, caplog):
    collection = AreaCollection()
    load_areas(collection, datasets_dir, ImportFilters())

    with caplog.at_level(logging.ERROR):
        failed = load_datasets(collection, datasets_dir, [POPDEN, BIZ, COMPLETE_POP], ImportFilters())

    assert failed == ["biz"]
    assert "Error importing dataset: biz" in caplog.text

    swansea = collection.get_area("W06000011")
    assert swansea.names == {"eng": "Swansea", "cym": "Abertawe"}
    # the year-columns CSV loads last and overrides the JSON value for 1992
    assert swansea.get_measure("pop").values == {1991: 230000.0, 1992: 231000.0}
    assert swansea.get_measure("dens").values == {1991: 607.5}
    assert collection.get_area("W06000015").get_measure("pop").values == {1991: 290000.0, 1993: 295000.0}


def test_load_datasets_continues_after_malformed_file(datasets_dir):
    (datasets_dir / POPDEN.file).write_text("{", encoding="utf-8")
    collection = AreaCollection()

    failed = load_datasets(collection, datasets_dir, [POPDEN, COMPLETE_POP], ImportFilters())

    assert failed == ["popden"]
    assert collection.get_area("W06000011").measure_codes() == ["pop"]


def test_filters_apply_to_every_file(datasets_dir):
    filters = ImportFilters(areas={"w06000015"}, years=(1993, 1993))
    collection = AreaCollection()
    load_areas(collection, datasets_dir, filters)
    load_datasets(collection, datasets_dir, [POPDEN, COMPLETE_POP], filters)

    assert collection.codes() == ["W06000015"]
    assert collection.get_area("W06000015").get_measure("pop").values == {1993: 295000.0}


def test_load_datasets_survives_invalid_utf8(datasets_dir, caplog):
    (datasets_dir / COMPLETE_POP.file).write_bytes(b"AuthorityCode,1991\nW1,\xff\xfe\n")
    collection = AreaCollection()

    with caplog.at_level(logging.ERROR):
        failed = load_datasets(collection, datasets_dir, [COMPLETE_POP, POPDEN], ImportFilters())

    assert failed == ["complete-pop"]
    assert "Error importing dataset: complete-pop" in caplog.text
    assert collection.get_area("W06000011").measure_codes() == ["dens", "pop"]
