"""Unit tests for the ProvinceRepository interface and InMemoryProvinceDB implementation."""

import os
from decimal import Decimal

import pytest

from conftest import BASE_FILES, write_files
from core.errors import MissingFileError, StructuralParseError
from entities.in_memory_province_db import InMemoryProvinceDB
from entities.province import ProvinceInfo, ProvinceLocation
from entities.repository import ProvinceRepository

# --- Test Fixtures ---


@pytest.fixture
def sample_provinces():
    return [
        ProvinceInfo(id="ABABAB", name="stockholm", location_info=ProvinceLocation(topography="flatland")),
        ProvinceInfo(id="CDCDCD", name="uppsala", location_info=ProvinceLocation(topography="hills")),
    ]


@pytest.fixture
def db(sample_provinces) -> InMemoryProvinceDB:
    return InMemoryProvinceDB.from_data(sample_provinces)


# --- Tests for from_data and queries ---


def test_implements_interface(db):
    assert isinstance(db, ProvinceRepository)


def test_from_data_rejects_duplicate_ids(sample_provinces):
    duplicate = ProvinceInfo(id="ababab", name="other")
    with pytest.raises(ValueError, match="Duplicate province id"):
        InMemoryProvinceDB.from_data(sample_provinces + [duplicate])


def test_get_by_id_is_case_insensitive(db):
    assert db.get_by_id("ababab").name == "stockholm"
    assert db.get_by_id("000000") is None
    assert db.exists("CdCdCd")


def test_get_all_and_find(db):
    assert {p.name for p in db.get_all()} == {"stockholm", "uppsala"}
    assert [p.id for p in db.find(lambda p: p.location_info.topography == "hills")] == ["CDCDCD"]
    assert set(db.get_all_as_dict()) == {"ABABAB", "CDCDCD"}


def test_add_update_delete(db):
    db.add(ProvinceInfo(id="EFEFEF", name="visby"))
    assert db.exists("EFEFEF")

    replacement = ProvinceInfo(id="EFEFEF", name="wisby")
    db.update(replacement)
    assert db.get_by_id("efefef").name == "wisby"

    db.delete("EFEFEF")
    assert not db.exists("EFEFEF")
    db.delete(db.get_by_id("ABABAB"))
    assert not db.exists("ABABAB")


def test_update_missing_raises(db):
    with pytest.raises(KeyError):
        db.update(ProvinceInfo(id="000000", name="nowhere"))


# --- Tests for from_directories ---


def test_from_directories_layers_mod_over_base(base_dir, mod_dir):
    db = InMemoryProvinceDB.from_directories(base_dir, mod_dir)

    assert {p.id for p in db.get_all()} == {"ABABAB", "CDCDCD", "EFEFEF"}
    stockholm = db.get_by_id("ABABAB")
    assert stockholm.name == "stockholm"
    assert stockholm.location_info.climate == "temperate"
    assert stockholm.pop_info.pops[0].size == Decimal("0.00021")
    visby = db.get_by_id("EFEFEF")
    assert visby.location_info.natural_harbor_suitability == "0.50"
    assert visby.pop_info.pops[0].culture == "gotlandic"


def test_base_provinces_load_without_pops(base_dir, tmp_path):
    empty_mod = tmp_path / "empty_mod"
    empty_mod.mkdir()
    write_files(
        tmp_path / "base",
        {
            "main_menu/setup/start/06_pops.txt": (
                "locations = { stockholm = { define_pop = { type = t size = 1 culture = c religion = r } } }\n"
            )
        },
    )

    db = InMemoryProvinceDB.from_directories(base_dir, str(empty_mod))

    assert {p.name for p in db.get_all()} == {"stockholm", "uppsala"}
    assert all(not p.pop_info.pops for p in db.get_all())


def test_mod_only_load(mod_dir):
    db = InMemoryProvinceDB.from_directories(None, mod_dir)
    assert len(db.get_all()) == 3
    assert db.base_layout is None


def test_missing_mod_dir_raises(base_dir, tmp_path):
    with pytest.raises(MissingFileError):
        InMemoryProvinceDB.from_directories(base_dir, str(tmp_path / "nope"))


def test_missing_base_templates_raises(tmp_path, mod_dir):
    files = dict(BASE_FILES)
    del files["in_game/map_data/location_templates.txt"]
    base = write_files(tmp_path / "broken_base", files)
    with pytest.raises(MissingFileError):
        InMemoryProvinceDB.from_directories(base, mod_dir)


def test_malformed_mod_file_raises(base_dir, mod_dir):
    templates = os.path.join(mod_dir, "in_game/map_data/location_templates.txt")
    with open(templates, "a", encoding="utf-8") as f:
        f.write("gotland = { topography = hills\n")
    with pytest.raises(StructuralParseError):
        InMemoryProvinceDB.from_directories(base_dir, mod_dir)


def test_later_named_location_files_override_earlier(base_dir, mod_dir):
    write_files(
        mod_dir,
        {"in_game/map_data/named_locations/99_overrides.txt": "wisby = EFEFEF\n"},
    )
    db = InMemoryProvinceDB.from_directories(base_dir, mod_dir)
    assert db.get_by_id("EFEFEF").name == "wisby"
