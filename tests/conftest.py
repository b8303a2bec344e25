"""Shared fixtures: a small base game and mod directory tree."""

import os
from typing import Dict

import pytest

BASE_FILES = {
    "in_game/map_data/named_locations/00_default.txt": (
        "stockholm = ABABAB\n"
        "uppsala = CDCDCD\n"
    ),
    "in_game/map_data/location_templates.txt": (
        "ABABAB = { topography = flatland climate = temperate }\n"
        "uppsala = { topography = hills vegetation = forest climate = temperate }\n"
    ),
    "in_game/common/cultures/00_cultures.txt": (
        "swedish = { color = { 10 20 30 } }\n"
        "danish = { color = { 40 50 60 } }\n"
    ),
    "in_game/common/religions/00_religions.txt": "lutheran = { }\ncatholic = { }\n",
    "in_game/common/goods/00_goods.txt": (
        "iron = {\n"
        "\tmethod = mining\n"
        "\tcategory = raw_material\n"
        "}\n"
        "cloth = { category = produced }\n"
    ),
}

MOD_FILES = {
    "in_game/map_data/named_locations/00_named_locations.txt": (
        "# Mod locations\n"
        "stockholm = ABABAB\n"
        "uppsala = CDCDCD\n"
        "visby = EFEFEF\n"
    ),
    "in_game/map_data/location_templates.txt": (
        "# Templates\n"
        "stockholm = { topography = flatland climate = temperate }\n"
        "uppsala = { topography = hills vegetation = forest climate = temperate }\n"
        "visby = { topography = flatland climate = oceanic natural_harbor_suitability = 0.50 }\n"
    ),
    "main_menu/setup/start/06_pops.txt": (
        "locations = {\n"
        "\tstockholm = {\n"
        "\t\tdefine_pop = { type = nobles size = 0.00021 culture = swedish religion = lutheran }\n"
        "\t}\n"
        "\tvisby = {\n"
        "\t\tdefine_pop = { type = peasants size = 0.01000 culture = gotlandic religion = lutheran }\n"
        "\t}\n"
        "}\n"
    ),
    "in_game/common/cultures/mod_cultures.txt": "gotlandic = { color = { 1 2 3 } }\n",
}


def write_files(root, files: Dict[str, str]) -> str:
    """Writes ``relative path -> content`` under ``root`` and returns ``root`` as a string."""
    for relative_path, content in files.items():
        path = os.path.join(str(root), relative_path)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.write(content)
    return str(root)


def read_file(root, relative_path: str) -> str:
    with open(os.path.join(str(root), relative_path), "r", encoding="utf-8", newline="") as f:
        return f.read()


@pytest.fixture
def base_dir(tmp_path) -> str:
    return write_files(tmp_path / "base", BASE_FILES)


@pytest.fixture
def mod_dir(tmp_path) -> str:
    return write_files(tmp_path / "mod", MOD_FILES)
