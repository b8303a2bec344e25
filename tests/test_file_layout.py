"""Unit tests for file category resolution and byte-preserving file I/O."""

import codecs
import os

import pytest

from conftest import write_files
from core.file_io import read_lines, write_content
from core.file_layout import ATTRIBUTES, LOCATIONS, POPULATION, FileLayout


def test_resolution_is_sorted_and_writes_go_to_first(tmp_path):
    root = write_files(
        tmp_path / "mod",
        {
            "main_menu/setup/start/10_pops_extra.txt": "",
            "main_menu/setup/start/06_pops.txt": "",
            "main_menu/setup/start/readme.txt": "",
        },
    )
    layout = FileLayout(root)
    assert [os.path.basename(p) for p in layout.resolve(POPULATION)] == [
        "06_pops.txt",
        "10_pops_extra.txt",
    ]
    assert os.path.basename(layout.write_target(POPULATION)) == "06_pops.txt"


def test_write_targets_default_when_missing(tmp_path):
    layout = FileLayout(str(tmp_path))
    assert layout.resolve(LOCATIONS) == []
    assert layout.resolve(ATTRIBUTES) == []
    assert layout.write_target(LOCATIONS).endswith(os.path.join("named_locations", "00_named_locations.txt"))
    assert layout.write_target(ATTRIBUTES).endswith("location_templates.txt")


def test_unknown_category_raises(tmp_path):
    with pytest.raises(ValueError):
        FileLayout(str(tmp_path)).resolve("weather")


def test_read_write_keeps_bom_and_line_endings(tmp_path):
    path = str(tmp_path / "a.txt")
    with open(path, "wb") as f:
        f.write(codecs.BOM_UTF8 + b"a = 1\r\nb = 2")

    content = read_lines(path)
    assert content.lines == ["a = 1", "b = 2"]
    assert content.has_bom
    assert content.newline == "\r\n"
    assert not content.trailing_newline

    content.lines.append("c = 3")
    write_content(path, content)
    with open(path, "rb") as f:
        assert f.read() == codecs.BOM_UTF8 + b"a = 1\r\nb = 2\r\nc = 3"
