"""Unit tests for the value-list definition cache."""

import pytest

from core.definition_cache import DefinitionCache, DefinitionSet, load_definition_cache


@pytest.fixture
def cache(base_dir, mod_dir) -> DefinitionCache:
    return load_definition_cache(base_dir, mod_dir)


def test_combines_base_and_mod(cache):
    cultures = cache.get("cultures")
    assert cultures.base == {"swedish", "danish"}
    assert cultures.modded == {"gotlandic"}
    assert cultures.combined == ["danish", "gotlandic", "swedish"]
    assert "Swedish" in cultures


def test_raw_materials_use_category_filter(cache):
    assert cache.get("raw_materials").combined == ["iron"]


def test_missing_category_directory_is_empty(cache):
    assert cache.get("topography").combined == []
    assert cache.suggest("topography", "hills") == []


def test_unknown_category_raises(cache):
    with pytest.raises(KeyError):
        cache.get("weather")


def test_combined_collapses_case_duplicates():
    definitions = DefinitionSet("goods", base={"Iron"}, modded={"iron", "wool"})
    assert definitions.combined == ["Iron", "wool"]


def test_suggest_ranks_exact_and_prefix_first():
    definitions = DefinitionSet("cultures", base={"swedish", "swabian", "danish", "norwegian"})
    assert definitions.suggest("swedish")[0] == "swedish"
    assert definitions.suggest("sw")[:2] == ["swabian", "swedish"]


def test_suggest_fuzzy_match():
    definitions = DefinitionSet("religions", base={"lutheran", "catholic", "orthodox"})
    assert definitions.suggest("luthran")[0] == "lutheran"


def test_suggest_without_query_lists_alphabetically():
    definitions = DefinitionSet("cultures", base={"b", "a", "c"})
    assert definitions.suggest("", limit=2) == ["a", "b"]
