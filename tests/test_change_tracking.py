"""Unit tests for ChangeTracker and the lifecycle rules of TrackedProvinceRepository."""

import pytest

from core.change_tracker import ChangeTracker
from core.errors import EntityDeletedError
from core.unit_of_work import TrackedProvinceRepository
from entities.entity_state import EntityState
from entities.in_memory_province_db import InMemoryProvinceDB
from entities.province import ProvinceInfo

# --- Test Fixtures ---


@pytest.fixture
def tracker():
    return ChangeTracker(lambda p: p.id)


@pytest.fixture
def repo(tracker):
    db = InMemoryProvinceDB.from_data(
        [ProvinceInfo(id="ABABAB", name="stockholm", origin_name="stockholm")]
    )
    return TrackedProvinceRepository(db, tracker)


# --- ChangeTracker ---


def test_untracked_is_unchanged(tracker):
    assert tracker.get_state("ABABAB") == EntityState.UNCHANGED
    assert not tracker.is_tracked("ABABAB")
    assert not tracker.has_changes()


def test_tracker_statistics(tracker):
    a = ProvinceInfo(id="A1", name="a")
    b = ProvinceInfo(id="B1", name="b")
    c = ProvinceInfo(id="C1", name="c")
    tracker.track(a, EntityState.ADDED)
    tracker.track(b, EntityState.MODIFIED)
    tracker.track(c, EntityState.DELETED)

    assert tracker.change_count() == 3
    assert tracker.get_added() == [a]
    assert tracker.get_modified() == [b]
    assert tracker.get_deleted() == [c]
    assert set(tracker.get_changed_as_dict()) == {"A1", "B1", "C1"}
    assert tracker.get_state("a1") == EntityState.ADDED


def test_accept_changes_and_untrack(tracker):
    a = ProvinceInfo(id="A1", name="a")
    tracker.track(a, EntityState.MODIFIED)
    tracker.accept_changes()
    assert tracker.is_tracked(a)
    assert tracker.get_state(a) == EntityState.UNCHANGED
    assert not tracker.has_changes()

    tracker.untrack("A1")
    assert not tracker.is_tracked(a)


# --- Lifecycle rules ---


def test_add_new_province_is_added(repo, tracker):
    repo.add(ProvinceInfo(id="EFEFEF", name="visby"))
    assert tracker.get_state("EFEFEF") == EntityState.ADDED


def test_update_existing_is_modified(repo, tracker):
    province = repo.get_by_id("ABABAB")
    province.location_info.topography = "hills"
    repo.update(province)
    assert tracker.get_state("ABABAB") == EntityState.MODIFIED


def test_added_dominates_modified(repo, tracker):
    province = ProvinceInfo(id="EFEFEF", name="visby")
    repo.add(province)
    repo.update(province)
    assert tracker.get_state("EFEFEF") == EntityState.ADDED


def test_adding_over_stored_province_is_modified(repo, tracker):
    repo.add(ProvinceInfo(id="ABABAB", name="stockholm"))
    assert tracker.get_state("ABABAB") == EntityState.MODIFIED


def test_update_after_delete_raises(repo):
    province = repo.get_by_id("ABABAB")
    repo.delete("ABABAB")
    with pytest.raises(EntityDeletedError):
        repo.update(province)


def test_deleted_stays_addressable_until_save(repo, tracker):
    repo.delete("ABABAB")
    assert not repo.exists("ABABAB")
    assert tracker.get_state("ABABAB") == EntityState.DELETED
    assert tracker.get_entity("ABABAB").name == "stockholm"


def test_readd_after_delete_is_modified_and_keeps_origin(repo, tracker):
    repo.delete("ABABAB")
    replacement = ProvinceInfo(id="ABABAB", name="sthlm")
    repo.add(replacement)
    assert tracker.get_state("ABABAB") == EntityState.MODIFIED
    assert replacement.origin_name == "stockholm"


def test_delete_of_added_untracks(repo, tracker):
    repo.add(ProvinceInfo(id="EFEFEF", name="visby"))
    repo.delete("EFEFEF")
    assert not tracker.is_tracked("EFEFEF")
    assert not repo.exists("EFEFEF")
    assert not tracker.has_changes()


def test_delete_unknown_raises(repo):
    with pytest.raises(KeyError):
        repo.delete("000000")
