"""Unit tests for TransactionManager."""

import os
import shutil

import pytest

from core.errors import TransactionError
from core.transaction_manager import TransactionManager, TransactionState


def _write(path, text):
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(text)


def _read(path):
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


@pytest.fixture
def manager(tmp_path):
    return TransactionManager(str(tmp_path / "backups"))


def test_begin_rejects_reentry(manager):
    manager.begin()
    assert manager.state == TransactionState.IN_TRANSACTION
    with pytest.raises(TransactionError):
        manager.begin()


def test_operations_require_transaction(manager, tmp_path):
    with pytest.raises(TransactionError):
        manager.backup(str(tmp_path / "a.txt"))
    with pytest.raises(TransactionError):
        manager.commit()
    with pytest.raises(TransactionError):
        manager.rollback()


def test_backup_of_missing_file_is_noop(manager, tmp_path):
    manager.begin()
    assert manager.backup(str(tmp_path / "missing.txt")) is None
    assert manager.backed_up_files == []


def test_commit_deletes_backups(manager, tmp_path):
    path = str(tmp_path / "a.txt")
    _write(path, "original")
    manager.begin()
    backup_path = manager.backup(path)
    assert os.path.isfile(backup_path)

    _write(path, "changed")
    manager.commit()

    assert manager.state == TransactionState.COMMITTED
    assert not os.path.exists(backup_path)
    assert _read(path) == "changed"


def test_rollback_restores_and_removes_created_files(manager, tmp_path):
    first = str(tmp_path / "one" / "data.txt")
    second = str(tmp_path / "two" / "data.txt")
    created = str(tmp_path / "new.txt")
    _write(first, "first")
    _write(second, "second")

    manager.begin()
    manager.backup_files([first, second])
    manager.track_created(created)
    _write(first, "broken")
    _write(second, "broken")
    _write(created, "new")
    manager.rollback()

    assert manager.state == TransactionState.ROLLED_BACK
    assert _read(first) == "first"
    assert _read(second) == "second"
    assert not os.path.exists(created)


def test_rollback_attempts_every_file(manager, tmp_path, monkeypatch):
    first = str(tmp_path / "a.txt")
    second = str(tmp_path / "b.txt")
    _write(first, "a")
    _write(second, "b")
    manager.begin()
    manager.backup_files([first, second])
    _write(first, "x")
    _write(second, "y")

    real_copy = shutil.copy2

    def flaky_copy(src, dst, *args, **kwargs):
        if os.path.abspath(dst) == os.path.abspath(first):
            raise OSError("disk says no")
        return real_copy(src, dst, *args, **kwargs)

    monkeypatch.setattr("core.transaction_manager.shutil.copy2", flaky_copy)
    manager.rollback()

    assert _read(first) == "x"
    assert _read(second) == "b"
    assert manager.state == TransactionState.ROLLED_BACK


def test_can_begin_again_after_commit(manager):
    manager.begin()
    manager.commit()
    manager.begin()
    assert manager.in_transaction
