"""
Change-tracked access to the province store and the save pipeline on top of it.

Lifecycle rules:
  - Added dominates Modified: updating an Added province keeps it Added.
  - Updating a Deleted province raises EntityDeletedError.
  - Adding a province under a Deleted identifier makes it Modified, so its
    on-disk records are rewritten rather than removed.
  - Deleting an Added province forgets it entirely; nothing is written.
"""

import logging
import threading
from typing import Callable, Dict, List, Optional, Union

from core.change_tracker import ChangeTracker
from core.errors import EntityDeletedError
from core.province_writer import ProvinceFileWriter
from core.transaction_manager import TransactionManager
from entities.entity_state import EntityState
from entities.province import ProvinceInfo
from entities.repository import ProvinceRepository


class TrackedProvinceRepository(ProvinceRepository):
    """Wraps a repository and records every mutation in a ChangeTracker."""

    def __init__(
        self,
        inner: ProvinceRepository,
        tracker: ChangeTracker,
        lock: Optional[threading.RLock] = None,
    ):
        self._inner = inner
        self._tracker = tracker
        self._lock = lock or threading.RLock()

    # --- Queries pass straight through ---

    def get_by_id(self, province_id: str) -> Optional[ProvinceInfo]:
        return self._inner.get_by_id(province_id)

    def get_all(self) -> List[ProvinceInfo]:
        return self._inner.get_all()

    def get_all_as_dict(self) -> Dict[str, ProvinceInfo]:
        return self._inner.get_all_as_dict()

    def find(self, predicate: Callable[[ProvinceInfo], bool]) -> List[ProvinceInfo]:
        return self._inner.find(predicate)

    def exists(self, province_id: str) -> bool:
        return self._inner.exists(province_id)

    def get_state(self, province_id: str) -> EntityState:
        return self._tracker.get_state(province_id)

    # --- Tracked mutations ---

    def add(self, province: ProvinceInfo) -> None:
        with self._lock:
            state = self._tracker.get_state(province.id)
            if state == EntityState.DELETED and province.origin_name is None:
                # The deleted province's records are still on disk under this name
                province.origin_name = self._tracker.get_entity(province.id).origin_name
            if state == EntityState.DELETED or (
                state == EntityState.UNCHANGED and self._inner.exists(province.id)
            ):
                new_state = EntityState.MODIFIED
            elif state == EntityState.MODIFIED:
                new_state = EntityState.MODIFIED
            else:
                new_state = EntityState.ADDED
            self._inner.add(province)
            self._tracker.track(province, new_state)
            logging.debug("Province %s tracked as %s", province.id, new_state.value)

    def update(self, province: ProvinceInfo) -> None:
        with self._lock:
            state = self._tracker.get_state(province.id)
            if state == EntityState.DELETED:
                raise EntityDeletedError(f"Province '{province.id}' is marked for deletion.")
            self._inner.update(province)
            if state != EntityState.ADDED:
                state = EntityState.MODIFIED
            self._tracker.track(province, state)

    def delete(self, province: Union[str, ProvinceInfo]) -> None:
        province_id = province.id if isinstance(province, ProvinceInfo) else province
        with self._lock:
            state = self._tracker.get_state(province_id)
            if state == EntityState.DELETED:
                return
            stored = self._inner.get_by_id(province_id)
            if stored is None:
                raise KeyError(f"Province with id '{province_id}' not found.")
            self._inner.delete(province_id)
            if state == EntityState.ADDED:
                self._tracker.untrack(province_id)
                logging.debug("Province %s was added and deleted before saving, forgetting it.", province_id)
            else:
                self._tracker.track(stored, EntityState.DELETED)


class UnitOfWork:
    """Coordinates the tracked repository, the file writer and file transactions.

    Attributes:
        provinces: The tracked repository all mutations must go through.
    """

    def __init__(
        self,
        repository: ProvinceRepository,
        writer: ProvinceFileWriter,
        transaction_manager: Optional[TransactionManager] = None,
    ):
        self._repository = repository
        self._writer = writer
        self._transaction_manager = transaction_manager
        self._tracker: ChangeTracker = ChangeTracker(lambda p: p.id)
        self._lock = threading.RLock()
        self.provinces = TrackedProvinceRepository(repository, self._tracker, self._lock)

    @property
    def tracker(self) -> ChangeTracker:
        return self._tracker

    def has_changes(self) -> bool:
        return self._tracker.has_changes()

    def change_count(self) -> int:
        return self._tracker.change_count()

    def get_changed(self) -> List[ProvinceInfo]:
        return self._tracker.get_changed()

    def change_summary(self) -> Dict[str, int]:
        """Counts of pending changes per lifecycle state."""
        return {
            "added": len(self._tracker.get_added()),
            "modified": len(self._tracker.get_modified()),
            "deleted": len(self._tracker.get_deleted()),
        }

    def save_changes(self) -> int:
        """Writes all pending changes to disk.

        Returns:
            The number of provinces saved (0 if there was nothing to save).

        Raises:
            Any exception raised while backing up or writing. Files are rolled
            back first and the pending changes stay tracked.
        """
        with self._lock:
            if not self._tracker.has_changes():
                logging.info("No changes to save.")
                return 0
            upserts = self._tracker.get_added() + self._tracker.get_modified()
            deletes = self._tracker.get_deleted()
            count = len(upserts) + len(deletes)
            logging.info(
                "Saving %d provinces (%d added/modified, %d deleted)", count, len(upserts), len(deletes)
            )

            transaction = self._transaction_manager
            if transaction is None:
                self._writer.save(upserts, deletes)
            else:
                try:
                    transaction.begin()
                    transaction.backup_files(self._writer.target_files())
                    self._writer.save(upserts, deletes, transaction)
                    transaction.commit()
                except Exception:
                    logging.exception("Saving failed, rolling back.")
                    if transaction.in_transaction:
                        transaction.rollback()
                    raise

            for province in upserts:
                province.mark_saved()
            for province in deletes:
                self._tracker.untrack(province)
            self._tracker.accept_changes()
            logging.info("Saved %d provinces.", count)
            return count

    def discard_changes(self) -> None:
        """Forgets all pending changes without touching the in-memory provinces."""
        with self._lock:
            self._tracker.clear()
