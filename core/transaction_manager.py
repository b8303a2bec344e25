"""
File-level transactions: back up every file before it is written, then either
discard the backups (commit) or copy them back (rollback).
"""

import logging
import os
import shutil
from enum import Enum
from typing import Dict, List, Optional

from core.errors import TransactionError


class TransactionState(Enum):
    IDLE = "idle"
    IN_TRANSACTION = "in_transaction"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


class TransactionManager:
    """Backs up files into ``backup_dir`` and restores them on failure.

    Only one transaction may be open at a time. A committed or rolled back
    manager can begin a new transaction.
    """

    def __init__(self, backup_dir: str):
        self.backup_dir = backup_dir
        self.state = TransactionState.IDLE
        self._backups: Dict[str, str] = {}  # original path -> backup path
        self._created: List[str] = []

    @property
    def in_transaction(self) -> bool:
        return self.state == TransactionState.IN_TRANSACTION

    def begin(self) -> None:
        if self.in_transaction:
            raise TransactionError("A transaction is already in progress.")
        os.makedirs(self.backup_dir, exist_ok=True)
        self._backups = {}
        self._created = []
        self.state = TransactionState.IN_TRANSACTION
        logging.info("Transaction started, backups go to %s", self.backup_dir)

    def _require_transaction(self):
        if not self.in_transaction:
            raise TransactionError("No transaction in progress. Call begin() first.")

    def backup(self, file_path: str) -> Optional[str]:
        """Copies ``file_path`` into the backup directory.

        Does nothing if the file does not exist or is already backed up in
        this transaction. Returns the backup path, if any.
        """
        self._require_transaction()
        path = os.path.abspath(file_path)
        if path in self._backups:
            return self._backups[path]
        if not os.path.isfile(path):
            logging.debug("Nothing to back up at %s", path)
            return None
        # Files from different directories may share a base name
        backup_name = f"{len(self._backups):03d}_{os.path.basename(path)}.backup"
        backup_path = os.path.join(self.backup_dir, backup_name)
        shutil.copy2(path, backup_path)
        self._backups[path] = backup_path
        logging.info("Backed up %s", path)
        return backup_path

    def backup_files(self, file_paths) -> None:
        for file_path in file_paths:
            self.backup(file_path)

    def track_created(self, file_path: str) -> None:
        """Registers a file the transaction creates, so rollback can remove it."""
        self._require_transaction()
        path = os.path.abspath(file_path)
        if path not in self._backups and path not in self._created:
            self._created.append(path)

    @property
    def backed_up_files(self) -> List[str]:
        return list(self._backups)

    def commit(self) -> None:
        self._require_transaction()
        self._clear_backups()
        self.state = TransactionState.COMMITTED
        logging.info("Transaction committed.")

    def rollback(self) -> None:
        """Restores every backed-up file and removes files the transaction created.

        Each file is attempted even if an earlier one fails; failures are logged.
        """
        self._require_transaction()
        failures = 0
        for path, backup_path in self._backups.items():
            try:
                shutil.copy2(backup_path, path)
                logging.info("Restored %s", path)
            except OSError:
                failures += 1
                logging.exception("Failed to restore %s from %s", path, backup_path)
        for path in self._created:
            try:
                if os.path.exists(path):
                    os.remove(path)
                    logging.info("Removed %s", path)
            except OSError:
                failures += 1
                logging.exception("Failed to remove created file %s", path)
        if failures:
            # Keep the backups around so they can be restored by hand
            logging.error(
                "Rollback finished with %d failure(s); backups left in %s", failures, self.backup_dir
            )
        else:
            self._clear_backups()
        self.state = TransactionState.ROLLED_BACK
        logging.info("Transaction rolled back.")

    def _clear_backups(self):
        for backup_path in self._backups.values():
            try:
                os.remove(backup_path)
            except OSError:
                logging.warning("Could not delete backup %s", backup_path)
        self._backups = {}
        self._created = []
        try:
            os.rmdir(self.backup_dir)
        except OSError:
            pass  # Not empty or already gone
