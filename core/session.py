"""
The entity store session: the operations a UI collaborator calls.

A session owns the province database loaded from a base game and a mod, the
unit of work tracking edits to it, and the identifier/name lookups. Nothing
here is process-wide; every caller works through its own EntityStore.
"""

import logging
import os
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

import config
from core.definition_cache import DefinitionCache, load_definition_cache
from core.errors import PersistenceError
from core.file_layout import FileLayout
from core.province_writer import ProvinceFileWriter
from core.transaction_manager import TransactionManager
from core.unit_of_work import UnitOfWork
from entities.entity_state import EntityState
from entities.in_memory_province_db import InMemoryProvinceDB
from entities.province import (
    PopDef,
    ProvinceInfo,
    ProvinceLocation,
    generate_placeholder_name,
    normalize_id,
)


class EntityStore:
    """A loaded base game plus mod, with tracked edits and save/rollback."""

    def __init__(self, base_dir: Optional[str], mod_dir: str, backup_dir: Optional[str] = None):
        self.base_dir = base_dir
        self.mod_dir = mod_dir
        self.layout = FileLayout(mod_dir)
        self.backup_dir = self.layout.backup_dir(backup_dir)
        self._definitions: Optional[DefinitionCache] = None
        self.db: InMemoryProvinceDB = None
        self.unit_of_work: UnitOfWork = None
        self.reload()

    def reload(self):
        """(Re)reads every province from disk, dropping pending changes."""
        self.db = InMemoryProvinceDB.from_directories(self.base_dir, self.mod_dir)
        self.unit_of_work = UnitOfWork(
            self.db,
            ProvinceFileWriter(self.layout),
            TransactionManager(self.backup_dir),
        )

    @property
    def provinces(self):
        """The tracked repository. Mutations made through it are saved."""
        return self.unit_of_work.provinces

    @property
    def definitions(self) -> DefinitionCache:
        if self._definitions is None:
            self._definitions = load_definition_cache(self.base_dir, self.mod_dir)
        return self._definitions

    # --- Lookups ---

    def get(self, province_id: str) -> Optional[ProvinceInfo]:
        return self.provinces.get_by_id(normalize_id(province_id))

    def id_for_name(self, name: str) -> Optional[str]:
        folded = name.casefold()
        for province in self.provinces.get_all():
            if not province.unnamed and province.name.casefold() == folded:
                return province.id
        return None

    def name_table(self) -> Dict[str, str]:
        """The current identifier -> name mapping."""
        return {p.id: p.name for p in self.provinces.get_all()}

    def state_of(self, province_id: str) -> EntityState:
        return self.provinces.get_state(normalize_id(province_id))

    # --- Change Statistics ---

    def has_changes(self) -> bool:
        return self.unit_of_work.has_changes()

    def change_count(self) -> int:
        return self.unit_of_work.change_count()

    def get_changed(self) -> List[ProvinceInfo]:
        return self.unit_of_work.get_changed()

    # --- Editing ---

    def paint_location(self, province_id: str, **attributes: str) -> ProvinceInfo:
        """Sets location attributes on a province, creating it if needed.

        Only the given attributes change. A new province gets a placeholder
        name until it is renamed.

        Raises:
            ValueError: If an attribute is not a location field.
        """
        unknown = [name for name in attributes if name not in config.LOCATION_FIELDS]
        if unknown:
            raise ValueError(f"Unknown location attribute(s): {', '.join(unknown)}")
        province_id = normalize_id(province_id)
        province = self.provinces.get_by_id(province_id)
        if province is None:
            province = ProvinceInfo(
                id=province_id,
                name=generate_placeholder_name(),
                location_info=ProvinceLocation(**attributes),
            )
            self.provinces.add(province)
            logging.info("Painted new province %s as '%s'", province.id, province.name)
            return province
        for name, value in attributes.items():
            setattr(province.location_info, name, value)
        self.provinces.update(province)
        return province

    def paint_pops(self, province_id: str, pops: Iterable[PopDef]) -> ProvinceInfo:
        """Adds pops to a province, creating it if needed.

        A pop matching an existing one by (type, culture, religion) replaces
        its size instead of being appended.
        """
        pops = [PopDef(p.pop_type, Decimal(p.size), p.culture, p.religion) for p in pops]
        province_id = normalize_id(province_id)
        province = self.provinces.get_by_id(province_id)
        if province is None:
            province = ProvinceInfo(id=province_id, name=generate_placeholder_name())
            province.pop_info.add_pops(pops)
            self.provinces.add(province)
            return province
        province.pop_info.add_pops(pops)
        self.provinces.update(province)
        return province

    def rename(self, province_id: str, new_name: str) -> ProvinceInfo:
        """Renames a province.

        Raises:
            KeyError: If the province does not exist.
            ValueError: If the name is empty or another province already uses it.
        """
        province = self.get(province_id)
        if province is None:
            raise KeyError(f"Province with id '{province_id}' not found.")
        owner = self.id_for_name(new_name.strip()) if new_name else None
        if owner is not None and owner.casefold() != province.key:
            raise ValueError(f"Name '{new_name}' is already used by province {owner}.")
        province.rename(new_name)
        self.provinces.update(province)
        return province

    def delete(self, province_id: str) -> None:
        self.provinces.delete(normalize_id(province_id))

    # --- Persistence ---

    def save_changes(self) -> int:
        """Saves all pending changes.

        Raises:
            PersistenceError: If saving failed. The files were restored and
                the changes are still pending.
        """
        try:
            return self.unit_of_work.save_changes()
        except Exception as exc:
            raise PersistenceError(f"Saving changes failed and was rolled back: {exc}") from exc

    def rollback(self) -> None:
        """Discards pending changes and reloads the provinces from disk."""
        logging.info("Discarding %d pending change(s) and reloading.", self.change_count())
        self.reload()


# --- Collaborator-facing operations ---


def load_store(base_dir: Optional[str], mod_dir: str, backup_dir: Optional[str] = None) -> EntityStore:
    """Loads the base game (if given) and the mod into a new EntityStore."""
    if base_dir and not os.path.isdir(base_dir):
        logging.warning("Base game directory %s does not exist.", base_dir)
    return EntityStore(base_dir, mod_dir, backup_dir)


def get_changed(store: EntityStore) -> List[ProvinceInfo]:
    return store.get_changed()


def save_changes(store: EntityStore) -> int:
    return store.save_changes()


def rollback(store: EntityStore) -> None:
    store.rollback()
