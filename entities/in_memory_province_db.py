"""In-memory implementation of the ProvinceRepository interface."""

import logging
import os
import threading
from typing import Callable, Dict, List, Optional, Union

# Import the interface and data structures
from core.errors import MissingFileError
from core.file_layout import FileLayout
from entities.province import ProvinceInfo
from entities.repository import ProvinceRepository
from mapping.province_mapper import ProvinceMapper
from parsing.case_insensitive import CaseInsensitiveDict
from parsing.key_value_parser import KeyValueFileParser
from parsing.nested_structure_parser import NestedStructureParser
from parsing.pop_definition_parser import PopDefinitionParser


class InMemoryProvinceDB(ProvinceRepository):
    """Stores and retrieves provinces entirely in memory, keyed by identifier."""

    def __init__(self):
        """Initializes an empty province database."""
        self._provinces: CaseInsensitiveDict = CaseInsensitiveDict()
        self._lock = threading.RLock()
        self.base_layout: Optional[FileLayout] = None
        self.mod_layout: Optional[FileLayout] = None
        logging.info("Initialized empty InMemoryProvinceDB.")

    @classmethod
    def from_directories(cls, base_dir: Optional[str], mod_dir: str) -> "InMemoryProvinceDB":
        """Creates a database by loading the base game and then the mod on top of it.

        Base game provinces are loaded without pops. Mod provinces replace base
        provinces with the same identifier and carry the mod's pops.

        Args:
            base_dir: Root of the base game install, or None to load the mod only.
            mod_dir: Root of the mod.

        Raises:
            MissingFileError: If the base game lacks its name table or location
                templates, or if the mod directory does not exist.
            StructuralParseError: If any file is malformed.
        """
        db_instance = cls()
        logging.info("Initializing InMemoryProvinceDB from base=%s mod=%s", base_dir, mod_dir)

        if not os.path.isdir(mod_dir):
            raise MissingFileError(f"Mod directory not found: {mod_dir}")
        db_instance.mod_layout = FileLayout(mod_dir)

        if base_dir:
            db_instance.base_layout = FileLayout(base_dir)
            base = db_instance._load_layout(db_instance.base_layout, required=True, include_pops=False)
            logging.info("Loaded %d base game provinces", len(base))
            for province in base.values():
                db_instance._add_province(province)

        modded = db_instance._load_layout(db_instance.mod_layout, required=False, include_pops=True)
        logging.info("Loaded %d modded provinces", len(modded))
        for province in modded.values():
            db_instance._add_province(province)

        logging.info("Finished initialization. %d provinces in database.", len(db_instance._provinces))
        return db_instance

    @classmethod
    def from_data(cls, provinces: List[ProvinceInfo]) -> "InMemoryProvinceDB":
        """Creates a database from already-built provinces."""
        db_instance = cls()
        for i, province in enumerate(provinces):
            if province.id in db_instance._provinces:
                raise ValueError(f"Duplicate province id found at index {i}: {province.id}")
            db_instance._add_province(province)
        logging.info("Finished initialization from data. Loaded %d provinces.", len(provinces))
        return db_instance

    # --- Helper Methods ---

    def _load_layout(self, layout: FileLayout, required: bool, include_pops: bool) -> CaseInsensitiveDict:
        """Reads the three file shapes under one root and maps them to provinces."""
        name_files = layout.named_locations_files()
        templates_file = layout.location_templates_file()

        if not name_files:
            if required:
                raise MissingFileError(
                    f"No named location files found in: {layout.named_locations_dir}"
                )
            logging.warning("No named location files found in: %s", layout.named_locations_dir)
        if not os.path.isfile(templates_file):
            if required:
                raise MissingFileError(f"Location templates file not found: {templates_file}")
            logging.warning("Location templates file not found: %s", templates_file)

        name_to_id = KeyValueFileParser().parse_files(name_files)
        location_data = (
            NestedStructureParser().parse_file(templates_file)
            if os.path.isfile(templates_file)
            else CaseInsensitiveDict()
        )

        pop_data = CaseInsensitiveDict()
        if include_pops:
            pop_files = layout.pop_files()
            if pop_files:
                pop_data = PopDefinitionParser().parse_files(pop_files)
            else:
                logging.warning("No pop files found in: %s", layout.pop_info_dir)

        return ProvinceMapper().map_to_entity_dictionary(name_to_id, location_data, pop_data)

    def _add_province(self, province: ProvinceInfo):
        """Internal helper to add a province to the internal dictionary."""
        if not province.id:
            raise ValueError("Attempted to add province with empty id")
        self._provinces[province.id] = province

    # --- Repository Query Methods ---

    def get_by_id(self, province_id: str) -> Optional[ProvinceInfo]:
        return self._provinces.get(province_id)

    def get_all(self) -> List[ProvinceInfo]:
        return list(self._provinces.values())

    def get_all_as_dict(self) -> Dict[str, ProvinceInfo]:
        return dict(self._provinces.items())

    def find(self, predicate: Callable[[ProvinceInfo], bool]) -> List[ProvinceInfo]:
        return [p for p in self._provinces.values() if predicate(p)]

    def exists(self, province_id: str) -> bool:
        return province_id in self._provinces

    # --- Mutation Methods ---

    def add(self, province: ProvinceInfo) -> None:
        with self._lock:
            self._add_province(province)

    def update(self, province: ProvinceInfo) -> None:
        with self._lock:
            if province.id not in self._provinces:
                raise KeyError(f"Province with id '{province.id}' not found.")
            self._provinces[province.id] = province

    def delete(self, province: Union[str, ProvinceInfo]) -> None:
        province_id = province.id if isinstance(province, ProvinceInfo) else province
        with self._lock:
            self._provinces.pop(province_id, None)
