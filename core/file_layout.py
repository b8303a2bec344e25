"""
Resolves the logical file categories of a game or mod root to concrete paths.

Where a category may be served by several files, candidates are sorted by
file name so the choice never depends on directory listing order: all of
them are read (later files override earlier ones), and writes go to the
first one.
"""

import fnmatch
import logging
import os
from typing import List, Optional

import config

LOCATIONS = "locations"  # name <-> identifier table
ATTRIBUTES = "attributes"  # location templates
POPULATION = "population"  # pop definitions


class FileLayout:
    """Maps categories to files under one game or mod root directory."""

    def __init__(self, root: str):
        self.root = root

    def __repr__(self) -> str:
        return f"FileLayout({self.root!r})"

    # --- Directories ---

    @property
    def named_locations_dir(self) -> str:
        return os.path.join(self.root, config.NAMED_LOCATIONS_PATH)

    @property
    def pop_info_dir(self) -> str:
        return os.path.join(self.root, config.POP_INFO_PATH)

    def definition_dir(self, category: str) -> str:
        sub_path, _ = config.DEFINITION_CATEGORIES[category]
        return os.path.join(self.root, config.COMMON_PATH, sub_path)

    # --- Files ---

    def named_locations_files(self) -> List[str]:
        return _sorted_matches(self.named_locations_dir, "*.txt")

    def location_templates_file(self) -> str:
        return os.path.join(self.root, config.MAP_DATA_PATH, config.LOCATION_TEMPLATES_FILE)

    def pop_files(self) -> List[str]:
        return _sorted_matches(self.pop_info_dir, config.POP_FILE_PATTERN)

    def definition_files(self, category: str) -> List[str]:
        return _sorted_matches(self.definition_dir(category), "*.txt")

    def resolve(self, category: str) -> List[str]:
        """Returns the existing files for a category, in read order.

        Args:
            category: ``locations``, ``attributes``, ``population`` or one of
                the value-list categories in ``config.DEFINITION_CATEGORIES``.
        """
        if category == LOCATIONS:
            return self.named_locations_files()
        if category == ATTRIBUTES:
            path = self.location_templates_file()
            return [path] if os.path.isfile(path) else []
        if category == POPULATION:
            return self.pop_files()
        if category in config.DEFINITION_CATEGORIES:
            return self.definition_files(category)
        raise ValueError(f"Unknown file category: {category}")

    # --- Write Targets ---

    def write_target(self, category: str) -> str:
        """Returns the single file a category is written to.

        This is the first existing file in sorted order, or the configured
        default file name if the category has no file yet.
        """
        if category == ATTRIBUTES:
            return self.location_templates_file()
        existing = self.resolve(category)
        if existing:
            if len(existing) > 1:
                logging.info(
                    "Several %s files in %s, writing to %s",
                    category,
                    self.root,
                    os.path.basename(existing[0]),
                )
            return existing[0]
        if category == LOCATIONS:
            return os.path.join(self.named_locations_dir, config.DEFAULT_NAMED_LOCATIONS_FILE)
        if category == POPULATION:
            return os.path.join(self.pop_info_dir, config.DEFAULT_POP_FILE)
        raise ValueError(f"Category {category} is not writable")

    def backup_dir(self, explicit: Optional[str] = None) -> str:
        return explicit or os.path.join(self.root, config.BACKUP_DIR_NAME)


def _sorted_matches(directory: str, pattern: str) -> List[str]:
    if not os.path.isdir(directory):
        return []
    names = sorted(
        name
        for name in os.listdir(directory)
        if fnmatch.fnmatch(name, pattern) and os.path.isfile(os.path.join(directory, name))
    )
    return [os.path.join(directory, name) for name in names]
