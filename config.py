"""Configuration settings for the EU5 map tool core."""

import json
import os

# --- Optional Overrides ---
# Values in maptool.json (if present) replace the defaults defined below.
SETTINGS_FILE_PATH = os.environ.get("MAPTOOL_SETTINGS", "maptool.json")
_overrides = {}
try:
    with open(SETTINGS_FILE_PATH, "r", encoding="utf-8") as f:
        _overrides = json.load(f)
    if not isinstance(_overrides, dict):
        print(f"Warning: {SETTINGS_FILE_PATH} must contain a JSON object, ignoring it.")
        _overrides = {}
except FileNotFoundError:
    pass
except (json.JSONDecodeError, OSError) as e:
    print(f"Warning: Could not load overrides from {SETTINGS_FILE_PATH}: {e}")


# --- Game Directory Layout (relative to a base game or mod root) ---
NAMED_LOCATIONS_PATH = _overrides.get(
    "NAMED_LOCATIONS_PATH", "in_game/map_data/named_locations/"
)
MAP_DATA_PATH = _overrides.get("MAP_DATA_PATH", "in_game/map_data/")
LOCATION_TEMPLATES_FILE = _overrides.get(
    "LOCATION_TEMPLATES_FILE", "location_templates.txt"
)
COMMON_PATH = _overrides.get("COMMON_PATH", "in_game/common/")
POP_INFO_PATH = _overrides.get("POP_INFO_PATH", "main_menu/setup/start/")
POP_FILE_PATTERN = _overrides.get("POP_FILE_PATTERN", "*pops*.txt")

# File names used when the mod does not ship the file yet
DEFAULT_NAMED_LOCATIONS_FILE = _overrides.get(
    "DEFAULT_NAMED_LOCATIONS_FILE", "00_named_locations.txt"
)
DEFAULT_POP_FILE = _overrides.get("DEFAULT_POP_FILE", "06_pops.txt")

# --- Dialect Settings ---
WRAPPER_KEY = "locations"  # Top-level block holding per-location pop blocks
POP_RECORD_KEY = "define_pop"
COMMENT_MARKER = "#"
FILE_ENCODING = "utf-8"

# Pop sizes are written with this many fixed decimal places
POP_SIZE_DECIMALS = 5
DEFAULT_POP_SIZE = "0"
DEFAULT_HARBOR_SUITABILITY = "0.00"

# Fields every location attribute set carries, in write order
LOCATION_FIELDS = (
    "topography",
    "vegetation",
    "climate",
    "religion",
    "culture",
    "raw_material",
    "natural_harbor_suitability",
)

# --- Persistence Settings ---
# Backups live under the mod root unless an explicit directory is given
BACKUP_DIR_NAME = _overrides.get("BACKUP_DIR_NAME", ".maptool_backup")

# --- Value Lists (UI autocompletion only) ---
# category name -> (sub-directory under COMMON_PATH, category filter or None)
DEFINITION_CATEGORIES = {
    "cultures": ("cultures/", None),
    "religions": ("religions/", None),
    "topography": ("topography/", None),
    "vegetation": ("vegetation/", None),
    "climates": ("climates/", None),
    "raw_materials": ("goods/", "raw_material"),
    "pop_types": ("pop_types/", None),
}

SUGGESTION_LIMIT = 10
SUGGESTION_MIN_SCORE = 60

# --- Logging ---
LOG_LEVEL = _overrides.get("LOG_LEVEL", "INFO")
LOG_FORMAT = "%(asctime)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s"
