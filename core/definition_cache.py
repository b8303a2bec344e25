"""
Valid-value lists (cultures, religions, terrain types, goods...) read from the
base game and the mod, used for autocompletion and suggestions only.
"""

import logging
from typing import Dict, List, Optional, Set

from thefuzz import process

import config
from core.file_layout import FileLayout
from parsing.game_definition_parser import GameDefinitionParser


class DefinitionSet:
    """The names defined for one category, from the base game and the mod combined."""

    def __init__(self, category: str, base: Optional[Set[str]] = None, modded: Optional[Set[str]] = None):
        self.category = category
        self.base: Set[str] = set(base or ())
        self.modded: Set[str] = set(modded or ())

    @property
    def combined(self) -> List[str]:
        """All names, sorted, with case-insensitive duplicates collapsed (base spelling wins)."""
        seen: Dict[str, str] = {}
        for name in sorted(self.base) + sorted(self.modded):
            seen.setdefault(name.casefold(), name)
        return sorted(seen.values(), key=str.casefold)

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, str):
            return False
        folded = name.casefold()
        return any(n.casefold() == folded for n in self.base | self.modded)

    def __len__(self) -> int:
        return len(self.combined)

    def suggest(
        self,
        text: str,
        limit: int = config.SUGGESTION_LIMIT,
        min_score: int = config.SUGGESTION_MIN_SCORE,
    ) -> List[str]:
        """Returns names resembling ``text``, best first.

        An empty query returns the first ``limit`` names alphabetically.
        """
        names = self.combined
        if not text:
            return names[:limit]
        if not names:
            return []
        folded = text.casefold()
        exact = [name for name in names if name.casefold() == folded]
        prefixed = [name for name in names if name.casefold().startswith(folded) and name not in exact]
        matches = process.extract(text, names, limit=limit)
        fuzzy = [name for name, score in matches if score >= min_score and name not in exact + prefixed]
        return (exact + prefixed + fuzzy)[:limit]


class DefinitionCache:
    """Holds one DefinitionSet per category in ``config.DEFINITION_CATEGORIES``."""

    def __init__(self, sets: Optional[Dict[str, DefinitionSet]] = None):
        self._sets: Dict[str, DefinitionSet] = dict(sets or {})

    def get(self, category: str) -> DefinitionSet:
        if category not in config.DEFINITION_CATEGORIES:
            raise KeyError(f"Unknown definition category: {category}")
        return self._sets.setdefault(category, DefinitionSet(category))

    def suggest(self, category: str, text: str, limit: int = config.SUGGESTION_LIMIT) -> List[str]:
        return self.get(category).suggest(text, limit=limit)


def _load_names(layout: Optional[FileLayout], category: str) -> Set[str]:
    if layout is None:
        return set()
    files = layout.resolve(category)
    if not files:
        logging.warning("No %s definitions found under %s", category, layout.root)
        return set()
    _, category_filter = config.DEFINITION_CATEGORIES[category]
    return GameDefinitionParser(category_filter=category_filter).parse_files(files)


def load_definition_cache(base_dir: Optional[str], mod_dir: Optional[str]) -> DefinitionCache:
    """Reads every value-list category from the base game and the mod.

    Missing directories give empty sets; malformed files raise
    StructuralParseError.
    """
    base_layout = FileLayout(base_dir) if base_dir else None
    mod_layout = FileLayout(mod_dir) if mod_dir else None
    sets = {}
    for category in config.DEFINITION_CATEGORIES:
        sets[category] = DefinitionSet(
            category,
            base=_load_names(base_layout, category),
            modded=_load_names(mod_layout, category),
        )
        logging.info("Loaded %d %s", len(sets[category]), category)
    return DefinitionCache(sets)
