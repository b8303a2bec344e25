"""
This module defines the province entity and its parts: the location attribute
set and the population records. These are the typed, in-memory counterparts
of what the parsers read from the game files.
"""

import random
import string
from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, TypeVar

import config

PopT = TypeVar("PopT")


def normalize_id(raw_id: str) -> str:
    """Strips whitespace and a leading ``#`` from a hex color identifier."""
    return raw_id.strip().lstrip("#").strip()


def generate_placeholder_name(length: int = 6) -> str:
    """Returns a throwaway name (``___`` plus random letters) for a freshly painted province."""
    return "___" + "".join(random.choice(string.ascii_letters) for _ in range(length))


@dataclass
class ProvinceLocation:
    """
    The attribute set of a location, as written to the location templates file.

    Every field is a string so values round-trip exactly. Absent fields are
    empty, except the harbor suitability which defaults to ``0.00``.

    Attributes:
        extra_attributes: Properties found on disk that have no dedicated
            field (kept so they are written back).
    """

    topography: str = ""
    vegetation: str = ""
    climate: str = ""
    religion: str = ""
    culture: str = ""
    raw_material: str = ""
    natural_harbor_suitability: str = config.DEFAULT_HARBOR_SUITABILITY
    extra_attributes: Dict[str, str] = field(default_factory=dict)


@dataclass
class PopDef:
    """One population record of a province."""

    pop_type: str
    size: Decimal
    culture: str
    religion: str


def same_pop_identity(first, second) -> bool:
    """Pops are identified by (type, culture, religion), ignoring case."""
    return (
        first.pop_type.casefold() == second.pop_type.casefold()
        and first.culture.casefold() == second.culture.casefold()
        and first.religion.casefold() == second.religion.casefold()
    )


def reconcile_pops(pops: Iterable[PopT]) -> List[PopT]:
    """Collapses pops sharing an identity into the earliest one, keeping the later size.

    Works on any pop record with ``pop_type``, ``size``, ``culture`` and
    ``religion`` fields. The inputs are copied, never modified.
    """
    result: List[PopT] = []
    for pop in pops:
        earlier = next((p for p in result if same_pop_identity(p, pop)), None)
        if earlier is not None:
            earlier.size = Decimal(pop.size)
        else:
            result.append(replace(pop, size=Decimal(pop.size)))
    return result


@dataclass
class ProvincePopInfo:
    """The record group of population definitions owned by one province."""

    pops: List[PopDef] = field(default_factory=list)

    def add_pops(self, new_pops: Iterable[PopDef]):
        """Adds pops, overwriting the size of any pop with the same identity."""
        self.pops = reconcile_pops(list(self.pops) + list(new_pops))


@dataclass
class ProvinceInfo:
    """
    A province: one location on the map, identified by its hex color.

    Attributes:
        id: The hex color identifier. Fixed at creation.
        name: The location name used as the key in the name-keyed files.
        origin_name: The name this province is stored under on disk, or None
            if it has never been saved. Used to find and replace the stale
            record after a rename.
        location_info: The attribute set.
        pop_info: The population records.
        unnamed: True for provinces found in the attribute file with no entry
            in the name table; their name is their identifier.
    """

    id: str
    name: str
    origin_name: Optional[str] = None
    location_info: ProvinceLocation = field(default_factory=ProvinceLocation)
    pop_info: ProvincePopInfo = field(default_factory=ProvincePopInfo)
    unnamed: bool = False

    def __post_init__(self):
        """Validate required fields after initialization."""
        if not self.id:
            raise ValueError("Province id cannot be empty.")
        if not self.name:
            raise ValueError(f"Province '{self.id}' name cannot be empty.")

    def __setattr__(self, name, value):
        if name == "id" and "id" in self.__dict__:
            raise AttributeError("Province id is fixed at creation.")
        super().__setattr__(name, value)

    @property
    def key(self) -> str:
        """The case-insensitive lookup key for this province."""
        return self.id.casefold()

    @property
    def is_renamed(self) -> bool:
        return self.origin_name is not None and self.origin_name != self.name

    def rename(self, new_name: str):
        """Changes the display name. The origin name is left pointing at the on-disk record."""
        if not new_name or not new_name.strip():
            raise ValueError("Province name cannot be empty.")
        self.name = new_name.strip()
        self.unnamed = False

    def mark_saved(self):
        """Records that the province now exists on disk under its current name."""
        self.origin_name = self.name
