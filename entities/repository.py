"""Defines the abstract interface for a province repository."""

from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Optional, Union

# Import the core province structure
from entities.province import ProvinceInfo


class ProvinceRepository(ABC):
    """Abstract base class for storing and retrieving provinces by identifier.

    Identifiers compare case-insensitively.
    """

    @abstractmethod
    def get_by_id(self, province_id: str) -> Optional[ProvinceInfo]:
        """Retrieves a province by its identifier, or None."""
        pass

    @abstractmethod
    def get_all(self) -> List[ProvinceInfo]:
        """Returns a list of all provinces."""
        pass

    @abstractmethod
    def get_all_as_dict(self) -> Dict[str, ProvinceInfo]:
        """Returns a copy of the store keyed by province identifier."""
        pass

    @abstractmethod
    def find(self, predicate: Callable[[ProvinceInfo], bool]) -> List[ProvinceInfo]:
        """Returns all provinces for which ``predicate`` is true."""
        pass

    @abstractmethod
    def exists(self, province_id: str) -> bool:
        pass

    @abstractmethod
    def add(self, province: ProvinceInfo) -> None:
        """Adds a province, replacing any province with the same identifier."""
        pass

    @abstractmethod
    def update(self, province: ProvinceInfo) -> None:
        """Replaces a stored province.

        Raises:
            KeyError: If no province with that identifier is stored.
        """
        pass

    @abstractmethod
    def delete(self, province: Union[str, ProvinceInfo]) -> None:
        """Removes a province given either the province or its identifier."""
        pass
