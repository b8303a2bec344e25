"""Per-entity lifecycle bookkeeping between two saves."""

from typing import Callable, Dict, Generic, List, Tuple, TypeVar

from entities.entity_state import EntityState

TEntity = TypeVar("TEntity")


class ChangeTracker(Generic[TEntity]):
    """Records the lifecycle state of each entity, keyed like the store it watches.

    Entities that were never tracked report ``EntityState.UNCHANGED``.
    """

    def __init__(self, key_selector: Callable[[TEntity], str]):
        self._key_selector = key_selector
        self._tracked: Dict[str, Tuple[TEntity, EntityState]] = {}

    def _key(self, entity_or_key) -> str:
        if isinstance(entity_or_key, str):
            return entity_or_key.casefold()
        return self._key_selector(entity_or_key).casefold()

    def track(self, entity: TEntity, state: EntityState) -> None:
        self._tracked[self._key(entity)] = (entity, state)

    def get_state(self, entity_or_key) -> EntityState:
        tracked = self._tracked.get(self._key(entity_or_key))
        return tracked[1] if tracked else EntityState.UNCHANGED

    def is_tracked(self, entity_or_key) -> bool:
        return self._key(entity_or_key) in self._tracked

    def get_entity(self, key: str):
        tracked = self._tracked.get(self._key(key))
        return tracked[0] if tracked else None

    def get_entities_by_state(self, state: EntityState) -> List[TEntity]:
        return [entity for entity, s in self._tracked.values() if s == state]

    def get_added(self) -> List[TEntity]:
        return self.get_entities_by_state(EntityState.ADDED)

    def get_modified(self) -> List[TEntity]:
        return self.get_entities_by_state(EntityState.MODIFIED)

    def get_deleted(self) -> List[TEntity]:
        return self.get_entities_by_state(EntityState.DELETED)

    def get_changed(self) -> List[TEntity]:
        """All entities in the Added, Modified or Deleted state, in tracking order."""
        return [entity for entity, s in self._tracked.values() if s != EntityState.UNCHANGED]

    def get_changed_as_dict(self) -> Dict[str, TEntity]:
        return {
            self._key_selector(entity): entity
            for entity, s in self._tracked.values()
            if s != EntityState.UNCHANGED
        }

    def has_changes(self) -> bool:
        return any(s != EntityState.UNCHANGED for _, s in self._tracked.values())

    def change_count(self) -> int:
        return sum(1 for _, s in self._tracked.values() if s != EntityState.UNCHANGED)

    def clear(self) -> None:
        self._tracked.clear()

    def accept_changes(self) -> None:
        """Marks every tracked entity Unchanged."""
        for key, (entity, _) in list(self._tracked.items()):
            self._tracked[key] = (entity, EntityState.UNCHANGED)

    def untrack(self, entity_or_key) -> None:
        self._tracked.pop(self._key(entity_or_key), None)
