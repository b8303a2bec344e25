"""Lifecycle states of a tracked entity between two saves."""

from enum import Enum


class EntityState(Enum):
    UNCHANGED = "unchanged"
    ADDED = "added"
    MODIFIED = "modified"
    DELETED = "deleted"
