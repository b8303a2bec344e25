"""A mapping whose string keys compare case-insensitively but keep their spelling."""

from collections.abc import MutableMapping
from typing import Any, Dict, Iterator, Optional, Tuple


class CaseInsensitiveDict(MutableMapping):
    """Dictionary keyed case-insensitively, remembering the last spelling of each key.

    Keys in the game files (location names, hex ids) are matched ignoring case,
    but must be written back the way they were spelled.
    """

    def __init__(self, data: Optional[Any] = None, **kwargs):
        self._store: Dict[str, Tuple[str, Any]] = {}
        self.update(data or {}, **kwargs)

    def __setitem__(self, key: str, value: Any) -> None:
        self._store[key.casefold()] = (key, value)

    def __getitem__(self, key: str) -> Any:
        return self._store[key.casefold()][1]

    def __delitem__(self, key: str) -> None:
        del self._store[key.casefold()]

    def __iter__(self) -> Iterator[str]:
        return (original for original, _ in self._store.values())

    def __len__(self) -> int:
        return len(self._store)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.casefold() in self._store

    def original_key(self, key: str) -> str:
        """Returns the stored spelling of ``key``."""
        return self._store[key.casefold()][0]

    def copy(self) -> "CaseInsensitiveDict":
        return CaseInsensitiveDict(self._store.values())

    def __eq__(self, other: object) -> bool:
        if isinstance(other, MutableMapping):
            other = CaseInsensitiveDict(other)
        else:
            return NotImplemented
        return {k: v for k, (_, v) in self._store.items()} == {
            k: v for k, (_, v) in other._store.items()
        }

    def __repr__(self) -> str:
        return f"{type(self).__name__}({dict(self.items())!r})"
