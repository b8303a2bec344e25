"""Exception and warning types raised by the parsing and persistence layers."""

from typing import Optional


class MapToolError(Exception):
    """Base class for all map tool errors."""


class StructuralParseError(MapToolError, ValueError):
    """Raised when a file's brace structure or assignment syntax is broken.

    Attributes:
        path: The file being parsed, if known.
        line_no: 1-based line number where the problem was detected, if known.
    """

    def __init__(self, message: str, path: Optional[str] = None, line_no: Optional[int] = None):
        self.path = path
        self.line_no = line_no
        location = ""
        if path:
            location = f"{path}"
        if line_no is not None:
            location = f"{location}:{line_no}" if location else f"line {line_no}"
        super().__init__(f"{location}: {message}" if location else message)


class MissingFileError(MapToolError, FileNotFoundError):
    """Raised when a required game or mod file cannot be found."""


class FieldCoercionWarning(UserWarning):
    """Issued when a numeric field cannot be parsed and its default is used instead."""


class TransactionError(MapToolError, RuntimeError):
    """Raised on an illegal transaction state transition."""


class EntityDeletedError(MapToolError, KeyError):
    """Raised when updating an entity that is already marked for deletion."""


class PersistenceError(MapToolError):
    """Raised when saving failed and the files were rolled back."""
