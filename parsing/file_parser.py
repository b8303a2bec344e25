"""Defines the abstract parser and writer interfaces for game data files."""

import logging
from abc import ABC, abstractmethod
from typing import Generic, Iterable, List, Sequence, TypeVar

from core.file_io import read_lines, write_lines

TResult = TypeVar("TResult")


class FileParser(ABC, Generic[TResult]):
    """Abstract base class for parsers of one file shape of the dialect."""

    def parse_file(self, file_path: str) -> TResult:
        """Reads and parses a single file.

        Raises:
            FileNotFoundError: If the file does not exist.
            StructuralParseError: If the file is malformed.
        """
        lines = read_lines(file_path).lines
        logging.debug("Parsing %s (%d lines)", file_path, len(lines))
        return self.parse_lines(lines, path=file_path)

    def parse_files(self, file_paths: Iterable[str]) -> TResult:
        """Parses several files in the given order; later files win on key clashes."""
        combined = self.empty()
        for file_path in file_paths:
            combined = self.combine(combined, self.parse_file(file_path))
        return combined

    @abstractmethod
    def parse_lines(self, lines: Sequence[str], path: str = None) -> TResult:
        """Parses file content given as a list of lines."""
        pass

    @abstractmethod
    def empty(self) -> TResult:
        """Returns an empty result of this parser's type."""
        pass

    @abstractmethod
    def combine(self, first: TResult, second: TResult) -> TResult:
        """Merges two results, entries in ``second`` overriding ``first``."""
        pass


class FileWriter(ABC, Generic[TResult]):
    """Abstract base class for serializers of one file shape of the dialect."""

    @abstractmethod
    def serialize_lines(self, data: TResult) -> List[str]:
        """Serializes data to a fresh list of lines."""
        pass

    def write_file(self, file_path: str, data: TResult) -> None:
        """Overwrites a file with the serialized data."""
        write_lines(file_path, self.serialize_lines(data))
