"""Parser for single-level block files, such as ``location_templates.txt``."""

import logging
from typing import List, Sequence

import config
from parsing.case_insensitive import CaseInsensitiveDict
from parsing.file_parser import FileParser, FileWriter
from parsing.merge import RecordEdit, Span, apply_splices, plan_splices
from parsing.scanner import Record, format_properties, parse_properties, scan_records, tokenize


class NestedStructureParser(FileParser[CaseInsensitiveDict], FileWriter[CaseInsensitiveDict]):
    """Reads and writes ``KEY = { prop = val prop = val ... }`` blocks.

    A block body may span several lines. The result maps each key to a
    case-insensitive dictionary of its properties.
    """

    def __init__(self, comment_marker: str = config.COMMENT_MARKER):
        self._comment_marker = comment_marker

    def empty(self) -> CaseInsensitiveDict:
        return CaseInsensitiveDict()

    def combine(self, first: CaseInsensitiveDict, second: CaseInsensitiveDict) -> CaseInsensitiveDict:
        combined = first.copy()
        combined.update(second)
        return combined

    def parse_lines(self, lines: Sequence[str], path: str = None) -> CaseInsensitiveDict:
        result = CaseInsensitiveDict()
        for record in self._blocks(lines, path):
            result[record.key] = CaseInsensitiveDict(parse_properties(record.body, path))
        return result

    def _blocks(self, lines: Sequence[str], path: str = None) -> List[Record]:
        blocks = []
        for record in scan_records(tokenize(lines, self._comment_marker), path=path):
            if not record.is_block:
                logging.warning(
                    "Skipping line %d in %s: '%s' is not a block.",
                    record.key_token.line + 1,
                    path or "input",
                    record.key,
                )
                continue
            blocks.append(record)
        return blocks

    @staticmethod
    def format_entry(key: str, properties) -> List[str]:
        body = format_properties(properties)
        return [f"{key} = {{ {body} }}" if body else f"{key} = {{ }}"]

    def serialize_lines(self, data: CaseInsensitiveDict) -> List[str]:
        lines: List[str] = []
        for key, properties in data.items():
            lines.extend(self.format_entry(key, properties))
        return lines

    def merge_lines(
        self, lines: Sequence[str], edits: Sequence[RecordEdit], path: str = None
    ) -> List[str]:
        """Applies edits to existing file lines.

        A changed or renamed block is replaced where it stands (multi-line
        blocks collapse to one line), removed blocks disappear and new blocks
        are appended.
        """
        spans = [Span(r.key, r.start, r.end) for r in self._blocks(lines, path)]
        splices, appended = plan_splices(spans, edits)
        result = apply_splices(lines, splices)
        for entry_lines in appended:
            result.extend(entry_lines)
        return result
