"""Parser for flat ``KEY = VALUE`` files, such as the named-locations table."""

import logging
from typing import List, Optional, Sequence, Tuple

import config
from parsing.case_insensitive import CaseInsensitiveDict
from parsing.file_parser import FileParser, FileWriter
from parsing.merge import RecordEdit, Span, apply_splices, plan_splices


class KeyValueFileParser(FileParser[CaseInsensitiveDict], FileWriter[CaseInsensitiveDict]):
    """Reads and writes one assignment per line, e.g. ``stockholm = ABABAB``.

    Comment lines and blank lines are ignored, lines without ``=`` are skipped,
    and the last assignment to a key wins.
    """

    def __init__(
        self,
        ignore_comments: bool = True,
        trim_whitespace: bool = True,
        comment_marker: str = config.COMMENT_MARKER,
    ):
        self._ignore_comments = ignore_comments
        self._trim_whitespace = trim_whitespace
        self._comment_marker = comment_marker

    def empty(self) -> CaseInsensitiveDict:
        return CaseInsensitiveDict()

    def combine(self, first: CaseInsensitiveDict, second: CaseInsensitiveDict) -> CaseInsensitiveDict:
        combined = first.copy()
        combined.update(second)
        return combined

    def parse_lines(self, lines: Sequence[str], path: str = None) -> CaseInsensitiveDict:
        result = CaseInsensitiveDict()
        for _, key, value in self._entries(lines, path):
            result[key] = value
        return result

    def _entries(
        self, lines: Sequence[str], path: Optional[str] = None
    ) -> List[Tuple[Span, str, str]]:
        """Finds every assignment along with the span it occupies."""
        entries = []
        for index, raw in enumerate(lines):
            line = raw.strip() if self._trim_whitespace else raw
            if not line.strip():
                continue
            if self._ignore_comments and line.startswith(self._comment_marker):
                continue

            content = raw
            if self._ignore_comments:
                marker_at = content.find(self._comment_marker)
                if marker_at != -1:
                    content = content[:marker_at]

            equal_index = content.find("=")
            if equal_index == -1 or not content[:equal_index].strip():
                logging.warning(
                    "Skipping line %d in %s: no 'KEY = VALUE' assignment: %r",
                    index + 1,
                    path or "input",
                    raw,
                )
                continue

            key = content[:equal_index].strip()
            value = content[equal_index + 1:].strip()
            start_col = len(raw) - len(raw.lstrip())
            end_col = len(content.rstrip())
            entries.append((Span(key, (index, start_col), (index, end_col)), key, value))
        return entries

    @staticmethod
    def format_entry(key: str, value: str) -> List[str]:
        return [f"{key} = {value}"]

    def serialize_lines(self, data: CaseInsensitiveDict) -> List[str]:
        lines: List[str] = []
        for key, value in data.items():
            lines.extend(self.format_entry(key, value))
        return lines

    def merge_lines(
        self, lines: Sequence[str], edits: Sequence[RecordEdit], path: str = None
    ) -> List[str]:
        """Applies edits to existing file lines, keeping every untouched line as is.

        Changed keys are rewritten in place (a renamed key takes its origin's
        line), removed keys drop their line and new keys are appended at the
        end of the file.
        """
        spans = [span for span, _, _ in self._entries(lines, path)]
        splices, appended = plan_splices(spans, edits)
        result = apply_splices(lines, splices)
        for entry_lines in appended:
            result.extend(entry_lines)
        return result
