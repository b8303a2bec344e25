"""
Parser for pop definition files, the three-level wrapper shape:

    locations = {
        stockholm = {
            define_pop = { type = clergy size = 0.00021 culture = swedish religion = lutheran }
        }
    }
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional, Sequence

import config
from entities.province import reconcile_pops
from parsing.case_insensitive import CaseInsensitiveDict
from parsing.fields import format_decimal, parse_decimal
from parsing.file_parser import FileParser, FileWriter
from parsing.merge import RecordEdit, Span, Splice, apply_splices, indent_block, plan_splices
from parsing.scanner import Record, parse_properties, scan_records, tokenize


@dataclass
class PopDefinition:
    """One ``define_pop`` record as it appears in a file."""

    pop_type: str
    size: Decimal
    culture: str
    religion: str

    def to_pop_line(self) -> str:
        return (
            f"{config.POP_RECORD_KEY} = {{ type = {self.pop_type} "
            f"size = {format_decimal(self.size)} "
            f"culture = {self.culture} religion = {self.religion} }}"
        )


@dataclass
class LocationPopData:
    """The pop records of one named block inside the wrapper."""

    location_name: str
    pops: List[PopDefinition] = field(default_factory=list)


def merge_pops(existing: LocationPopData, incoming: LocationPopData) -> LocationPopData:
    """Merges incoming pops into existing ones.

    A pop matching an existing (type, culture, religion) overwrites that pop's
    size; anything else is appended. Neither argument is modified.
    """
    return LocationPopData(
        location_name=existing.location_name,
        pops=reconcile_pops(list(existing.pops) + list(incoming.pops)),
    )


class PopDefinitionParser(FileParser[CaseInsensitiveDict], FileWriter[CaseInsensitiveDict]):
    """Reads and writes the ``locations = { name = { define_pop = {...} ... } }`` shape."""

    def __init__(
        self,
        wrapper_key: str = config.WRAPPER_KEY,
        record_key: str = config.POP_RECORD_KEY,
        comment_marker: str = config.COMMENT_MARKER,
    ):
        self._wrapper_key = wrapper_key
        self._record_key = record_key
        self._comment_marker = comment_marker

    def empty(self) -> CaseInsensitiveDict:
        return CaseInsensitiveDict()

    def combine(self, first: CaseInsensitiveDict, second: CaseInsensitiveDict) -> CaseInsensitiveDict:
        combined = first.copy()
        combined.update(second)
        return combined

    def parse_lines(self, lines: Sequence[str], path: str = None) -> CaseInsensitiveDict:
        result = CaseInsensitiveDict()
        wrapper = self._find_wrapper(lines, path)
        if wrapper is None:
            return result
        for block in self._named_blocks(wrapper, path):
            result[block.key] = LocationPopData(
                location_name=block.key, pops=self._parse_block_pops(block, path)
            )
        return result

    # --- Structure Helpers ---

    def _find_wrapper(self, lines: Sequence[str], path: Optional[str]) -> Optional[Record]:
        """Returns the first top-level wrapper block, ignoring any other content."""
        tokens = tokenize(lines, self._comment_marker)
        for record in scan_records(tokens, path=path, strict=False):
            if record.is_block and record.key.casefold() == self._wrapper_key.casefold():
                return record
        return None

    def _named_blocks(self, wrapper: Record, path: Optional[str]) -> List[Record]:
        blocks = []
        for record in scan_records(wrapper.body, path=path, strict=False):
            if not record.is_block:
                logging.warning(
                    "Skipping '%s' on line %d in %s: expected a named block.",
                    record.key,
                    record.key_token.line + 1,
                    path or "input",
                )
                continue
            blocks.append(record)
        return blocks

    def _parse_block_pops(self, block: Record, path: Optional[str]) -> List[PopDefinition]:
        pops = []
        for record in scan_records(block.body, path=path, strict=False):
            if record.key.casefold() != self._record_key.casefold() or not record.is_block:
                logging.debug("Ignoring '%s' inside '%s'", record.key, block.key)
                continue
            pop = self._parse_pop(record, block.key, path)
            if pop is not None:
                pops.append(pop)
        return pops

    def _parse_pop(self, record: Record, location: str, path: Optional[str]) -> Optional[PopDefinition]:
        properties = CaseInsensitiveDict(parse_properties(record.body, path))
        missing = [name for name in ("type", "culture", "religion") if name not in properties]
        if missing:
            logging.warning(
                "Skipping pop on line %d in %s for '%s': missing %s",
                record.key_token.line + 1,
                path or "input",
                location,
                ", ".join(missing),
            )
            return None
        return PopDefinition(
            pop_type=properties["type"],
            size=parse_decimal(
                properties.get("size"),
                config.DEFAULT_POP_SIZE,
                f"pop size in '{location}'",
            ),
            culture=properties["culture"],
            religion=properties["religion"],
        )

    # --- Writing ---

    def format_entry(self, data: LocationPopData) -> List[str]:
        """Serializes one named block, unindented."""
        lines = [f"{data.location_name} = {{"]
        lines.extend(f"\t{pop.to_pop_line()}" for pop in data.pops)
        lines.append("}")
        return lines

    def serialize_lines(self, data: CaseInsensitiveDict) -> List[str]:
        lines = [f"{self._wrapper_key} = {{"]
        for location in data.values():
            lines.extend(indent_block(self.format_entry(location), "\t"))
        lines.append("}")
        return lines

    def merge_lines(
        self, lines: Sequence[str], edits: Sequence[RecordEdit], path: str = None
    ) -> List[str]:
        """Applies edits to the named blocks inside the wrapper.

        Changed and renamed blocks are replaced in place, removed blocks
        disappear and new blocks are inserted just before the wrapper's closing
        brace. A file without a wrapper gets one appended.
        """
        wrapper = self._find_wrapper(lines, path)
        if wrapper is None:
            new_blocks = [edit.lines for edit in edits if edit.lines is not None]
            if not new_blocks:
                return list(lines)
            result = list(lines)
            if result and result[-1].strip():
                result.append("")
            result.append(f"{self._wrapper_key} = {{")
            for block in new_blocks:
                result.extend(indent_block(block, "\t"))
            result.append("}")
            return result

        spans = [Span(r.key, r.start, r.end) for r in self._named_blocks(wrapper, path)]
        splices, appended = plan_splices(spans, edits)
        if appended:
            close = wrapper.close_token
            close_line = lines[close.line]
            inner_indent = close_line[: len(close_line) - len(close_line.lstrip())] + "\t"
            inserted: List[str] = []
            for block in appended:
                inserted.extend(indent_block(block, inner_indent))
            splices.append(
                Splice((close.line, close.start), (close.line, close.start), inserted, insert=True)
            )
        return apply_splices(lines, splices)
