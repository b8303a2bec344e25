"""
Writes changed provinces back into the mod's three files.

Each file is read, the changed records are merged into its existing lines,
and the result is written back. Untouched lines are kept as they are.
"""

import logging
import os
from typing import Iterable, List, Optional, Sequence, Tuple

from core.file_io import FileContent, read_lines, write_content
from core.file_layout import ATTRIBUTES, LOCATIONS, POPULATION, FileLayout
from core.transaction_manager import TransactionManager
from entities.province import ProvinceInfo
from mapping.province_mapper import ProvinceMapper
from parsing.key_value_parser import KeyValueFileParser
from parsing.merge import RecordEdit
from parsing.nested_structure_parser import NestedStructureParser
from parsing.pop_definition_parser import PopDefinitionParser


def _stale_keys(province: ProvinceInfo, *candidates: Optional[str]) -> Tuple[str, ...]:
    """Keys a province may still occupy on disk, other than its current name."""
    folded = {province.name.casefold()}
    keys = []
    for key in candidates:
        if key and key.casefold() not in folded:
            folded.add(key.casefold())
            keys.append(key)
    return tuple(keys)


class ProvinceFileWriter:
    """Merges province changes into the mod's name table, templates and pop files."""

    def __init__(self, layout: FileLayout, mapper: Optional[ProvinceMapper] = None):
        self.layout = layout
        self._mapper = mapper or ProvinceMapper()
        self._names_parser = KeyValueFileParser()
        self._templates_parser = NestedStructureParser()
        self._pops_parser = PopDefinitionParser()

    def target_files(self) -> List[str]:
        """The files a save writes to, in write order."""
        return [
            self.layout.write_target(LOCATIONS),
            self.layout.write_target(ATTRIBUTES),
            self.layout.write_target(POPULATION),
        ]

    # --- Edit Construction ---

    def name_edits(
        self, upserts: Sequence[ProvinceInfo], deletes: Sequence[ProvinceInfo]
    ) -> List[RecordEdit]:
        edits = []
        for province in deletes:
            edits.append(
                RecordEdit(province.name, None, _stale_keys(province, province.origin_name))
            )
        for province in upserts:
            if province.unnamed:
                continue
            edits.append(
                RecordEdit(
                    province.name,
                    self._names_parser.format_entry(province.name, province.id),
                    _stale_keys(province, province.origin_name),
                )
            )
        return edits

    def attribute_edits(
        self, upserts: Sequence[ProvinceInfo], deletes: Sequence[ProvinceInfo]
    ) -> List[RecordEdit]:
        edits = []
        for province in deletes:
            edits.append(
                RecordEdit(province.name, None, _stale_keys(province, province.origin_name, province.id))
            )
        for province in upserts:
            stale = _stale_keys(province, province.origin_name, province.id)
            entry = self._mapper.location_entry(province)
            if entry is None:
                edits.append(RecordEdit(province.name, None, stale))
            else:
                edits.append(
                    RecordEdit(
                        province.name,
                        self._templates_parser.format_entry(province.name, entry),
                        stale,
                    )
                )
        return edits

    def pop_edits(
        self, upserts: Sequence[ProvinceInfo], deletes: Sequence[ProvinceInfo]
    ) -> List[RecordEdit]:
        edits = []
        for province in deletes:
            edits.append(
                RecordEdit(province.name, None, _stale_keys(province, province.origin_name))
            )
        for province in upserts:
            stale = _stale_keys(province, province.origin_name)
            entry = self._mapper.pop_entry(province)
            if entry is not None and province.unnamed:
                logging.warning(
                    "Province %s has pops but no name; its pops are not written.", province.id
                )
                entry = None
            if entry is None:
                edits.append(RecordEdit(province.name, None, stale))
            else:
                edits.append(
                    RecordEdit(province.name, self._pops_parser.format_entry(entry), stale)
                )
        return edits

    # --- Writing ---

    def save(
        self,
        upserts: Iterable[ProvinceInfo],
        deletes: Iterable[ProvinceInfo] = (),
        transaction: Optional[TransactionManager] = None,
    ) -> List[str]:
        """Writes the given changes, one file after the other.

        Args:
            upserts: Added or modified provinces.
            deletes: Provinces to remove from every file.
            transaction: If given, files this call creates are registered
                with it so a rollback removes them.

        Returns:
            The paths that were written.

        Raises:
            StructuralParseError: If an existing file is malformed. Files
                written before the failure are left as written.
        """
        upserts = list(upserts)
        deletes = list(deletes)
        if not upserts and not deletes:
            return []
        names_file, templates_file, pops_file = self.target_files()
        plan = [
            (names_file, self._names_parser, self.name_edits(upserts, deletes)),
            (templates_file, self._templates_parser, self.attribute_edits(upserts, deletes)),
            (pops_file, self._pops_parser, self.pop_edits(upserts, deletes)),
        ]
        written = []
        for path, parser, edits in plan:
            if self._merge_file(path, parser, edits, transaction):
                written.append(path)
        logging.info(
            "Saved %d changed and %d deleted provinces to %d file(s).",
            len(upserts),
            len(deletes),
            len(written),
        )
        return written

    def _merge_file(self, path, parser, edits: List[RecordEdit], transaction) -> bool:
        exists = os.path.isfile(path)
        if not exists and all(edit.lines is None for edit in edits):
            logging.debug("Skipping %s: nothing to write and no file to remove from.", path)
            return False
        content = read_lines(path) if exists else FileContent()
        merged = parser.merge_lines(content.lines, edits, path)
        if exists and merged == content.lines:
            logging.debug("No changes for %s", path)
            return False
        if not exists and transaction is not None:
            transaction.track_created(path)
        content.lines = merged
        write_content(path, content)
        logging.info("Wrote %s", path)
        return True
