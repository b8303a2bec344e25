"""Orchestrates mapping of complete ProvinceInfo entities across the three file shapes."""

import logging
from typing import Dict, Optional

from entities.province import ProvinceInfo, ProvinceLocation, ProvincePopInfo
from mapping.location_mapper import LocationMapper
from mapping.pop_info_mapper import PopInfoMapper
from parsing.case_insensitive import CaseInsensitiveDict
from parsing.pop_definition_parser import LocationPopData


class ProvinceMapper:
    """Combines LocationMapper and PopInfoMapper to build and flatten provinces.

    The name table (``name = HEX``) decides which provinces exist. Attribute
    blocks are joined onto it by name, falling back to the identifier, and pop
    blocks by name. Attribute blocks matching neither become unnamed provinces
    keyed by the block key.
    """

    def __init__(self):
        self._location_mapper = LocationMapper()
        self._pop_info_mapper = PopInfoMapper()

    def map_to_entity(
        self,
        province_id: str,
        name: str,
        location_data: Optional[Dict[str, str]] = None,
        pop_data: Optional[LocationPopData] = None,
        unnamed: bool = False,
    ) -> ProvinceInfo:
        """Creates a province as loaded from disk (its origin name is its name)."""
        if location_data:
            location = self._location_mapper.map_to_entity(location_data)
        else:
            location = ProvinceLocation()
        if pop_data is not None:
            pop_info = self._pop_info_mapper.map_to_entity(pop_data)
        else:
            pop_info = ProvincePopInfo()
        return ProvinceInfo(
            id=province_id,
            name=name,
            origin_name=name,
            location_info=location,
            pop_info=pop_info,
            unnamed=unnamed,
        )

    def map_to_entity_dictionary(
        self,
        name_to_id: Dict[str, str],
        location_data: Dict[str, Dict[str, str]],
        pop_data: Dict[str, LocationPopData],
    ) -> CaseInsensitiveDict:
        """Builds every province from the three parsed files, keyed by identifier."""
        result = CaseInsensitiveDict()
        location_data = CaseInsensitiveDict(location_data)
        pop_data = CaseInsensitiveDict(pop_data)
        joined_blocks = set()

        # The name table defines which provinces exist
        for name, province_id in name_to_id.items():
            if not province_id:
                logging.warning("Name '%s' has no identifier, skipping.", name)
                continue
            if province_id in result:
                logging.warning(
                    "Identifier %s is named both '%s' and '%s', keeping '%s'.",
                    province_id,
                    result[province_id].name,
                    name,
                    name,
                )
            block_key = name if name in location_data else province_id
            block = location_data.get(block_key)
            if block is not None:
                joined_blocks.add(block_key.casefold())
            result[province_id] = self.map_to_entity(
                province_id, name, block, pop_data.get(name)
            )

        # Attribute blocks with no name mapping are kept as unnamed provinces
        for block_key, block in location_data.items():
            if block_key.casefold() in joined_blocks or block_key in result:
                continue
            result[block_key] = self.map_to_entity(block_key, block_key, block, unnamed=True)

        orphan_pops = [name for name in pop_data if name not in name_to_id]
        if orphan_pops:
            logging.warning(
                "%d pop block(s) have no name mapping and were not loaded: %s",
                len(orphan_pops),
                ", ".join(sorted(orphan_pops)[:10]),
            )
        return result

    # --- Flattening for writes ---

    def location_entry(self, province: ProvinceInfo) -> Optional[CaseInsensitiveDict]:
        """The attribute block to write, or None if the province has no attributes set."""
        data = self._location_mapper.map_to_file_data(province.location_info)
        return data if len(data) else None

    def pop_entry(self, province: ProvinceInfo) -> Optional[LocationPopData]:
        """The pop block to write, or None if the province has no pops."""
        if not province.pop_info.pops:
            return None
        return self._pop_info_mapper.map_to_file_data(province.name, province.pop_info)

    def map_to_name_id_dictionary(self, provinces: Dict[str, ProvinceInfo]) -> CaseInsensitiveDict:
        """Extracts the name table, leaving out unnamed provinces."""
        result = CaseInsensitiveDict()
        for province in provinces.values():
            if not province.unnamed:
                result[province.name] = province.id
        return result

    def map_to_location_data_dictionary(self, provinces: Dict[str, ProvinceInfo]) -> CaseInsensitiveDict:
        """Extracts attribute blocks keyed by province name."""
        result = CaseInsensitiveDict()
        for province in provinces.values():
            entry = self.location_entry(province)
            if entry is not None:
                result[province.name] = entry
        return result

    def map_to_pop_data_dictionary(self, provinces: Dict[str, ProvinceInfo]) -> CaseInsensitiveDict:
        """Extracts pop blocks keyed by province name."""
        result = CaseInsensitiveDict()
        for province in provinces.values():
            entry = self.pop_entry(province)
            if entry is not None:
                result[province.name] = entry
        return result
