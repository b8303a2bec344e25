"""Maps between location attribute dictionaries and ProvinceLocation."""

from typing import Dict

import config
from entities.province import ProvinceLocation
from parsing.case_insensitive import CaseInsensitiveDict
from parsing.fields import is_decimal, parse_decimal


class LocationMapper:
    """Converts one attribute block to a ProvinceLocation and back."""

    def map_to_entity(self, file_data: Dict[str, str]) -> ProvinceLocation:
        data = CaseInsensitiveDict(file_data)
        harbor = data.get("natural_harbor_suitability", config.DEFAULT_HARBOR_SUITABILITY)
        if not is_decimal(harbor):
            parse_decimal(harbor, config.DEFAULT_HARBOR_SUITABILITY, "natural_harbor_suitability")
            harbor = config.DEFAULT_HARBOR_SUITABILITY
        known = {name.casefold() for name in config.LOCATION_FIELDS}
        return ProvinceLocation(
            topography=data.get("topography", ""),
            vegetation=data.get("vegetation", ""),
            climate=data.get("climate", ""),
            religion=data.get("religion", ""),
            culture=data.get("culture", ""),
            raw_material=data.get("raw_material", ""),
            natural_harbor_suitability=harbor,
            extra_attributes={
                key: value for key, value in data.items() if key.casefold() not in known
            },
        )

    def map_to_file_data(self, entity: ProvinceLocation) -> CaseInsensitiveDict:
        """Returns the attribute set in write order.

        Empty fields and a default harbor suitability are left out, since
        ``key =`` with no value is not valid in the file; reading the block
        back restores them.
        """
        data = CaseInsensitiveDict()
        for name in config.LOCATION_FIELDS:
            value = getattr(entity, name)
            if name == "natural_harbor_suitability" and value == config.DEFAULT_HARBOR_SUITABILITY:
                continue
            if value:
                data[name] = value
        for key, value in entity.extra_attributes.items():
            if value and key not in data:
                data[key] = value
        return data
