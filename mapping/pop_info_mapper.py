"""Maps between ProvincePopInfo and the parser's LocationPopData."""

from decimal import Decimal

from entities.province import PopDef, ProvincePopInfo, reconcile_pops
from parsing.pop_definition_parser import LocationPopData, PopDefinition


class PopInfoMapper:
    """Converts the pop records of one named block to a ProvincePopInfo and back."""

    def map_to_entity(self, file_data: LocationPopData) -> ProvincePopInfo:
        return ProvincePopInfo(
            pops=[
                PopDef(
                    pop_type=pop.pop_type,
                    size=Decimal(pop.size),
                    culture=pop.culture,
                    religion=pop.religion,
                )
                for pop in file_data.pops
            ]
        )

    def map_to_file_data(self, location_name: str, entity: ProvincePopInfo) -> LocationPopData:
        """Duplicate pops are reconciled before writing, the later size winning."""
        return LocationPopData(
            location_name=location_name,
            pops=[
                PopDefinition(
                    pop_type=pop.pop_type,
                    size=pop.size,
                    culture=pop.culture,
                    religion=pop.religion,
                )
                for pop in reconcile_pops(entity.pops)
            ],
        )
