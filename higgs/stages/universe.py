"""Region, constellation and solar system stages.

These are fed straight from ESI's root list endpoints.
"""

from ..storage.base import CONSTELLATIONS, REGIONS, SYSTEMS
from ..types.universe import Constellation, Region, SolarSystem
from .base_stage import RootListStage


class RegionStage(RootListStage):
    name = "regions"
    description = "Regions of New Eden"
    collection = REGIONS
    model = Region
    list_path = "/latest/universe/regions/"
    detail_path = "/latest/universe/regions/{id}/"
    dependencies = []
    abort_batch_on_fetch_failure = True


class ConstellationStage(RootListStage):
    name = "constellations"
    description = "Constellations"
    collection = CONSTELLATIONS
    model = Constellation
    list_path = "/latest/universe/constellations/"
    detail_path = "/latest/universe/constellations/{id}/"
    dependencies = ["regions"]
    abort_batch_on_fetch_failure = True


class SystemStage(RootListStage):
    name = "systems"
    description = "Solar systems, parents of every celestial stage"
    collection = SYSTEMS
    model = SolarSystem
    list_path = "/latest/universe/systems/"
    detail_path = "/latest/universe/systems/{id}/"
    dependencies = ["constellations"]
    abort_batch_on_fetch_failure = True
