"""Stages derived from stored solar systems.

All six depend only on the systems stage and are independent of each other.
"""

from ..storage.base import (
    ASTEROID_BELTS,
    MOONS,
    PLANETS,
    STARGATES,
    STARS,
    STATIONS,
    SYSTEMS,
)
from ..types.universe import (
    AsteroidBelt,
    Moon,
    Planet,
    SolarSystem,
    Star,
    Stargate,
    Station,
)
from . import identifiers
from .base_stage import DerivedStage


class SystemChildStage(DerivedStage):
    """Base for stages whose ids live inside solar system records."""

    parent_collection = SYSTEMS
    parent_model = SolarSystem
    dependencies = ["systems"]


class StarStage(SystemChildStage):
    name = "stars"
    description = "Stars (ids taken from systems.star_id)"
    collection = STARS
    model = Star
    detail_path = "/v1/universe/stars/{id}/"

    def extract_ids(self, parents: list[SolarSystem]) -> list[int]:
        return identifiers.star_ids(parents)


class PlanetStage(SystemChildStage):
    name = "planets"
    description = "Planets (ids taken from systems.planets)"
    collection = PLANETS
    model = Planet
    detail_path = "/v1/universe/planets/{id}/"

    def extract_ids(self, parents: list[SolarSystem]) -> list[int]:
        return identifiers.planet_ids(parents)


class MoonStage(SystemChildStage):
    name = "moons"
    description = "Moons (ids taken from systems.planets[].moons)"
    collection = MOONS
    model = Moon
    detail_path = "/v1/universe/moons/{id}/"

    def extract_ids(self, parents: list[SolarSystem]) -> list[int]:
        return identifiers.moon_ids(parents)


class AsteroidBeltStage(SystemChildStage):
    name = "asteroid_belts"
    description = "Asteroid belts (ids taken from systems.planets[].asteroid_belts)"
    collection = ASTEROID_BELTS
    model = AsteroidBelt
    detail_path = "/v1/universe/asteroid_belts/{id}/"

    def extract_ids(self, parents: list[SolarSystem]) -> list[int]:
        return identifiers.asteroid_belt_ids(parents)


class StargateStage(SystemChildStage):
    name = "stargates"
    description = "Stargates (ids taken from systems.stargates)"
    collection = STARGATES
    model = Stargate
    detail_path = "/v1/universe/stargates/{id}/"

    def extract_ids(self, parents: list[SolarSystem]) -> list[int]:
        return identifiers.stargate_ids(parents)


class StationStage(SystemChildStage):
    name = "stations"
    description = "NPC stations (ids taken from systems.stations)"
    collection = STATIONS
    model = Station
    detail_path = "/v2/universe/stations/{id}/"

    def extract_ids(self, parents: list[SolarSystem]) -> list[int]:
        return identifiers.station_ids(parents)
