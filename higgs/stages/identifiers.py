"""Identifier extraction from persisted solar systems.

Child stages never trust the raw lists: ids are deduplicated and the sentinel
``0`` ("no such child") is dropped before anything is fetched.
"""

from typing import Iterable

from ..types.universe import SolarSystem

SENTINEL_ID = 0


def unique_ids(ids: Iterable[int]) -> list[int]:
    """Deduplicate identifiers and drop the sentinel, keeping first-seen order."""
    seen: set[int] = set()
    result: list[int] = []
    for entity_id in ids:
        if entity_id == SENTINEL_ID or entity_id in seen:
            continue
        seen.add(entity_id)
        result.append(entity_id)
    return result


def star_ids(systems: Iterable[SolarSystem]) -> list[int]:
    return unique_ids(system.star_id for system in systems)


def planet_ids(systems: Iterable[SolarSystem]) -> list[int]:
    return unique_ids(
        planet.planet_id for system in systems for planet in system.planets
    )


def moon_ids(systems: Iterable[SolarSystem]) -> list[int]:
    return unique_ids(
        moon
        for system in systems
        for planet in system.planets
        for moon in planet.moons
    )


def asteroid_belt_ids(systems: Iterable[SolarSystem]) -> list[int]:
    return unique_ids(
        belt
        for system in systems
        for planet in system.planets
        for belt in planet.asteroid_belts
    )


def stargate_ids(systems: Iterable[SolarSystem]) -> list[int]:
    return unique_ids(gate for system in systems for gate in system.stargates)


def station_ids(systems: Iterable[SolarSystem]) -> list[int]:
    return unique_ids(station for system in systems for station in system.stations)
