"""Persistence for crawled records."""

from .base import (
    ASTEROID_BELTS,
    CATEGORIES,
    CONSTELLATIONS,
    GROUPS,
    MOONS,
    PLANETS,
    REGIONS,
    STARGATES,
    STARS,
    STATIC_COLLECTIONS,
    STATIONS,
    SYSTEMS,
    TYPES,
    InsertOutcome,
    Store,
)
from .mongo_store import MongoStore

__all__ = [
    "Store",
    "InsertOutcome",
    "MongoStore",
    "STATIC_COLLECTIONS",
    "REGIONS",
    "CONSTELLATIONS",
    "SYSTEMS",
    "STARS",
    "PLANETS",
    "MOONS",
    "ASTEROID_BELTS",
    "STARGATES",
    "STATIONS",
    "TYPES",
    "GROUPS",
    "CATEGORIES",
]
