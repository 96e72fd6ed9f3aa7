"""Crawl stages, one per ESI entity type."""

from .base_stage import BaseStage, DerivedStage, IdSource, PaginatedListStage, RootListStage
from .identifiers import unique_ids
from .item_types import CategoryStage, GroupStage, TypeStage
from .system_children import (
    AsteroidBeltStage,
    MoonStage,
    PlanetStage,
    StargateStage,
    StarStage,
    StationStage,
)
from .universe import ConstellationStage, RegionStage, SystemStage

__all__ = [
    "BaseStage",
    "RootListStage",
    "PaginatedListStage",
    "DerivedStage",
    "IdSource",
    "unique_ids",
    # Universe
    "RegionStage",
    "ConstellationStage",
    "SystemStage",
    # System children
    "StarStage",
    "PlanetStage",
    "MoonStage",
    "AsteroidBeltStage",
    "StargateStage",
    "StationStage",
    # Items
    "TypeStage",
    "GroupStage",
    "CategoryStage",
]

# Registry of available stages, in default crawl order
STAGES: dict[str, type[BaseStage]] = {
    "regions": RegionStage,
    "constellations": ConstellationStage,
    "systems": SystemStage,
    "stars": StarStage,
    "planets": PlanetStage,
    "moons": MoonStage,
    "asteroid_belts": AsteroidBeltStage,
    "stargates": StargateStage,
    "stations": StationStage,
    "types": TypeStage,
    "groups": GroupStage,
    "categories": CategoryStage,
}


def get_stage(name: str) -> type[BaseStage]:
    """Get stage class by name."""
    if name not in STAGES:
        raise ValueError(f"Unknown stage: {name}. Available: {list(STAGES.keys())}")
    return STAGES[name]


def list_stages() -> list[str]:
    """Get list of available stage names."""
    return list(STAGES.keys())
