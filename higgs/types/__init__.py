"""Type definitions and Pydantic models."""

from .items import (
    ItemCategory,
    ItemGroup,
    ItemType,
    TypeDogmaAttribute,
    TypeDogmaEffect,
)
from .summary import CrawlError, CrawlStatistics, CrawlSummary, StageStats
from .universe import (
    AsteroidBelt,
    Constellation,
    ESIRecord,
    Moon,
    Planet,
    Position,
    Region,
    SolarSystem,
    Star,
    Stargate,
    StargateDestination,
    Station,
    SystemPlanet,
)

__all__ = [
    # Universe
    "ESIRecord",
    "Position",
    "Region",
    "Constellation",
    "SolarSystem",
    "SystemPlanet",
    "Star",
    "Planet",
    "Moon",
    "AsteroidBelt",
    "Stargate",
    "StargateDestination",
    "Station",
    # Items
    "ItemType",
    "ItemGroup",
    "ItemCategory",
    "TypeDogmaAttribute",
    "TypeDogmaEffect",
    # Summary
    "CrawlError",
    "StageStats",
    "CrawlStatistics",
    "CrawlSummary",
]
