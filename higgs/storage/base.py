"""Store interface consumed by the crawl pipeline."""

from enum import Enum
from typing import Any, Optional, Protocol

# Collections written by the crawl stages
REGIONS = "regions"
CONSTELLATIONS = "constellations"
SYSTEMS = "solarsystems"
STARS = "stars"
PLANETS = "planets"
MOONS = "moons"
ASTEROID_BELTS = "asteroid_belts"
STARGATES = "stargates"
STATIONS = "stations"
TYPES = "types"
GROUPS = "groups"
CATEGORIES = "categories"

# Every collection cleared by a full snapshot, including static collections
# that older loaders populated and this one does not
STATIC_COLLECTIONS = [
    REGIONS,
    CONSTELLATIONS,
    SYSTEMS,
    STARS,
    PLANETS,
    MOONS,
    ASTEROID_BELTS,
    STARGATES,
    STATIONS,
    CATEGORIES,
    GROUPS,
    TYPES,
    "ancestries",
    "bloodlines",
    "factions",
]


class InsertOutcome(str, Enum):
    """Result of inserting a record."""

    INSERTED = "inserted"
    DUPLICATE = "duplicate"


class Store(Protocol):
    """Document store used by the crawl pipeline.

    Implementations must accept concurrent inserts from many workers.
    """

    async def insert(self, collection: str, record: dict[str, Any]) -> InsertOutcome:
        """Insert one document. Raises StoreError for non-duplicate failures."""
        ...

    async def query(
        self, collection: str, filter: Optional[dict[str, Any]] = None
    ) -> list[dict[str, Any]]:
        """Return every document matching the filter."""
        ...

    async def delete_all(self, collection: str) -> int:
        """Remove every document in a collection; returns the count removed."""
        ...

    async def close(self) -> None:
        """Release connections."""
        ...
