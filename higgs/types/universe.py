"""ESI universe record models.

Each model decodes the ESI detail response and serializes to the MongoDB
document shape, where the entity identifier is stored as ``_id``. Reading a
document back accepts either the ESI key or ``_id``.
"""

from typing import Any, ClassVar, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


def id_field(name: str, default: Any = ...) -> Any:
    """Field stored as ``_id`` in MongoDB and named ``name`` in ESI."""
    return Field(
        default,
        validation_alias=AliasChoices(name, "_id"),
        serialization_alias="_id",
    )


class ESIRecord(BaseModel):
    """Base model for all ESI records stored by the loader."""

    # Name of the attribute holding the entity identifier
    id_attribute: ClassVar[str] = ""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @property
    def record_id(self) -> Optional[int]:
        """Get the entity identifier."""
        return getattr(self, self.id_attribute, None)

    def with_id(self, entity_id: int) -> "ESIRecord":
        """Return a copy with the identifier set."""
        return self.model_copy(update={self.id_attribute: entity_id})

    def to_document(self) -> dict[str, Any]:
        """Serialize to a MongoDB document."""
        return self.model_dump(by_alias=True, exclude_none=True)


class Position(BaseModel):
    """Cartesian position in metres."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0


class Region(ESIRecord):
    """A region of New Eden."""

    id_attribute: ClassVar[str] = "region_id"

    region_id: int = id_field("region_id")
    name: str = ""
    description: Optional[str] = None
    constellations: list[int] = Field(default_factory=list)


class Constellation(ESIRecord):
    """A constellation within a region."""

    id_attribute: ClassVar[str] = "constellation_id"

    constellation_id: int = id_field("constellation_id")
    name: str = ""
    region_id: int = 0
    position: Position = Field(default_factory=Position)
    systems: list[int] = Field(default_factory=list)


class SystemPlanet(BaseModel):
    """Planet reference embedded in a solar system."""

    planet_id: int
    moons: list[int] = Field(default_factory=list)
    asteroid_belts: list[int] = Field(default_factory=list)


class SolarSystem(ESIRecord):
    """A solar system; parent of stars, planets, moons, belts, gates and stations."""

    id_attribute: ClassVar[str] = "system_id"

    system_id: int = id_field("system_id")
    name: str = ""
    constellation_id: int = 0
    position: Position = Field(default_factory=Position)
    security_class: Optional[str] = None
    security_status: float = 0.0
    star_id: int = 0  # 0 when the system has no star
    planets: list[SystemPlanet] = Field(default_factory=list)
    stargates: list[int] = Field(default_factory=list)
    stations: list[int] = Field(default_factory=list)


class Star(ESIRecord):
    """A star. ESI does not echo the star id back."""

    id_attribute: ClassVar[str] = "star_id"

    star_id: Optional[int] = id_field("star_id", None)
    name: str = ""
    age: int = 0
    luminosity: float = 0.0
    radius: int = 0
    solar_system_id: int = 0
    spectral_class: str = ""
    temperature: int = 0
    type_id: int = 0


class Planet(ESIRecord):
    """A planet."""

    id_attribute: ClassVar[str] = "planet_id"

    planet_id: int = id_field("planet_id")
    name: str = ""
    position: Position = Field(default_factory=Position)
    system_id: int = 0
    type_id: int = 0


class Moon(ESIRecord):
    """A moon."""

    id_attribute: ClassVar[str] = "moon_id"

    moon_id: int = id_field("moon_id")
    name: str = ""
    position: Position = Field(default_factory=Position)
    system_id: int = 0


class AsteroidBelt(ESIRecord):
    """An asteroid belt. ESI does not echo the belt id back."""

    id_attribute: ClassVar[str] = "belt_id"

    belt_id: Optional[int] = id_field("belt_id", None)
    name: str = ""
    position: Position = Field(default_factory=Position)
    system_id: int = 0


class StargateDestination(BaseModel):
    """Where a stargate leads."""

    stargate_id: int
    system_id: int


class Stargate(ESIRecord):
    """A stargate."""

    id_attribute: ClassVar[str] = "stargate_id"

    stargate_id: int = id_field("stargate_id")
    name: str = ""
    destination: Optional[StargateDestination] = None
    position: Position = Field(default_factory=Position)
    system_id: int = 0
    type_id: int = 0


class Station(ESIRecord):
    """An NPC station."""

    id_attribute: ClassVar[str] = "station_id"

    station_id: int = id_field("station_id")
    name: str = ""
    max_dockable_ship_volume: float = 0.0
    office_rental_cost: float = 0.0
    owner: Optional[int] = None
    position: Position = Field(default_factory=Position)
    race_id: Optional[int] = None
    reprocessing_efficiency: float = 0.0
    reprocessing_stations_take: float = 0.0
    services: list[str] = Field(default_factory=list)
    system_id: int = 0
    type_id: int = 0
