"""ESI item type, group and category models."""

from typing import ClassVar, Optional

from pydantic import BaseModel, Field

from .universe import ESIRecord, id_field


class TypeDogmaAttribute(BaseModel):
    """Dogma attribute value attached to a type."""

    attribute_id: int
    value: float


class TypeDogmaEffect(BaseModel):
    """Dogma effect attached to a type."""

    effect_id: int
    is_default: bool = False


class ItemType(ESIRecord):
    """An inventory type."""

    id_attribute: ClassVar[str] = "type_id"

    type_id: int = id_field("type_id")
    name: str = ""
    description: str = ""
    group_id: int = 0
    published: bool = False
    capacity: Optional[float] = None
    dogma_attributes: Optional[list[TypeDogmaAttribute]] = None
    dogma_effects: Optional[list[TypeDogmaEffect]] = None
    graphic_id: Optional[int] = None
    icon_id: Optional[int] = None
    market_group_id: Optional[int] = None
    mass: Optional[float] = None
    packaged_volume: Optional[float] = None
    portion_size: Optional[int] = None
    radius: Optional[float] = None
    volume: Optional[float] = None


class ItemGroup(ESIRecord):
    """An inventory group."""

    id_attribute: ClassVar[str] = "group_id"

    group_id: int = id_field("group_id")
    name: str = ""
    category_id: int = 0
    published: bool = False
    types: list[int] = Field(default_factory=list)


class ItemCategory(ESIRecord):
    """An inventory category."""

    id_attribute: ClassVar[str] = "category_id"

    category_id: int = id_field("category_id")
    name: str = ""
    published: bool = False
    groups: list[int] = Field(default_factory=list)
