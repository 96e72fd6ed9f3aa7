"""Item type, group and category stages.

Independent of the universe chain. Their id sets are large, so they run with
twice the usual number of batches.
"""

from ..storage.base import CATEGORIES, GROUPS, TYPES
from ..types.items import ItemCategory, ItemGroup, ItemType
from .base_stage import PaginatedListStage, RootListStage


class TypeStage(PaginatedListStage):
    name = "types"
    description = "Inventory types"
    collection = TYPES
    model = ItemType
    list_path = "/v1/universe/types/"
    detail_path = "/v3/universe/types/{id}/"
    fan_out = 2


class GroupStage(PaginatedListStage):
    name = "groups"
    description = "Inventory groups"
    collection = GROUPS
    model = ItemGroup
    list_path = "/v1/universe/groups/"
    detail_path = "/v1/universe/groups/{id}/"
    fan_out = 2


class CategoryStage(RootListStage):
    # The categories list endpoint is not paginated
    name = "categories"
    description = "Inventory categories"
    collection = CATEGORIES
    model = ItemCategory
    list_path = "/v1/universe/categories/"
    detail_path = "/v1/universe/categories/{id}/"
    fan_out = 2
