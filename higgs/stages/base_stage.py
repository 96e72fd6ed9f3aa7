"""Base stage pattern for ESI entity types.

A stage knows where its identifiers come from, how to address one entity,
which model decodes it and which collection stores it. The pipeline supplies
the fetch -> decode -> store loop; stages only describe the entity type.
"""

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any

from pydantic import ValidationError

from ..clients.esi_client import ESIClient
from ..clients.pagination import fetch_id_list, fetch_paginated_ids
from ..core.errors import RecordDecodeError
from ..storage.base import Store
from ..types.universe import ESIRecord
from .identifiers import unique_ids

logger = logging.getLogger(__name__)


class IdSource(str, Enum):
    """Where a stage gets its identifiers from."""

    ROOT_LIST = "root_list"
    PAGINATED_LIST = "paginated_list"
    DERIVED = "derived"


class BaseStage(ABC):
    """Abstract base class for crawl stages."""

    # Override in subclasses
    name: str = "base"
    description: str = "Base stage"
    collection: str = ""
    model: type[ESIRecord] = ESIRecord
    detail_path: str = ""  # e.g. "/latest/universe/regions/{id}/"
    id_source: IdSource = IdSource.ROOT_LIST

    # Stages that must be stored before this one runs
    dependencies: list[str] = []

    # Worker count multiplier for very large id sets
    fan_out: int = 1

    # Under the legacy failure policy, a fetch failure stops the rest of the batch
    abort_batch_on_fetch_failure: bool = False

    @abstractmethod
    async def resolve_ids(self, client: ESIClient, store: Store) -> list[int]:
        """Build the deduplicated identifier set for this stage.

        Args:
            client: ESI client for list endpoints.
            store: Store holding already-crawled parent records.

        Returns:
            Identifiers to fetch, without duplicates or the sentinel 0.
        """
        ...

    def detail_url(self, client: ESIClient, entity_id: int) -> str:
        """Build the detail URL for one entity."""
        return client.esi_url(self.detail_path.format(id=entity_id))

    def decode(self, url: str, entity_id: int, body: bytes) -> ESIRecord:
        """Decode a detail body and fill in the id when ESI leaves it out.

        Raises:
            RecordDecodeError: If the body does not match the model.
        """
        try:
            record = self.model.model_validate_json(body)
        except ValidationError as e:
            raise RecordDecodeError(
                url, body, f"Failed to decode {self.name} {entity_id}: {e}"
            ) from e

        if record.record_id is None:
            record = record.with_id(entity_id)
        return record

    def describe(self) -> dict[str, Any]:
        """Summary of the stage for listings."""
        return {
            "name": self.name,
            "description": self.description,
            "collection": self.collection,
            "source": self.id_source.value,
            "dependencies": list(self.dependencies),
            "detail_path": self.detail_path,
            "fan_out": self.fan_out,
        }


class RootListStage(BaseStage):
    """Stage whose identifiers come from one non-paginated list endpoint."""

    id_source = IdSource.ROOT_LIST
    list_path: str = ""

    async def resolve_ids(self, client: ESIClient, store: Store) -> list[int]:
        return unique_ids(await fetch_id_list(client, self.list_path))

    def describe(self) -> dict[str, Any]:
        info = super().describe()
        info["list_path"] = self.list_path
        return info


class PaginatedListStage(RootListStage):
    """Stage whose identifiers come from a page-numbered list endpoint."""

    id_source = IdSource.PAGINATED_LIST

    async def resolve_ids(self, client: ESIClient, store: Store) -> list[int]:
        return unique_ids(await fetch_paginated_ids(client, self.list_path))


class DerivedStage(BaseStage):
    """Stage whose identifiers are read out of persisted parent records."""

    id_source = IdSource.DERIVED
    parent_collection: str = ""
    parent_model: type[ESIRecord] = ESIRecord

    @abstractmethod
    def extract_ids(self, parents: list[Any]) -> list[int]:
        """Pull child identifiers out of decoded parent records."""
        ...

    async def resolve_ids(self, client: ESIClient, store: Store) -> list[int]:
        documents = await store.query(self.parent_collection, {})
        parents = [self.parent_model.model_validate(doc) for doc in documents]
        logger.debug(f"{self.name}: read {len(parents)} records from {self.parent_collection}")
        return self.extract_ids(parents)

    def describe(self) -> dict[str, Any]:
        info = super().describe()
        info["parent_collection"] = self.parent_collection
        return info
