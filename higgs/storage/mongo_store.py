"""MongoDB store backed by motor."""

import logging
from typing import Any, Optional

from motor.motor_asyncio import AsyncIOMotorClient
from pymongo.errors import DuplicateKeyError, PyMongoError

from ..core.config import HiggsConfig
from ..core.errors import StoreError
from .base import InsertOutcome

logger = logging.getLogger(__name__)


class MongoStore:
    def __init__(self, uri: str, db_name: str):
        self.uri = uri
        self.db_name = db_name
        self.client: AsyncIOMotorClient | None = None
        self.db = None

    @classmethod
    def from_config(cls, config: HiggsConfig) -> "MongoStore":
        return cls(config.mongo_uri, config.mongo_database)

    async def connect(self) -> None:
        """Open the client and check the server answers."""
        self.client = AsyncIOMotorClient(self.uri)
        self.db = self.client[self.db_name]
        try:
            await self.client.admin.command("ping")
        except PyMongoError as e:
            self.client.close()
            self.client = None
            self.db = None
            raise StoreError(f"Failed to reach MongoDB at {self.uri}: {e}") from e
        logger.info(f"Connected to MongoDB: {self.uri} (db={self.db_name})")

    async def close(self) -> None:
        if self.client is not None:
            self.client.close()
            logger.info("MongoDB client connection closed")
        self.client = None
        self.db = None

    def _collection(self, name: str):
        if self.db is None:
            raise StoreError("MongoStore is not connected")
        return self.db[name]

    async def insert(self, collection: str, record: dict[str, Any]) -> InsertOutcome:
        try:
            await self._collection(collection).insert_one(record)
        except DuplicateKeyError:
            return InsertOutcome.DUPLICATE
        except PyMongoError as e:
            raise StoreError(f"Failed to insert into {collection}: {e}") from e
        return InsertOutcome.INSERTED

    async def query(
        self, collection: str, filter: Optional[dict[str, Any]] = None
    ) -> list[dict[str, Any]]:
        try:
            cursor = self._collection(collection).find(filter or {})
            return await cursor.to_list(length=None)
        except PyMongoError as e:
            raise StoreError(f"Error retrieving documents from {collection}: {e}") from e

    async def delete_all(self, collection: str) -> int:
        try:
            result = await self._collection(collection).delete_many({})
        except PyMongoError as e:
            raise StoreError(f"Failed to clear {collection}: {e}") from e
        return result.deleted_count

    async def __aenter__(self) -> "MongoStore":
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()
