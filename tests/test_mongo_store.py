"""Tests for the motor-backed store, with mocked collections."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from pymongo.errors import DuplicateKeyError, PyMongoError

from higgs.core.errors import StoreError
from higgs.storage import InsertOutcome, MongoStore


@pytest.fixture
def collection():
    return MagicMock()


@pytest.fixture
def mongo(collection):
    store = MongoStore("mongodb://localhost:27017", "podded")
    store.db = {"regions": collection}
    return store


class TestMongoStore:
    """Tests for MongoStore error mapping."""

    @pytest.mark.asyncio
    async def test_insert(self, mongo, collection):
        collection.insert_one = AsyncMock()

        outcome = await mongo.insert("regions", {"_id": 1})

        assert outcome == InsertOutcome.INSERTED
        collection.insert_one.assert_awaited_once_with({"_id": 1})

    @pytest.mark.asyncio
    async def test_duplicate_key(self, mongo, collection):
        collection.insert_one = AsyncMock(side_effect=DuplicateKeyError("E11000 duplicate key"))

        assert await mongo.insert("regions", {"_id": 1}) == InsertOutcome.DUPLICATE

    @pytest.mark.asyncio
    async def test_other_errors_raise(self, mongo, collection):
        collection.insert_one = AsyncMock(side_effect=PyMongoError("connection reset"))

        with pytest.raises(StoreError):
            await mongo.insert("regions", {"_id": 1})

    @pytest.mark.asyncio
    async def test_query(self, mongo, collection):
        cursor = MagicMock()
        cursor.to_list = AsyncMock(return_value=[{"_id": 1}])
        collection.find = MagicMock(return_value=cursor)

        assert await mongo.query("regions") == [{"_id": 1}]
        collection.find.assert_called_once_with({})

    @pytest.mark.asyncio
    async def test_delete_all(self, mongo, collection):
        collection.delete_many = AsyncMock(return_value=MagicMock(deleted_count=3))

        assert await mongo.delete_all("regions") == 3

    @pytest.mark.asyncio
    async def test_not_connected(self):
        store = MongoStore("mongodb://localhost:27017", "podded")

        with pytest.raises(StoreError, match="not connected"):
            await store.insert("regions", {"_id": 1})

        with pytest.raises(StoreError, match="not connected"):
            await store.query("solarsystems")
