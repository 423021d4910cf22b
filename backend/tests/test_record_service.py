"""
TourAvels Backend — Record Service Unit Tests
==============================================

What:  Tests for RecordService and its helpers, without HTTP.
How:   Uses the in-memory FakeCollection for the happy paths and AsyncMock
       collections that raise PyMongoError for the failure paths.

What we test:
    ✅ create → get returns every payload field plus the generated _id
    ✅ update merges; other fields unchanged
    ✅ delete → get returns {}
    ✅ missing ids yield zero counts, not errors
    ✅ malformed ids raise InvalidIdentifierError
    ✅ driver and BSON encoding errors are wrapped in DatabaseError with an operation message
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from bson import ObjectId
from pymongo.errors import AutoReconnect, OperationFailure

from touravels.exceptions import DatabaseError, InvalidIdentifierError
from touravels.services.record_service import (
    RecordService,
    parse_object_id,
    serialize_document,
    strip_identifier,
)

from conftest import FakeCollection


class TestHelpers:
    """Tests for id parsing, serialization and payload cleanup."""

    def test_parse_object_id_valid(self):
        oid = ObjectId()
        assert parse_object_id(str(oid)) == oid

    @pytest.mark.parametrize("bad_id", ["123", "not-an-id", "zz" * 12, ""])
    def test_parse_object_id_invalid(self, bad_id):
        with pytest.raises(InvalidIdentifierError) as exc_info:
            parse_object_id(bad_id)
        assert exc_info.value.message == "Invalid id"
        assert exc_info.value.identifier == bad_id

    def test_serialize_document_nested_object_ids(self):
        oid, spot_id = ObjectId(), ObjectId()
        created = datetime(2024, 5, 1, 8, 30, tzinfo=timezone.utc)
        document = {
            "_id": oid,
            "spots": [spot_id, {"ref": spot_id}],
            "createdAt": created,
            "days": 3,
        }

        assert serialize_document(document) == {
            "_id": str(oid),
            "spots": [str(spot_id), {"ref": str(spot_id)}],
            "createdAt": "2024-05-01T08:30:00+00:00",
            "days": 3,
        }

    def test_strip_identifier_leaves_input_untouched(self):
        payload = {"_id": "abc", "name": "Sajek Valley"}
        assert strip_identifier(payload) == {"name": "Sajek Valley"}
        assert payload["_id"] == "abc"


class TestRecordServiceCrud:
    """Round trips through the in-memory collection."""

    def setup_method(self):
        self.service = RecordService("spot")
        self.collection = FakeCollection("touristsSpot")

    @pytest.mark.asyncio
    async def test_create_then_get(self):
        payload = {"name": "Cox's Bazar", "country": "Bangladesh", "visitors": 2_000_000}

        ack = await self.service.create_record(self.collection, payload)
        record = await self.service.get_record(self.collection, ack.inserted_id)

        assert ack.acknowledged is True
        assert record == {"_id": ack.inserted_id, **payload}

    @pytest.mark.asyncio
    async def test_create_ignores_client_identifier(self):
        client_id = str(ObjectId())
        ack = await self.service.create_record(self.collection, {"_id": client_id, "name": "x"})
        assert ack.inserted_id != client_id

    @pytest.mark.asyncio
    async def test_update_merges_fields(self):
        ack = await self.service.create_record(
            self.collection, {"name": "Cox's Bazar", "country": "Bangladesh"}
        )

        result = await self.service.update_record(
            self.collection, ack.inserted_id, {"name": "Cox's Bazar Beach"}
        )
        record = await self.service.get_record(self.collection, ack.inserted_id)

        assert result.matched_count == 1
        assert result.modified_count == 1
        assert result.upserted_id is None
        assert record["name"] == "Cox's Bazar Beach"
        assert record["country"] == "Bangladesh"

    @pytest.mark.asyncio
    async def test_update_cannot_change_identifier(self):
        ack = await self.service.create_record(self.collection, {"name": "Sylhet"})

        await self.service.update_record(
            self.collection, ack.inserted_id, {"_id": str(ObjectId()), "name": "Sylhet Tea"}
        )
        record = await self.service.get_record(self.collection, ack.inserted_id)

        assert record["_id"] == ack.inserted_id
        assert record["name"] == "Sylhet Tea"

    @pytest.mark.asyncio
    async def test_update_missing_id_is_zero_match(self):
        result = await self.service.update_record(self.collection, str(ObjectId()), {"a": 1})
        assert result.acknowledged is True
        assert result.matched_count == 0
        assert result.modified_count == 0

    @pytest.mark.asyncio
    async def test_delete_then_get_returns_empty(self):
        ack = await self.service.create_record(self.collection, {"name": "Bandarban"})

        result = await self.service.delete_record(self.collection, ack.inserted_id)

        assert result.deleted_count == 1
        assert await self.service.get_record(self.collection, ack.inserted_id) == {}

    @pytest.mark.asyncio
    async def test_delete_missing_id_is_zero_deleted(self):
        result = await self.service.delete_record(self.collection, str(ObjectId()))
        assert result.deleted_count == 0

    @pytest.mark.asyncio
    async def test_list_empty_collection(self):
        assert await self.service.list_records(self.collection) == []

    @pytest.mark.asyncio
    async def test_list_with_filter_ignores_none(self):
        await self.service.create_record(self.collection, {"email": "a@b.com"})
        await self.service.create_record(self.collection, {"email": "c@d.com"})

        everything = await self.service.list_records(self.collection, {"email": None})
        mine = await self.service.list_records(self.collection, {"email": "a@b.com"})

        assert len(everything) == 2
        assert [plan["email"] for plan in mine] == ["a@b.com"]

    @pytest.mark.asyncio
    async def test_malformed_id_never_reaches_store(self):
        collection = MagicMock()
        collection.find_one = AsyncMock()

        with pytest.raises(InvalidIdentifierError):
            await self.service.get_record(collection, "nope")
        collection.find_one.assert_not_awaited()


class TestRecordServiceErrors:
    """Driver failures are wrapped with operation-specific messages."""

    def setup_method(self):
        self.service = RecordService("plan")

    @pytest.mark.asyncio
    async def test_insert_failure(self):
        collection = MagicMock()
        collection.insert_one = AsyncMock(side_effect=AutoReconnect("connection closed"))

        with pytest.raises(DatabaseError) as exc_info:
            await self.service.create_record(collection, {"title": "Weekend"})

        assert exc_info.value.message == "Error adding plan"
        assert exc_info.value.detail == "connection closed"

    @pytest.mark.asyncio
    async def test_update_failure(self):
        collection = MagicMock()
        collection.update_one = AsyncMock(side_effect=OperationFailure("not authorized"))

        with pytest.raises(DatabaseError, match="Error updating plan"):
            await self.service.update_record(collection, str(ObjectId()), {"title": "x"})

    @pytest.mark.asyncio
    async def test_delete_failure(self):
        collection = MagicMock()
        collection.delete_one = AsyncMock(side_effect=AutoReconnect("reset"))

        with pytest.raises(DatabaseError, match="Error deleting plan"):
            await self.service.delete_record(collection, str(ObjectId()))

    @pytest.mark.asyncio
    async def test_get_failure(self):
        collection = MagicMock()
        collection.find_one = AsyncMock(side_effect=AutoReconnect("reset"))

        with pytest.raises(DatabaseError, match="Error fetching plan"):
            await self.service.get_record(collection, str(ObjectId()))

    @pytest.mark.asyncio
    async def test_list_failure(self):
        collection = MagicMock()
        collection.find.return_value.to_list = AsyncMock(side_effect=AutoReconnect("reset"))

        with pytest.raises(DatabaseError, match="Server error"):
            await self.service.list_records(collection, {"email": "a@b.com"})

    @pytest.mark.asyncio
    async def test_unencodable_payload_wrapped(self):
        """BSON encoding failures get the same operation message as driver errors."""
        collection = FakeCollection("tourPlans")

        with pytest.raises(DatabaseError, match="Error adding plan"):
            await self.service.create_record(collection, {"budget": 2**70})

        assert collection.documents == {}
