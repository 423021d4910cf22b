"""
TourAvels Backend — Record Service
===================================

What:  The five pass-through operations (list, get, create, update, delete)
       shared by the spot and plan resources.
Why:   Both resources behave identically apart from their collection and the
       filters their list route accepts; one service keeps that in one place.
How:   Each method issues exactly one driver call. Around that call it parses
       the path id into an ObjectId, strips `_id` from client payloads,
       renders ObjectIds as strings, and wraps driver and BSON encoding
       errors in DatabaseError.
Who:   Called by routes/spots.py and routes/plans.py.

Design Decision:
    RecordService is stateless — it receives the collection handle for each
    call, so tests can pass any object with the same async methods.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from bson import ObjectId
from bson.errors import BSONError, InvalidId
from pymongo.errors import PyMongoError

from touravels.exceptions import DatabaseError, InvalidIdentifierError
from touravels.schemas.records import DeleteAck, InsertAck, Record, UpdateAck

logger = logging.getLogger(__name__)

# Driver failures plus payloads BSON cannot encode (ints beyond 8 bytes raise
# OverflowError, keys with NUL raise InvalidDocument)
STORE_ERRORS = (PyMongoError, BSONError, OverflowError)


def parse_object_id(record_id: str) -> ObjectId:
    """
    Convert a path id into an ObjectId.

    Raises:
        InvalidIdentifierError: not a 24-character hex string
    """
    try:
        return ObjectId(record_id)
    except (InvalidId, TypeError) as e:
        raise InvalidIdentifierError(record_id, context={"error": str(e)}) from e


def serialize_document(value: Any) -> Any:
    """Recursively render ObjectIds as hex strings and datetimes as ISO 8601."""
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {key: serialize_document(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [serialize_document(item) for item in value]
    return value


def strip_identifier(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Copy of a client payload without `_id` (identifiers are store-assigned)."""
    return {key: item for key, item in payload.items() if key != "_id"}


class RecordService:
    """
    Pass-through CRUD over one kind of record.

    Attributes:
        resource: Singular name used in log lines and error messages ("spot")
    """

    def __init__(self, resource: str):
        self.resource = resource

    async def list_records(
        self,
        collection: Any,
        filters: Optional[Dict[str, Any]] = None,
    ) -> List[Record]:
        """
        Return every record matching `filters` (all records when empty).

        No pagination: the whole result set is materialized. An empty
        collection yields [] (never None).
        """
        query = {key: item for key, item in (filters or {}).items() if item is not None}
        try:
            documents = await collection.find(query).to_list(None)
        except STORE_ERRORS as e:
            logger.error("Error listing %ss: %s", self.resource, str(e), exc_info=True)
            raise DatabaseError(
                message="Server error",
                context={"error": str(e), "filters": query},
            ) from e
        return [serialize_document(doc) for doc in documents or []]

    async def get_record(self, collection: Any, record_id: str) -> Record:
        """Return one record, or {} when no record has this id."""
        object_id = parse_object_id(record_id)
        try:
            document = await collection.find_one({"_id": object_id})
        except STORE_ERRORS as e:
            logger.error("Error fetching %s %s: %s", self.resource, record_id, str(e), exc_info=True)
            raise DatabaseError(
                message=f"Error fetching {self.resource}",
                context={"error": str(e), "record_id": record_id},
            ) from e
        return serialize_document(document) if document else {}

    async def create_record(self, collection: Any, payload: Dict[str, Any]) -> InsertAck:
        """
        Insert `payload` as a new record.

        A client-supplied `_id` is dropped; the store assigns the identifier.
        """
        document = strip_identifier(payload)
        try:
            result = await collection.insert_one(document)
        except STORE_ERRORS as e:
            logger.error("Error adding %s: %s", self.resource, str(e), exc_info=True)
            raise DatabaseError(
                message=f"Error adding {self.resource}",
                context={"error": str(e)},
            ) from e

        logger.info("Created %s %s", self.resource, result.inserted_id)
        return InsertAck(
            acknowledged=result.acknowledged,
            inserted_id=str(result.inserted_id),
        )

    async def update_record(
        self,
        collection: Any,
        record_id: str,
        payload: Dict[str, Any],
    ) -> UpdateAck:
        """
        Merge `payload` into an existing record with $set.

        Only the supplied fields change. There is no existence check: an
        unknown id comes back as matchedCount == 0, not an error.
        """
        object_id = parse_object_id(record_id)
        try:
            result = await collection.update_one(
                {"_id": object_id},
                {"$set": strip_identifier(payload)},
            )
        except STORE_ERRORS as e:
            logger.error("Error updating %s %s: %s", self.resource, record_id, str(e), exc_info=True)
            raise DatabaseError(
                message=f"Error updating {self.resource}",
                context={"error": str(e), "record_id": record_id},
            ) from e

        upserted_id = result.upserted_id
        return UpdateAck(
            acknowledged=result.acknowledged,
            matched_count=result.matched_count,
            modified_count=result.modified_count,
            upserted_count=0 if upserted_id is None else 1,
            upserted_id=None if upserted_id is None else str(upserted_id),
        )

    async def delete_record(self, collection: Any, record_id: str) -> DeleteAck:
        """Delete one record; an unknown id yields deletedCount == 0."""
        object_id = parse_object_id(record_id)
        try:
            result = await collection.delete_one({"_id": object_id})
        except STORE_ERRORS as e:
            logger.error("Error deleting %s %s: %s", self.resource, record_id, str(e), exc_info=True)
            raise DatabaseError(
                message=f"Error deleting {self.resource}",
                context={"error": str(e), "record_id": record_id},
            ) from e

        if result.deleted_count:
            logger.info("Deleted %s %s", self.resource, record_id)
        return DeleteAck(
            acknowledged=result.acknowledged,
            deleted_count=result.deleted_count,
        )


# ── Singleton Instances ───────────────────────────────────────────────────
# Why singletons: RecordService holds no per-request state
spot_service = RecordService("spot")
plan_service = RecordService("plan")
