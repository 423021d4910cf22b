"""
TourAvels Backend — Pydantic Response Schemas
==============================================

What:  Pydantic models for the acknowledgments, health report and error body.
Why:   Records themselves are schema-less (plain dicts), but the write
       acknowledgments have a fixed shape that clients depend on.
How:   Field names are snake_case in Python and serialized with the driver's
       camelCase names (insertedId, matchedCount, ...) via serialization_alias;
       FastAPI serializes response models by alias.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

# Records are opaque JSON objects; only `_id` is recognized by the system
Record = Dict[str, Any]


# ══════════════════════════════════════════════════════════════════════════
# Write Acknowledgments
# ══════════════════════════════════════════════════════════════════════════


class InsertAck(BaseModel):
    """Returned by POST /<resource>."""
    acknowledged: bool = Field(description="Whether the write was acknowledged by the server")
    inserted_id: str = Field(
        serialization_alias="insertedId",
        description="Store-assigned identifier of the new record",
    )


class UpdateAck(BaseModel):
    """
    Returned by PUT /<resource>/{id}.

    A missing id is not an error: it yields matchedCount == 0.
    """
    acknowledged: bool = Field(description="Whether the write was acknowledged by the server")
    matched_count: int = Field(serialization_alias="matchedCount")
    modified_count: int = Field(serialization_alias="modifiedCount")
    upserted_count: int = Field(default=0, serialization_alias="upsertedCount")
    upserted_id: Optional[str] = Field(default=None, serialization_alias="upsertedId")


class DeleteAck(BaseModel):
    """Returned by DELETE /<resource>/{id}; deletedCount is 0 for a missing id."""
    acknowledged: bool = Field(description="Whether the write was acknowledged by the server")
    deleted_count: int = Field(serialization_alias="deletedCount")


# ══════════════════════════════════════════════════════════════════════════
# Health & Errors
# ══════════════════════════════════════════════════════════════════════════


class HealthResponse(BaseModel):
    """
    What:  Result of GET /health.
    Why:   Lets the hosting platform and the frontend tell "server up" apart
           from "server up and database reachable".
    """
    ok: bool = Field(description="True when the store answered a ping")
    message: str = Field(description="Human-readable status")
    error: Optional[str] = Field(default=None, description="Failure detail when ok is false")
    version: str = Field(description="Application version")
    uptime_seconds: float = Field(description="Seconds since service started")


class ErrorResponse(BaseModel):
    """
    Error body for every failed request (always HTTP 500).

    Example:
        {
            "message": "Error adding spot",
            "error": "connection closed",
            "request_id": "a1b2c3d4"
        }
    """
    message: str = Field(description="Human-readable error description")
    error: Optional[str] = Field(default=None, description="Underlying error detail")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")
