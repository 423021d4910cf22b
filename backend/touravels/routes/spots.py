"""
TourAvels Backend — Tourist Spot Route Handlers
================================================

What:  CRUD endpoints under /touristsSpot.
How:   Each handler resolves the spots collection from the injected store and
       delegates to spot_service; errors propagate to the global handlers.
Who:   Called by the frontend's spot list, detail and admin forms.

Endpoints:
    GET    /touristsSpot        list every spot
    GET    /touristsSpot/{id}   one spot, or {} if absent
    POST   /touristsSpot        create; body is the new spot
    PUT    /touristsSpot/{id}   merge-update; body holds the changed fields
    DELETE /touristsSpot/{id}   delete
"""

from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends

from touravels.database import SPOTS, MongoStore, get_store
from touravels.schemas.records import DeleteAck, ErrorResponse, InsertAck, Record, UpdateAck
from touravels.services.record_service import spot_service

router = APIRouter(prefix="/touristsSpot", tags=["Tourist Spots"])

ERROR_RESPONSES = {500: {"description": "Store error", "model": ErrorResponse}}


def get_spots_collection(store: MongoStore = Depends(get_store)) -> Any:
    """Collection handle for spots; raises StoreNotConnectedError before connect."""
    return store.get_collection(SPOTS)


@router.get(
    "",
    responses=ERROR_RESPONSES,
    summary="List tourist spots",
)
async def list_spots(collection: Any = Depends(get_spots_collection)) -> List[Record]:
    return await spot_service.list_records(collection)


@router.get(
    "/{spot_id}",
    responses=ERROR_RESPONSES,
    summary="Get a tourist spot by ID",
    description="Returns the spot, or an empty object when no spot has this ID.",
)
async def get_spot(spot_id: str, collection: Any = Depends(get_spots_collection)) -> Record:
    return await spot_service.get_record(collection, spot_id)


@router.post(
    "",
    response_model=InsertAck,
    responses=ERROR_RESPONSES,
    summary="Create a tourist spot",
    description="Stores the request body as a new spot. The response carries the generated ID.",
)
async def create_spot(
    payload: Dict[str, Any] = Body(..., description="The new spot (any JSON object)"),
    collection: Any = Depends(get_spots_collection),
) -> InsertAck:
    return await spot_service.create_record(collection, payload)


@router.put(
    "/{spot_id}",
    response_model=UpdateAck,
    responses=ERROR_RESPONSES,
    summary="Update a tourist spot",
    description=(
        "Merges the request body into the spot. Fields not in the body are left unchanged. "
        "An unknown ID returns matchedCount 0."
    ),
)
async def update_spot(
    spot_id: str,
    payload: Dict[str, Any] = Body(..., description="Fields to overwrite"),
    collection: Any = Depends(get_spots_collection),
) -> UpdateAck:
    return await spot_service.update_record(collection, spot_id, payload)


@router.delete(
    "/{spot_id}",
    response_model=DeleteAck,
    responses=ERROR_RESPONSES,
    summary="Delete a tourist spot",
)
async def delete_spot(spot_id: str, collection: Any = Depends(get_spots_collection)) -> DeleteAck:
    return await spot_service.delete_record(collection, spot_id)
