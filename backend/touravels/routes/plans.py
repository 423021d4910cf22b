"""
TourAvels Backend — Tour Plan Route Handlers
=============================================

What:  CRUD endpoints under /tourPlans.
Why:   Users save tour plans and list their own by email ("My Plans" page).

Ownership:
    `email` is only a list filter. Update and delete do not check it:
    any caller may change any plan by ID.
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, Query

from touravels.database import PLANS, MongoStore, get_store
from touravels.schemas.records import DeleteAck, ErrorResponse, InsertAck, Record, UpdateAck
from touravels.services.record_service import plan_service

router = APIRouter(prefix="/tourPlans", tags=["Tour Plans"])

ERROR_RESPONSES = {500: {"description": "Store error", "model": ErrorResponse}}


def get_plans_collection(store: MongoStore = Depends(get_store)) -> Any:
    """Collection handle for plans; raises StoreNotConnectedError before connect."""
    return store.get_collection(PLANS)


@router.get(
    "",
    responses=ERROR_RESPONSES,
    summary="List tour plans",
    description="Returns every plan, or only the plans whose owner email matches `email`.",
)
async def list_plans(
    email: Optional[str] = Query(
        default=None,
        description="Owner filter: only plans whose `email` field equals this value",
    ),
    collection: Any = Depends(get_plans_collection),
) -> List[Record]:
    return await plan_service.list_records(collection, {"email": email})


@router.get(
    "/{plan_id}",
    responses=ERROR_RESPONSES,
    summary="Get a tour plan by ID",
    description="Returns the plan, or an empty object when no plan has this ID.",
)
async def get_plan(plan_id: str, collection: Any = Depends(get_plans_collection)) -> Record:
    return await plan_service.get_record(collection, plan_id)


@router.post(
    "",
    response_model=InsertAck,
    responses=ERROR_RESPONSES,
    summary="Create a tour plan",
)
async def create_plan(
    payload: Dict[str, Any] = Body(..., description="The new plan (any JSON object)"),
    collection: Any = Depends(get_plans_collection),
) -> InsertAck:
    return await plan_service.create_record(collection, payload)


@router.put(
    "/{plan_id}",
    response_model=UpdateAck,
    responses=ERROR_RESPONSES,
    summary="Update a tour plan",
    description="Merges the request body into the plan. An unknown ID returns matchedCount 0.",
)
async def update_plan(
    plan_id: str,
    payload: Dict[str, Any] = Body(..., description="Fields to overwrite"),
    collection: Any = Depends(get_plans_collection),
) -> UpdateAck:
    return await plan_service.update_record(collection, plan_id, payload)


@router.delete(
    "/{plan_id}",
    response_model=DeleteAck,
    responses=ERROR_RESPONSES,
    summary="Delete a tour plan",
)
async def delete_plan(plan_id: str, collection: Any = Depends(get_plans_collection)) -> DeleteAck:
    return await plan_service.delete_record(collection, plan_id)
