"""
TourAvels Backend — Health Check & Root Routes
===============================================

What:  GET /health (store connectivity) and GET / (liveness text).
Why:   The hosting platform polls /health; "/" answers even when the
       database is down, so the two together tell process and store apart.
How:   /health reconnects if the store never connected (degrade policy),
       then pings it. A failed ping is a 500 with ok=false.
"""

import logging
import time

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, PlainTextResponse

from touravels import __version__
from touravels.database import MongoStore, get_store
from touravels.exceptions import TouravelsError
from touravels.schemas.records import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

# Track when the service started for uptime reporting
_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={500: {"description": "Store unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(store: MongoStore = Depends(get_store)):
    """
    Check that the store answers a ping.

    A single connect attempt is made when the store is not yet connected,
    so a cluster that was down at startup is picked up without a restart.
    """
    uptime = round(time.time() - _start_time, 2)
    try:
        if not store.is_connected:
            await store.connect(attempts=1)
        await store.ping()
    except TouravelsError as e:
        logger.error("Health check failed: %s", e.detail)
        body = HealthResponse(
            ok=False,
            message="DB not connected",
            error=e.detail,
            version=__version__,
            uptime_seconds=uptime,
        )
        return JSONResponse(status_code=500, content=body.model_dump())

    return HealthResponse(
        ok=True,
        message="✅ Server & DB connected",
        version=__version__,
        uptime_seconds=uptime,
    )


@router.get("/", response_class=PlainTextResponse, summary="Liveness text")
async def root() -> str:
    return "TourAvels server is running ✅"
