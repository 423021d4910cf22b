"""
TourAvels Backend — MongoDB Connection Management
==================================================

What:  MongoStore owns the single process-lifetime MongoDB client and exposes
       the `spots` and `plans` collection handles.
Why:   Centralizes all connection logic; route handlers receive the store
       through FastAPI's dependency injection instead of a module global.
How:   connect() builds an AsyncMongoClient (Stable API v1), pings the
       cluster and binds the collection handles. It is idempotent.
Who:   Created by create_app(); connected by the lifespan handler; read by
       route handlers via get_store().
When:  Connected once at startup; closed at shutdown.

Concurrency:
    The one client is shared by all concurrent requests. PyMongo's async
    client keeps its own connection pool, so no locking happens per request.
    Only connect() is serialized, so two health checks racing to reconnect
    do not open two clients.
"""

import asyncio
import logging
from typing import Any, Callable, Dict, Optional

from fastapi import Request
from pymongo import AsyncMongoClient
from pymongo.errors import PyMongoError
from pymongo.server_api import ServerApi
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from touravels.config import Settings, settings as default_settings
from touravels.exceptions import StoreConnectionError, StoreNotConnectedError

logger = logging.getLogger(__name__)

# Logical collection names used by the routers
SPOTS = "spots"
PLANS = "plans"


class MongoStore:
    """
    Connection manager for the backing document store.

    Attributes:
        settings:        Source of the URI, database and collection names
        client_factory:  Callable building the driver client; tests swap it
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client_factory: Callable[..., Any] = AsyncMongoClient,
    ):
        self.settings = settings or default_settings
        self.client_factory = client_factory
        self.client: Optional[Any] = None
        self._collections: Dict[str, Any] = {}
        self._lock = asyncio.Lock()

    @property
    def is_connected(self) -> bool:
        return bool(self._collections)

    async def connect(self, attempts: Optional[int] = None) -> None:
        """
        Establish the connection and bind the collection handles.

        What:    No-op when already connected. Otherwise tries up to
                 `attempts` times (default: DB_CONNECT_ATTEMPTS) with
                 exponential backoff between attempts.
        Raises:  StoreConnectionError once every attempt has failed.
        """
        async with self._lock:
            if self.is_connected:
                return

            retrying = AsyncRetrying(
                retry=retry_if_exception_type(PyMongoError),
                stop=stop_after_attempt(attempts or self.settings.db_connect_attempts),
                wait=wait_exponential(
                    multiplier=self.settings.db_connect_min_wait,
                    max=self.settings.db_connect_max_wait,
                ),
                before_sleep=before_sleep_log(logger, logging.WARNING),
                reraise=True,
            )
            try:
                async for attempt in retrying:
                    with attempt:
                        await self._open()
            except PyMongoError as e:
                logger.error("MongoDB connection failed: %s", str(e), exc_info=True)
                raise StoreConnectionError(
                    context={"error": str(e), "error_type": type(e).__name__},
                ) from e

            logger.info(
                "MongoDB connected successfully (database=%s)", self.settings.db_name
            )

    async def _open(self) -> None:
        """One connection attempt: build a client, ping it, bind collections."""
        client = self.client_factory(
            self.settings.database_uri,
            server_api=ServerApi("1", strict=True, deprecation_errors=True),
            serverSelectionTimeoutMS=self.settings.db_server_selection_timeout_ms,
        )
        try:
            await client.admin.command("ping")
        except PyMongoError:
            await client.close()
            raise

        db = client[self.settings.db_name]
        self.client = client
        self._collections = {
            SPOTS: db[self.settings.spots_collection],
            PLANS: db[self.settings.plans_collection],
        }

    def get_collection(self, name: str) -> Any:
        """
        Return the handle for a logical collection ("spots" or "plans").

        Raises:
            StoreNotConnectedError: connect() has not succeeded yet
            ValueError:             unknown collection name
        """
        if name not in (SPOTS, PLANS):
            raise ValueError(f"Unknown collection '{name}'. Must be one of: {SPOTS}, {PLANS}")
        if not self.is_connected:
            raise StoreNotConnectedError(context={"collection": name})
        return self._collections[name]

    async def ping(self) -> None:
        """
        Re-verify liveness with a `ping` command.

        Why every call: a connection that was fine at startup can drop later;
        the health route reports the current state, not the startup state.
        """
        if self.client is None:
            raise StoreNotConnectedError()
        try:
            await self.client.admin.command("ping")
        except PyMongoError as e:
            logger.warning("MongoDB ping failed: %s", str(e))
            raise StoreConnectionError(
                message="DB not connected",
                context={"error": str(e), "error_type": type(e).__name__},
            ) from e

    async def close(self) -> None:
        """Close the client and unbind the collection handles."""
        if self.client is not None:
            await self.client.close()
            logger.info("MongoDB connection closed")
        self.client = None
        self._collections = {}


# ── Dependency ────────────────────────────────────────────────────────────
def get_store(request: Request) -> MongoStore:
    """
    FastAPI dependency returning the store owned by the running app.

    Example usage in a route:
        @router.get("/touristsSpot")
        async def list_spots(store: MongoStore = Depends(get_store)):
            ...
    """
    return request.app.state.store
