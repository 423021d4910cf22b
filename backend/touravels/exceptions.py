"""
TourAvels Backend — Custom Exception Hierarchy
===============================================

What:  Application-specific exceptions for the three failure kinds a request can hit.
Why:   Route handlers stay free of try/except; global handlers (main.py) turn
       every one of these into an HTTP 500 JSON body with a free-text message.
How:   Each exception carries a message and an optional context dict.

Exception Hierarchy:
    TouravelsError (base)
    ├── StoreNotConnectedError   → 500 (request arrived before the store connected)
    ├── InvalidIdentifierError   → 500 (path id is not a valid ObjectId)
    └── DatabaseError            → 500 (driver raised during a store operation)
        └── StoreConnectionError → fatal at startup under the abort policy
"""

from typing import Any, Dict, Optional


class TouravelsError(Exception):
    """
    Base exception for all TourAvels application errors.

    Attributes:
        message:  User-facing error description (returned in the API response)
        context:  Additional debug info (logged server-side)
    """

    def __init__(
        self,
        message: str = "Server error",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)

    @property
    def detail(self) -> str:
        """Underlying error text, falling back to the message itself."""
        return str(self.context.get("error") or self.message)


class StoreNotConnectedError(TouravelsError):
    """
    Raised when a collection handle is requested before connect() succeeded.

    When:  Under the degrade policy, every request made while the cluster is
           unreachable ends here.
    """

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message="DB not connected", context=context)


class InvalidIdentifierError(TouravelsError):
    """Raised when a path id cannot be parsed as a store ObjectId."""

    def __init__(self, identifier: str, context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        ctx["identifier"] = identifier
        ctx.setdefault(
            "error",
            f"'{identifier}' is not a valid id, it must be a 24-character hex string",
        )
        super().__init__(message="Invalid id", context=ctx)
        self.identifier = identifier


class DatabaseError(TouravelsError):
    """
    Raised when a store operation fails (network, auth, query).

    The message names the operation ("Error adding spot"); the driver's own
    text is kept in context["error"] and included in the response body.
    """

    def __init__(
        self,
        message: str = "Server error",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class StoreConnectionError(DatabaseError):
    """
    Raised when the store cannot be reached (connect or ping).

    At startup this terminates the process when DB_ABORT_ON_CONNECT_FAILURE
    is true; at /health it becomes an `{"ok": false}` response.
    """

    def __init__(
        self,
        message: str = "MongoDB connection failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
