"""
TourAvels Backend — Application Package Initializer
====================================================

What: Marks the `touravels` directory as a Python package.
Why:  Enables module imports like `from touravels.config import settings`.
Who:  Used implicitly by Python's import system and explicitly by pytest and uvicorn.

Architecture Note:
    The backend is a thin pass-through over MongoDB:

    ┌─────────────────────────────────────┐
    │     Routes (touristsSpot, tourPlans)│  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │     RecordService                   │  ← id parsing, serialization, error wrapping
    ├─────────────────────────────────────┤
    │     MongoStore                      │  ← one process-lifetime connection
    └─────────────────────────────────────┘

    There is no business-rule layer: records are schema-less and forwarded
    field-for-field to the store.
"""

__version__ = "1.0.0"
