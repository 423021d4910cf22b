# Routes package init
"""
TourAvels Backend — API Routes Package
=======================================

Route Inventory:
    - spots.py:   GET/POST /touristsSpot, GET/PUT/DELETE /touristsSpot/{id}
    - plans.py:   GET/POST /tourPlans (?email=), GET/PUT/DELETE /tourPlans/{id}
    - health.py:  GET /health, GET /

Design Principle:
    Routes are THIN: resolve the collection, call the service, return.
    Error formatting lives in the global exception handlers (main.py).
"""
