# Middleware package init
"""
TourAvels Backend — Middleware Package
=======================================

Middleware Chain (request direction):
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Request ID first, so every later log line can carry it
    2. Logging sees the final status and total duration
    3. CORS innermost: answers preflight OPTIONS for the allowlisted origins
"""
