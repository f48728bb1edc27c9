"""API Layer: FastAPI routes, auth-cookie helpers, dependencies and error handlers.

Invariants:
    - Routes registered explicitly in main.py (no auto-discovery)
    - All JSON endpoints return structured responses; browser flows answer with 303 redirects

Design Decisions:
    - Thin routes delegate to core/ and services/
"""
