"""
e-Foncier Backend: Application Package
=======================================

What:  Land-registry record management API (cadastral parcels, their audit
       trail, notes, attached documents, and citizen document requests).
Who:   Imported by uvicorn (`efoncier.main:app`), Alembic, and pytest.

Architecture Note:
    The backend keeps a layered structure:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← validation, diffing, aggregates
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Routes translate HTTP into service calls. Services raise the exceptions
    in `efoncier.exceptions`; the handlers registered in `efoncier.main`
    turn them into `{"error": ...}` responses.
"""

__version__ = "1.0.0"
