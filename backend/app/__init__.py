"""
DocTrack Backend — Application Package Initializer
===================================================

What: Marks the `app` directory as a Python package.
Who:  Imported by uvicorn, Alembic and pytest.

Architecture Note:
    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Services (Validator, Registry,    │  ← Business rules, email dispatch
    │             Notifier)               │
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │     Database handle (Persistence)   │  ← Async engine + reconnect policy
    └─────────────────────────────────────┘

    The database handle and the notifier are created by the application
    factory and reach route handlers through FastAPI dependencies.
"""

__version__ = "1.0.0"
