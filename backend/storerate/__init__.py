"""
StoreRate Backend — Application Package Initializer
====================================================

What: Marks the `storerate` directory as a Python package.
Who:  Imported by uvicorn (`storerate.main:app`), Alembic and pytest.

Architecture Note:
    The backend is layered:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Services (Identity, Registry,     │  ← Authorization, invariants,
    │   Ledger, Aggregator, Access Ctl)   │    aggregation
    ├─────────────────────────────────────┤
    │     Repositories (users/stores/     │  ← SQLAlchemy queries
    │     ratings)                        │
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    `storerate.container.build_services` is the single place where the
    repositories are constructed and injected into the services.
"""

__version__ = "1.0.0"
