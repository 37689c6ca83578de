"""
SnipNet Backend - Application Package Initializer
=================================================

What: The social core of the SnipNet code-snippet sharing platform.
Who:  Imported by uvicorn (`snipnet.main:app`), Alembic and pytest.

Architecture Note:
    The backend follows the same layering for every feature:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← State machine, authorization
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Services never open their own sessions. Every service method receives the
    request-scoped AsyncSession as its first argument, so one HTTP request maps
    to exactly one database transaction.
"""

__version__ = "1.0.0"
