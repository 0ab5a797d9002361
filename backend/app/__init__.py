"""
Kavin's Catalog Backend — Application Package Initializer
==========================================================

What: Marks the `app` directory as a Python package.
Who:  Used implicitly by Python's import system and explicitly by Alembic, pytest, and uvicorn.

Architecture Note:
    The backend follows a layered architecture:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns, role checks
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← Catalog, product form, auth chain
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │  Database / Supabase / Gemini       │  ← Remote platform services
    └─────────────────────────────────────┘

    Authentication, object storage and text generation are external services.
    This package only orchestrates them: it never stores passwords, never
    serves images itself and never runs a model.
"""

__version__ = "1.0.0"
