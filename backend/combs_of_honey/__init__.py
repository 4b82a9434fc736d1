"""
Combs of Honey — Application Package Initializer
=================================================

What: Marks the `combs_of_honey` directory as a Python package.
Who:  Imported by uvicorn, Alembic, pytest and the `combs-of-honey` console script.

Architecture Note:
    The service follows a layered layout:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │    Services (Comb / Honey logic)    │  ← Queries, visit counting
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Routes translate path parameters and bodies into service calls.
    Services own every query and raise application exceptions.
    Models describe the two tables; schemas describe the JSON contract.
"""

__version__ = "1.0.0"
