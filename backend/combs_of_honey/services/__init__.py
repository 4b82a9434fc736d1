# Services package init
"""
Combs of Honey — Services Layer
================================

What:  Business logic between routes (HTTP) and the database (persistence).
How:   Services receive the request's AsyncSession on every call, run their
       queries and return response schemas or raise application exceptions.

Service Inventory:
    - CombService:  create / list / get combs
    - HoneyService: create / list / get / delete honey, visit counting

Both are stateless apart from their behaviour switches (EMBED_HONEY,
ATOMIC_VISITS) and are exposed as module-level singletons.
"""
