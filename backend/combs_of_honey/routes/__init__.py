# Routes package init
"""
Combs of Honey — API Routes Package
====================================

What:  HTTP route handlers that accept requests and return responses.

Route Inventory:
    - combs.py:   POST /combs                               (create comb)
                  GET  /combs                               (list combs)
                  GET  /combs/{comb_id}                     (get comb)
    - honey.py:   POST   /combs/{comb_id}/honey             (create honey)
                  GET    /combs/{comb_id}/honey             (list honey, counts visits)
                  GET    /combs/{comb_id}/honey/{honey_type} (get honey, counts a visit)
                  DELETE /combs/{comb_id}/honey/{honey_type} (delete honey)
    - health.py:  GET  /health                              (service health check)

Routes are thin: extract path parameters and bodies, call the service,
set the status code. Queries and error translation live in services.
"""
