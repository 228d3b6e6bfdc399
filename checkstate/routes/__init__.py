# Routes package init
"""
Checkstate: API Routes Package
================================

Route Inventory:
    - states.py:  /api/states   (list checked boxes of a document)
                  /api/state    (check or uncheck one box)
    - health.py:  GET /health   (storage health probe)

Routes stay thin: they read the request, call CheckStore and shape the
response. Storage rules live in services/state_store.py.
"""
