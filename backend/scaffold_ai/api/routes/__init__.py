"""Route Modules - one file per concern.

Invariants:
    - Each module defines its own APIRouter with prefix and tags
    - Routes delegate to services/core; they only validate and wire clients
"""
