"""Infrastructure Layer - upstream API clients and logging setup.

Invariants:
    - Upstream failures mapped to UpstreamAPIError (core/errors.py)
    - Clients hold no state beyond their configuration
"""
