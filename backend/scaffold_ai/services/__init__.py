"""Services Layer - workflow execution, generation and template filling.

Invariants:
    - Step dispatch uses an explicit dict mapping (no auto-discovery)
    - Services receive clients; they never build them
"""
