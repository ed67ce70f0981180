"""Core Layer - pure logic: templates, code parsing, context substitution, errors.

Invariants:
    - No module in core/ imports from services/, api/ or infrastructure/
    - No IO, no async
"""
