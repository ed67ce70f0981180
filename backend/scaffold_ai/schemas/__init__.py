"""Pydantic Schemas - request validation at the API boundary."""
