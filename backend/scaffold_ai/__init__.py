"""Scaffold AI - workflow generation and execution service over Paradigm and LLM APIs.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
