"""Core client primitives (result union, error taxonomy, owned state).

Kept free of FastAPI and transport concerns so it can be reused by the HTTP surface,
the pollers and tests.
"""
