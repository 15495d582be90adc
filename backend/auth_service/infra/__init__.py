"""Concrete adapters for the service ports (SQL, Redis, PyJWT)."""
