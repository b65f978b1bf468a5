"""
REST API for the smart store.

A single FastAPI application exposing:
- Store CRUD over StoreService
- API user CRUD over AuthenticationService
"""

from api.main import app

__all__ = ["app"]
