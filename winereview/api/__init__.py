"""
API module - FastAPI routes and HTTP handling.

This module handles:
- Request validation and parsing
- Session checks on protected routes
- Translating domain errors into HTTP responses
"""
from winereview.api.main import app, create_app

__all__ = ["app", "create_app"]
