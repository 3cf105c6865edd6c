"""
Wine Reviewer API.

Backend for a mobile wine-review app, organized by responsibility:
- api/       : FastAPI routes, dependencies and HTTP error translation
- core/      : Configuration, logging, exceptions, session tokens, audit
- services/  : Business logic (identity, authorization, lifecycle, uploads, listings)
- database/  : SQLAlchemy models, engine/session management, schema setup
- models/    : Pydantic request/response schemas (camelCase on the wire)
"""
__version__ = "0.1.0"
