"""
Database module - SQLAlchemy persistence layer.

This module handles:
- Database connection management and transactional scopes
- ORM models with declarative cascade constraints
- Table creation and development seed data
"""
from winereview.database.connection import DatabaseConnection, get_database
from winereview.database.models import Base, User, Wine, Review, Comment
from winereview.database.init_db import init_tables, drop_tables, seed_development_data

__all__ = [
    # Connection
    "DatabaseConnection",
    "get_database",
    # Models
    "Base",
    "User",
    "Wine",
    "Review",
    "Comment",
    # Init
    "init_tables",
    "drop_tables",
    "seed_development_data",
]
