"""
Database Initialization - Create tables and development seed data.

Production schemas are expected to be managed by migrations; these
helpers exist for local development and tests.

Run directly to create the tables and seed data:
    python -m winereview.database.init_db
"""
from typing import Optional

from sqlalchemy import select

from winereview.core.logging_config import get_logger
from winereview.database.connection import DatabaseConnection, get_database
from winereview.database.models import Base, User, Wine

logger = get_logger(__name__)

DEV_USER_EMAIL = "dev@winereviewer.local"
DEV_USER_NAME = "Dev Sommelier"

DEV_WINES = [
    {"name": "Casillero del Diablo", "winery": "Concha y Toro", "country": "Chile",
     "grape": "Cabernet Sauvignon", "year": 2020},
    {"name": "Catena Malbec", "winery": "Catena Zapata", "country": "Argentina", "grape": "Malbec", "year": 2019},
    {"name": "Miolo Reserva", "winery": "Miolo", "country": "Brazil", "grape": "Merlot", "year": 2021},
    {"name": "Chianti Classico", "winery": "Castello di Ama", "country": "Italy", "grape": "Sangiovese", "year": 2018},
]


def init_tables(db: Optional[DatabaseConnection] = None) -> bool:
    """
    Create all tables if they don't exist.

    Returns:
        True if tables were created successfully
    """
    db = db or get_database()
    try:
        Base.metadata.create_all(db.engine)
        logger.info("Database tables initialized successfully")
        return True
    except Exception as e:
        logger.error(f"Failed to initialize tables: {e}")
        raise


def drop_tables(db: Optional[DatabaseConnection] = None) -> bool:
    """
    Drop all tables (use with caution!).

    This is mainly for testing/development purposes.
    """
    db = db or get_database()
    try:
        Base.metadata.drop_all(db.engine)
        logger.warning("Database tables dropped")
        return True
    except Exception as e:
        logger.error(f"Failed to drop tables: {e}")
        raise


def seed_development_data(db: Optional[DatabaseConnection] = None) -> int:
    """
    Insert the development login user and a small wine catalog.

    Idempotent: the user is matched by email and wines by name, so
    repeated startups do not duplicate rows.

    Returns:
        Number of rows inserted
    """
    db = db or get_database()
    inserted = 0

    with db.get_session() as session:
        if session.scalar(select(User).where(User.email == DEV_USER_EMAIL)) is None:
            session.add(User(email=DEV_USER_EMAIL, display_name=DEV_USER_NAME))
            inserted += 1

        existing_names = set(session.scalars(select(Wine.name)).all())
        for wine in DEV_WINES:
            if wine["name"] not in existing_names:
                session.add(Wine(**wine))
                inserted += 1

    if inserted:
        logger.info(f"Seeded {inserted} development rows")
    return inserted


if __name__ == "__main__":
    print("Initializing database tables...")
    init_tables()
    seed_development_data()
    print("Done!")
