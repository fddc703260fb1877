"""
Database initialization script.

Run this script to create all required tables in the database
named by DATABASE_URL.
"""
import logging

from notes_database.db import create_db_engine, get_database_url
from notes_database.models import Base

logger = logging.getLogger(__name__)

# PUBLIC_INTERFACE
def init_db(engine):
    """Initializes the database by creating all tables if they do not exist."""
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables ensured on %s", engine.url.render_as_string(hide_password=True))

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    engine = create_db_engine(get_database_url())
    init_db(engine)
    engine.dispose()
    print("Database tables created successfully.")
