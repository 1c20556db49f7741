"""
Create all tables directly from the models.

Used for SQLite and local development; deployed databases go through
Alembic (see app/db/migrate.py).
"""
import logging

from app.db.session import engine
from app.db.base import Base

logger = logging.getLogger(__name__)


def init_db(bind=None):
    # Register every model with Base.metadata before create_all
    import app.db.models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
    logger.info("Database tables ensured")
