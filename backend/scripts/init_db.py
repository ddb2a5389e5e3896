#!/usr/bin/env python3
"""
Initialize database tables without alembic
Creates the destinations and travel_plans tables from the SQLModel metadata
"""

import sys
from pathlib import Path

# Ensure project root is on sys.path for "app.*" imports
PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT))

from sqlalchemy import create_engine, inspect
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import SQLModel
import logging

import app.db.base  # noqa: F401  registers tables on SQLModel.metadata
from app.core.settings import get_settings

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def _normalize_db_url(db_url: str) -> str:
    if db_url.startswith("postgres://"):
        return "postgresql://" + db_url[len("postgres://"):]
    return db_url


def init_database() -> int:
    db_url = _normalize_db_url(get_settings().DB_URL)

    try:
        logger.info("Connecting to database...")
        engine = create_engine(db_url, echo=False)

        logger.info("Creating all tables...")
        SQLModel.metadata.create_all(bind=engine)

        tables = inspect(engine).get_table_names()
        logger.info(f"Tables present: {', '.join(sorted(tables))}")
        return 0

    except SQLAlchemyError as e:
        logger.error(f"Database initialization failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(init_database())
