"""
Engine creation from settings.

Provides the SQLAlchemy engine the query executor runs statements on. The
database URL comes from Settings (DATABASE_URL), falling back to a local
SQLite file.
"""

import logging
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

from entity_dao.utils.config import Settings, get_settings

logger = logging.getLogger(__name__)

def create_engine_from_settings(settings: Optional[Settings] = None, **engine_options) -> Engine:
    """
    Create a SQLAlchemy engine for the configured database.

    Args:
        settings: Settings to read DATABASE_URL and SQL_ECHO from. Defaults to
            the cached application settings.
        **engine_options: Extra keyword arguments for create_engine

    Returns:
        Engine: The new engine
    """
    settings = settings or get_settings()
    database_url = settings.DATABASE_URL

    if database_url.startswith("sqlite"):
        logger.info("Using SQLite database")
        engine_options.setdefault("connect_args", {"check_same_thread": False})

    engine = create_engine(database_url, echo=settings.SQL_ECHO, **engine_options)
    logger.debug(f"Created engine for {engine.url.render_as_string(hide_password=True)}")
    return engine
