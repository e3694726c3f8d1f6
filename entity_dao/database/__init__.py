"""
Database access: engine creation and statement execution.
"""

from entity_dao.database.db import create_engine_from_settings
from entity_dao.database.executor import Query, QueryExecutor

__all__ = ["Query", "QueryExecutor", "create_engine_from_settings"]
