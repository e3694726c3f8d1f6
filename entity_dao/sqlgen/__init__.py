"""
SQL generation for registered entities.
"""

from entity_dao.sqlgen.entity_sql import EntitySql, is_unset_id

__all__ = ["EntitySql", "is_unset_id"]
