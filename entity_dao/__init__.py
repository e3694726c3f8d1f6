"""
entity-dao: generic data access for plain Python entities on SQLAlchemy Core.

Usage:
    from sqlalchemy import Column, Integer, MetaData, String, Table, create_engine
    from entity_dao import EntityRegistry, GenericDao, QueryExecutor

    metadata = MetaData()
    person_table = Table(
        "person", metadata,
        Column("id", Integer, primary_key=True),
        Column("name", String),
    )

    registry = EntityRegistry()
    registry.register(Person, person_table)

    dao = GenericDao(registry, QueryExecutor(create_engine("sqlite://"), registry))
    dao.store(Person(name="Ann"))
"""

from entity_dao.database import Query, QueryExecutor, create_engine_from_settings
from entity_dao.exceptions import ConfigurationError, DaoError, QueryError
from entity_dao.models import EntityDescriptor, EntityRegistry
from entity_dao.repositories import (
    DatabaseGeneratedKeys,
    ExternallyGeneratedKeys,
    GenericDao,
    KeyGenerationStrategy,
)
from entity_dao.sqlgen import EntitySql

__all__ = [
    "ConfigurationError",
    "DaoError",
    "DatabaseGeneratedKeys",
    "EntityDescriptor",
    "EntityRegistry",
    "EntitySql",
    "ExternallyGeneratedKeys",
    "GenericDao",
    "KeyGenerationStrategy",
    "Query",
    "QueryError",
    "QueryExecutor",
    "create_engine_from_settings",
]
