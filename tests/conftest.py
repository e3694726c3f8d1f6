"""
Pytest configuration and fixtures for testing.

This module provides shared entity types, tables and fixtures for all tests.
Integration tests run against an in-memory SQLite database shared through a
StaticPool, so every query sees the same data.
"""

from dataclasses import dataclass
from typing import Optional
from unittest.mock import MagicMock

import pytest
from sqlalchemy import Column, ForeignKey, Integer, MetaData, String, Table, create_engine
from sqlalchemy.pool import StaticPool

from entity_dao.database import QueryExecutor
from entity_dao.models import EntityRegistry
from entity_dao.repositories import GenericDao

metadata = MetaData()

person_table = Table(
    "person",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("name", String, nullable=False),
    Column("score", Integer, nullable=False, default=0),
)

address_table = Table(
    "address",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("person_id", Integer, ForeignKey("person.id")),
    Column("street", String),
)


@dataclass
class Person:
    id: Optional[int] = None
    name: Optional[str] = None
    score: Optional[int] = None


@dataclass
class Address:
    id: Optional[int] = None
    person_id: Optional[int] = None
    street: Optional[str] = None


@pytest.fixture
def registry() -> EntityRegistry:
    """Registry with Person and Address mapped."""
    registry = EntityRegistry()
    registry.register(Person, person_table)
    registry.register(Address, address_table)
    return registry


@pytest.fixture
def engine():
    """Create an in-memory SQLite engine with all tables."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    metadata.create_all(engine)
    try:
        yield engine
    finally:
        metadata.drop_all(engine)
        engine.dispose()


@pytest.fixture
def executor(engine, registry) -> QueryExecutor:
    return QueryExecutor(engine, registry)


@pytest.fixture
def dao(registry, executor) -> GenericDao:
    """Dao running against the in-memory database."""
    return GenericDao(registry, executor)


@pytest.fixture
def mock_query():
    """A query handle double that returns itself from auto_close() and __enter__."""
    query = MagicMock(name="query")
    query.auto_close.return_value = query
    query.__enter__.return_value = query
    query.__exit__.return_value = False
    query.execute_update.return_value = 1
    return query


@pytest.fixture
def mock_executor(registry, mock_query):
    executor = MagicMock(name="executor")
    executor.registry = registry
    executor.query.return_value = mock_query
    return executor


@pytest.fixture
def mock_dao(registry, mock_executor) -> GenericDao:
    """Dao wired to a mock executor, for checking statement sequencing."""
    return GenericDao(registry, mock_executor)
