"""
Generic data-access object.

GenericDao offers store, save, update, find, delete, count and related
operations for any entity type registered in an EntityRegistry. It builds
statements with EntitySql and runs them through a QueryExecutor, keeping
each entity's id in step with the database:

- store() inserts transient entities (id None or 0) and updates persistent
  ones, writing the new id back after an insert.
- delete_by_id(entity) resets the id to 0, but only when a row was deleted.

Batch helpers (save_all, update_all, delete_all_by_id) run one statement per
element and stop at the first error. Elements processed before the failure
stay applied; wrap the call in a transaction (a QueryExecutor bound to a
Connection from engine.begin()) when all-or-nothing behavior is needed.
"""

import logging
from typing import Any, Iterable, List, Optional, Type, TypeVar

from entity_dao.database import QueryExecutor, create_engine_from_settings
from entity_dao.exceptions import ConfigurationError
from entity_dao.models import EntityDescriptor, EntityRegistry
from entity_dao.repositories.keys import (
    DatabaseGeneratedKeys,
    ExternallyGeneratedKeys,
    KeyGenerationStrategy,
)
from entity_dao.sqlgen import EntitySql, is_unset_id
from entity_dao.utils.config import Settings, get_settings

E = TypeVar('E')

logger = logging.getLogger(__name__)

_CURRENT_VALUE = object()

class GenericDao:
    """
    Generic repository for any registered entity type.

    Attributes:
        registry (EntityRegistry): Entity metadata
        executor (QueryExecutor): Runs the generated statements
        sql (EntitySql): Builds the statements
    """

    def __init__(
        self,
        registry: EntityRegistry,
        executor: QueryExecutor,
        sql: Optional[EntitySql] = None,
        key_strategy: Optional[KeyGenerationStrategy] = None,
    ):
        """
        Initialize the dao.

        Args:
            registry: Entity metadata registry
            executor: Query executor bound to the database
            sql: Statement builder. Defaults to an EntitySql over registry.
            key_strategy: Key-generation strategy. Defaults to keys generated
                by the database.
        """
        self.registry = registry
        self.executor = executor
        self.sql = sql or EntitySql(registry)
        self.key_strategy = key_strategy or DatabaseGeneratedKeys()

    @classmethod
    def from_settings(cls, registry: EntityRegistry, settings: Optional[Settings] = None) -> "GenericDao":
        """
        Create a dao bound to a new engine built from settings.

        Args:
            registry: Entity metadata registry
            settings: Settings to use. Defaults to the cached application settings.

        Returns:
            GenericDao: The configured dao
        """
        settings = settings or get_settings()
        engine = create_engine_from_settings(settings)
        dao = cls(registry, QueryExecutor(engine, registry))
        dao.keys_generated_by_database = settings.KEYS_GENERATED_BY_DATABASE
        return dao

    # ---------------------------------------------------------------- config

    @property
    def keys_generated_by_database(self) -> bool:
        """True if keys are generated by the database, False if they are allocated before insert."""
        return self.key_strategy.generated_by_database

    @keys_generated_by_database.setter
    def keys_generated_by_database(self, value: bool) -> None:
        if value:
            self.key_strategy = DatabaseGeneratedKeys()
        elif self.key_strategy.generated_by_database:
            self.key_strategy = ExternallyGeneratedKeys(self.generate_next_id)

    def generate_next_id(self, descriptor: EntityDescriptor) -> int:
        """
        Allocate the next id for an entity type when keys are not generated by the database.

        Override in a subclass, or pass an ExternallyGeneratedKeys strategy
        with a generator.

        Raises:
            ConfigurationError: Always, unless overridden
        """
        raise ConfigurationError(
            f"No key generator configured for {descriptor.entity_type.__name__}"
        )

    # ---------------------------------------------------------------- store

    def is_persistent(self, descriptor: EntityDescriptor, entity: Any) -> bool:
        """Return True if the entity already has a row: its id is neither None nor numeric zero."""
        return not is_unset_id(descriptor.get_id(entity))

    def set_entity_id(self, descriptor: EntityDescriptor, entity: Any, new_value: int) -> None:
        descriptor.set_id(entity, int(new_value))

    def store(self, entity: E) -> E:
        """
        Insert a transient entity or update a persistent one.

        Args:
            entity: Instance of a registered type

        Returns:
            The same entity, with its id set if it was inserted

        Raises:
            ConfigurationError: If the type is not registered, or keys are
                allocated before insert and no generator is configured
        """
        entity_type = type(entity)
        descriptor = self.registry.lookup_type(entity_type)
        if descriptor is None:
            raise ConfigurationError(f"Not an entity: {entity_type!r}")

        if self.is_persistent(descriptor, entity):
            logger.debug(f"Updating {entity_type.__name__} id={descriptor.get_id(entity)}")
            self.executor.query(self.sql.update_all(entity)).auto_close().execute_update()
            return entity

        if self.key_strategy.generated_by_database:
            with self.executor.query(self.sql.insert(entity)) as q:
                q.request_generated_key()
                q.execute_update()
                next_id = q.generated_key
                self.set_entity_id(descriptor, entity, next_id)
        else:
            next_id = self.key_strategy.next_id(descriptor)
            self.set_entity_id(descriptor, entity, next_id)
            with self.executor.query(self.sql.insert(entity)) as q:
                q.execute_update()

        logger.debug(f"Inserted {entity_type.__name__} id={next_id}")
        return entity

    def save(self, entity: Any) -> None:
        """Insert an entity without checking whether it is persistent."""
        self.executor.query(self.sql.insert(entity)).auto_close().execute_update()

    def save_all(self, entities: Iterable[Any]) -> None:
        """Insert entities one by one, stopping at the first failure."""
        for entity in entities:
            self.save(entity)

    # ---------------------------------------------------------------- update

    def update(self, entity: Any) -> None:
        """Write every column of an entity to its row."""
        self.executor.query(self.sql.update_all(entity)).auto_close().execute_update()

    def update_all(self, entities: Iterable[Any]) -> None:
        """Update entities one by one, stopping at the first failure."""
        for entity in entities:
            self.update(entity)

    def update_property(self, entity: E, name: str, new_value: Any = _CURRENT_VALUE) -> E:
        """
        Update a single property in the database and in the entity.

        When new_value is omitted the entity's current value is written.
        Otherwise the entity is only changed after the database update
        succeeds.

        Args:
            entity: Instance of a registered type
            name: Property name
            new_value: Value to write

        Returns:
            The same entity
        """
        descriptor = self.registry.lookup(type(entity))
        if new_value is _CURRENT_VALUE:
            value = descriptor.get_property(entity, name)
            self.executor.query(self.sql.update_column(entity, name, value)).auto_close().execute_update()
            return entity

        self.executor.query(self.sql.update_column(entity, name, new_value)).auto_close().execute_update()
        descriptor.set_property(entity, name, new_value)
        return entity

    # ---------------------------------------------------------------- find

    def find_by_id(self, entity_type: Type[E], id: Any) -> Optional[E]:
        """Find a single entity by its id."""
        return self.executor.query(self.sql.find_by_id(entity_type, id)).auto_close().find(entity_type)

    def find_one_by_property(self, entity_type: Type[E], name: str, value: Any) -> Optional[E]:
        """Find a single entity by matching property."""
        return self.executor.query(
            self.sql.find_by_column(entity_type, name, value)
        ).auto_close().find(entity_type)

    def find_one(self, criteria: E) -> Optional[E]:
        """Find one entity matching the non-None properties of criteria."""
        return self.executor.query(self.sql.find(criteria)).auto_close().find(type(criteria))

    def find(self, entity_type_or_criteria: Any, criteria: Any = None) -> List[Any]:
        """
        Find entities matching criteria.

        Called as find(criteria) with an entity used as example, or as
        find(entity_type, criteria) where criteria is an object or a mapping
        of property names to values.
        """
        if isinstance(entity_type_or_criteria, type):
            entity_type = entity_type_or_criteria
            statement = self.sql.find(entity_type, criteria)
        else:
            entity_type = type(entity_type_or_criteria)
            statement = self.sql.find(entity_type_or_criteria)
        return self.executor.query(statement).auto_close().list(entity_type)

    # ---------------------------------------------------------------- delete

    def delete_by_id(self, entity_or_type: Any, id: Any = None) -> None:
        """
        Delete a row by id.

        Called as delete_by_id(entity_type, id), the row is deleted and no
        entity is touched. Called as delete_by_id(entity), the entity's id is
        reset to 0 if a row was actually deleted; None is ignored.
        """
        if isinstance(entity_or_type, type):
            self.executor.query(self.sql.delete_by_id(entity_or_type, id)).auto_close().execute_update()
            return

        entity = entity_or_type
        if entity is None:
            return

        result = self.executor.query(self.sql.delete_by_id(entity)).auto_close().execute_update()
        if result != 0:
            descriptor = self.registry.lookup(type(entity))
            self.set_entity_id(descriptor, entity, 0)
            logger.debug(f"Deleted {type(entity).__name__}, id reset to 0")
        else:
            logger.debug(f"No {type(entity).__name__} row deleted, id left unchanged")

    def delete_all_by_id(self, entities: Iterable[Any]) -> None:
        """Delete entities one by one, stopping at the first failure."""
        for entity in entities:
            self.delete_by_id(entity)

    # ---------------------------------------------------------------- count

    def count(self, entity_type: Type) -> int:
        """Count all rows of an entity type."""
        return self.executor.query(self.sql.count(entity_type)).auto_close().execute_count()

    # ---------------------------------------------------------------- increase

    def increase_property(self, entity_type: Type, id: Any, name: str, delta: Any) -> None:
        """Add delta to a numeric column of the row with the given id."""
        self.executor.query(
            self.sql.increase_column(entity_type, id, name, delta, True)
        ).auto_close().execute_update()

    def decrease_property(self, entity_type: Type, id: Any, name: str, delta: Any) -> None:
        """Subtract delta from a numeric column of the row with the given id."""
        self.executor.query(
            self.sql.increase_column(entity_type, id, name, delta, False)
        ).auto_close().execute_update()

    # ---------------------------------------------------------------- related

    def find_related(self, target_type: Type[E], source: Any) -> List[E]:
        """Find target_type rows whose foreign key references source."""
        return self.executor.query(self.sql.find_foreign(target_type, source)).auto_close().list(target_type)

    # ---------------------------------------------------------------- list

    def list_all(self, target_type: Type[E]) -> List[E]:
        """List all entities of a type."""
        return self.executor.query(self.sql.select_all(target_type)).auto_close().list(target_type)
