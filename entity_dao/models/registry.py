"""
Entity metadata registry.

The registry resolves a runtime type to its EntityDescriptor. Lookups are
by exact type; subclasses of a registered type have to be registered on
their own.
"""

import logging
from typing import Any, Callable, Dict, Mapping, Optional, Type

from sqlalchemy import Table

from entity_dao.exceptions import ConfigurationError
from entity_dao.models.descriptor import EntityDescriptor

logger = logging.getLogger(__name__)

class EntityRegistry:
    """
    Type-keyed cache of entity descriptors.

    Usage:
        registry = EntityRegistry()

        @registry.entity(person_table)
        @dataclass
        class Person:
            id: Optional[int] = None
            name: Optional[str] = None
    """

    def __init__(self):
        self._descriptors: Dict[type, EntityDescriptor] = {}

    def register(
        self,
        entity_type: Type,
        table: Table,
        id_property: str = "id",
        columns: Optional[Mapping[str, str]] = None,
        factory: Optional[Callable[[], Any]] = None,
    ) -> EntityDescriptor:
        """
        Register an entity type.

        Args:
            entity_type: The Python class to map
            table: SQLAlchemy table holding its rows
            id_property: Name of the identity property
            columns: Optional property name to column name mapping
            factory: Optional callable creating empty instances

        Returns:
            EntityDescriptor: The descriptor now cached for entity_type
        """
        descriptor = EntityDescriptor(entity_type, table, id_property, columns, factory)
        if entity_type in self._descriptors:
            logger.warning(f"Replacing descriptor for {entity_type.__name__}")
        self._descriptors[entity_type] = descriptor
        logger.debug(f"Registered {descriptor!r}")
        return descriptor

    def entity(self, table: Table, **options) -> Callable[[Type], Type]:
        """Class decorator form of register()."""
        def decorator(entity_type: Type) -> Type:
            self.register(entity_type, table, **options)
            return entity_type
        return decorator

    def lookup_type(self, entity_type: Type) -> Optional[EntityDescriptor]:
        """Return the descriptor for entity_type, or None if it is not registered."""
        return self._descriptors.get(entity_type)

    def lookup(self, entity_type: Type) -> EntityDescriptor:
        """
        Return the descriptor for entity_type.

        Raises:
            ConfigurationError: If the type is not registered
        """
        descriptor = self._descriptors.get(entity_type)
        if descriptor is None:
            raise ConfigurationError(f"Not an entity: {entity_type!r}")
        return descriptor

    def is_registered(self, entity_type: Type) -> bool:
        return entity_type in self._descriptors

    def clear(self) -> None:
        self._descriptors.clear()

    def __contains__(self, entity_type) -> bool:
        return self.is_registered(entity_type)

    def __len__(self) -> int:
        return len(self._descriptors)
