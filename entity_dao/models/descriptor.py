"""
Entity descriptors.

An EntityDescriptor holds everything the data-access layer needs to know
about one entity type: its table, which property is the id, how the
properties map to columns and how to read, write and build instances.
Entities are plain Python objects; the descriptor is the only place that
touches their attributes.
"""

import re
from typing import Any, Callable, Dict, Mapping, Optional, Type

from sqlalchemy import Column, Table

from entity_dao.exceptions import ConfigurationError

_CAMEL_BOUNDARY = re.compile(r'(?<!^)(?=[A-Z])')


def entity_name_of(entity_type: type) -> str:
    """Return the snake_case name of an entity type, e.g. ``OrderLine`` -> ``order_line``."""
    return _CAMEL_BOUNDARY.sub('_', entity_type.__name__).lower()


class EntityDescriptor:
    """
    Metadata for a single entity type.

    Attributes:
        entity_type (type): The mapped Python class
        table (Table): SQLAlchemy table the entity is stored in
        id_property (str): Name of the identity property
        columns (Dict[str, Column]): Property name to column mapping
        entity_name (str): snake_case type name, used for foreign-key names
    """

    def __init__(
        self,
        entity_type: Type,
        table: Table,
        id_property: str = "id",
        columns: Optional[Mapping[str, str]] = None,
        factory: Optional[Callable[[], Any]] = None,
    ):
        """
        Build the descriptor.

        Args:
            entity_type: The mapped Python class
            table: SQLAlchemy table holding the rows
            id_property: Name of the identity property
            columns: Optional property name to column name mapping. When
                omitted, every table column maps to a same-named property.
            factory: Optional no-argument callable creating empty instances.
                Defaults to calling entity_type().

        Raises:
            ConfigurationError: If a column is missing from the table or the
                id property is not mapped
        """
        self.entity_type = entity_type
        self.table = table
        self.id_property = id_property
        self.entity_name = entity_name_of(entity_type)
        self._factory = factory or entity_type

        if columns is None:
            columns = {column.key: column.key for column in table.columns}

        self.columns: Dict[str, Column] = {}
        for prop, column_name in columns.items():
            if column_name not in table.c:
                raise ConfigurationError(
                    f"Column '{column_name}' for property '{prop}' is not in table '{table.name}'"
                )
            self.columns[prop] = table.c[column_name]

        if id_property not in self.columns:
            raise ConfigurationError(
                f"Id property '{id_property}' of {entity_type.__name__} is not mapped to a column"
            )

    def __repr__(self):
        return f"<EntityDescriptor {self.entity_type.__name__} -> {self.table.name}>"

    @property
    def id_column(self) -> Column:
        return self.columns[self.id_property]

    def has_property(self, name: str) -> bool:
        return name in self.columns

    def column_for(self, name: str) -> Column:
        """
        Return the column mapped to a property.

        Raises:
            ConfigurationError: If the property is not mapped
        """
        try:
            return self.columns[name]
        except KeyError:
            raise ConfigurationError(
                f"Property '{name}' is not mapped for {self.entity_type.__name__}"
            ) from None

    def get_id(self, entity: Any) -> Any:
        return getattr(entity, self.id_property, None)

    def set_id(self, entity: Any, value: Any) -> None:
        setattr(entity, self.id_property, value)

    def get_property(self, entity: Any, name: str) -> Any:
        """Read a property by name; it must exist on the instance."""
        return getattr(entity, name)

    def set_property(self, entity: Any, name: str, value: Any) -> None:
        setattr(entity, name, value)

    def values_of(self, entity: Any) -> Dict[str, Any]:
        """Return the current value of every mapped property, keyed by property name."""
        return {prop: getattr(entity, prop, None) for prop in self.columns}

    def from_row(self, row: Mapping[str, Any]) -> Any:
        """
        Build an entity instance from a result row.

        Args:
            row: Row mapping keyed by column name

        Returns:
            A new instance with every mapped property populated
        """
        entity = self._factory()
        for prop, column in self.columns.items():
            if column.name in row:
                setattr(entity, prop, row[column.name])
        return entity
