"""
Statement builders for registered entities.

EntitySql turns entities, criteria and types into SQLAlchemy Core
statements. Building never touches the database; the statements are run
by entity_dao.database.executor.
"""

import math
import numbers
from decimal import Decimal
from typing import Any, Dict, Mapping, Optional, Type

from sqlalchemy import and_, delete, func, insert, select, update
from sqlalchemy.sql.expression import Executable

from entity_dao.models import EntityDescriptor, EntityRegistry

_NO_CRITERIA = object()


def is_unset_id(value: Any) -> bool:
    """Return True if an id value means "no row yet": None or a number equal to zero."""
    if value is None:
        return True
    if isinstance(value, bool):
        return False
    if isinstance(value, Decimal):
        if value.is_nan():
            return True
        return value.is_finite() and int(value) == 0
    if isinstance(value, numbers.Real):
        # NaN truncates to zero, infinities never do
        if math.isnan(value):
            return True
        return not math.isinf(value) and int(value) == 0
    return False


class EntitySql:
    """
    SQL generation for entities known to an EntityRegistry.

    Attributes:
        registry (EntityRegistry): Registry used to resolve entity types
    """

    def __init__(self, registry: EntityRegistry):
        self.registry = registry

    def _descriptor(self, entity_type: Type) -> EntityDescriptor:
        return self.registry.lookup(entity_type)

    def _where(self, descriptor: EntityDescriptor, values: Mapping[str, Any]):
        conditions = []
        for prop, value in values.items():
            column = descriptor.column_for(prop)
            conditions.append(column.is_(None) if value is None else column == value)
        return and_(*conditions)

    # ------------------------------------------------------------------ write

    def insert(self, entity: Any) -> Executable:
        """
        Build an INSERT for an entity.

        Properties that are None are left out so column defaults apply. The
        id is left out while it is unset, letting the database assign it.
        """
        descriptor = self._descriptor(type(entity))
        values = {}
        for prop, value in descriptor.values_of(entity).items():
            if prop == descriptor.id_property:
                if is_unset_id(value):
                    continue
            elif value is None:
                continue
            values[descriptor.columns[prop].key] = value
        return insert(descriptor.table).values(values)

    def update_all(self, entity: Any) -> Executable:
        """Build an UPDATE writing every non-id column of an entity, by id."""
        descriptor = self._descriptor(type(entity))
        values = {
            descriptor.columns[prop].key: value
            for prop, value in descriptor.values_of(entity).items()
            if prop != descriptor.id_property
        }
        return (
            update(descriptor.table)
            .where(descriptor.id_column == descriptor.get_id(entity))
            .values(values)
        )

    def update_column(self, entity: Any, name: str, value: Any) -> Executable:
        """Build an UPDATE of a single property of an entity, by id."""
        descriptor = self._descriptor(type(entity))
        column = descriptor.column_for(name)
        return (
            update(descriptor.table)
            .where(descriptor.id_column == descriptor.get_id(entity))
            .values({column.key: value})
        )

    def increase_column(
        self, entity_type: Type, id: Any, name: str, delta: Any, increase: bool
    ) -> Executable:
        """Build ``UPDATE ... SET col = col + delta`` (or ``- delta`` when increase is False)."""
        descriptor = self._descriptor(entity_type)
        column = descriptor.column_for(name)
        new_value = column + delta if increase else column - delta
        return (
            update(descriptor.table)
            .where(descriptor.id_column == id)
            .values({column.key: new_value})
        )

    def delete_by_id(self, entity_or_type: Any, id: Any = None) -> Executable:
        """
        Build a DELETE by id.

        Called with a type and an id, or with an entity whose current id is
        used.
        """
        if isinstance(entity_or_type, type):
            descriptor = self._descriptor(entity_or_type)
        else:
            descriptor = self._descriptor(type(entity_or_type))
            id = descriptor.get_id(entity_or_type)
        return delete(descriptor.table).where(descriptor.id_column == id)

    # ------------------------------------------------------------------- read

    def find_by_id(self, entity_type: Type, id: Any) -> Executable:
        descriptor = self._descriptor(entity_type)
        return select(descriptor.table).where(descriptor.id_column == id)

    def find_by_column(self, entity_type: Type, name: str, value: Any) -> Executable:
        descriptor = self._descriptor(entity_type)
        return select(descriptor.table).where(descriptor.column_for(name) == value)

    def find(self, entity_type_or_criteria: Any, criteria: Any = _NO_CRITERIA) -> Executable:
        """
        Build a SELECT matching criteria.

        Called as find(criteria), the criteria object is an entity whose
        non-None properties become equality conditions. Called as
        find(entity_type, criteria), the criteria may also be a plain
        mapping of property names to values, where None matches NULL.
        """
        if criteria is _NO_CRITERIA:
            criteria = entity_type_or_criteria
            entity_type = type(criteria)
        else:
            entity_type = entity_type_or_criteria
        descriptor = self._descriptor(entity_type)

        values = self._criteria_values(descriptor, criteria)
        statement = select(descriptor.table)
        if values:
            statement = statement.where(self._where(descriptor, values))
        return statement

    def _criteria_values(self, descriptor: EntityDescriptor, criteria: Any) -> Dict[str, Any]:
        if criteria is None:
            return {}
        if isinstance(criteria, Mapping):
            return dict(criteria)
        return {
            prop: getattr(criteria, prop)
            for prop in descriptor.columns
            if getattr(criteria, prop, None) is not None
        }

    def count(self, entity_type: Type) -> Executable:
        descriptor = self._descriptor(entity_type)
        return select(func.count()).select_from(descriptor.table)

    def find_foreign(self, target_type: Type, source: Any) -> Executable:
        """
        Build a SELECT of target rows that reference source.

        The target must map a ``<source entity name>_<source id property>``
        property, e.g. ``person_id`` for a Person source.
        """
        source_descriptor = self._descriptor(type(source))
        target_descriptor = self._descriptor(target_type)
        foreign_key = f"{source_descriptor.entity_name}_{source_descriptor.id_property}"
        column = target_descriptor.column_for(foreign_key)
        return select(target_descriptor.table).where(column == source_descriptor.get_id(source))

    def select_all(self, entity_type: Type) -> Executable:
        descriptor = self._descriptor(entity_type)
        return select(descriptor.table)
