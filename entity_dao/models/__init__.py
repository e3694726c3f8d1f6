"""
Entity metadata: descriptors and the type-keyed registry.
"""

from entity_dao.models.descriptor import EntityDescriptor, entity_name_of
from entity_dao.models.registry import EntityRegistry

__all__ = ["EntityDescriptor", "EntityRegistry", "entity_name_of"]
