"""
Primary-key generation strategies.

GenericDao uses exactly one strategy per store() of a transient entity:
either the database assigns the id during the INSERT, or a generator
supplies it before the INSERT is built.
"""

from abc import ABC, abstractmethod
from typing import Callable, Optional

from entity_dao.exceptions import ConfigurationError
from entity_dao.models import EntityDescriptor

class KeyGenerationStrategy(ABC):
    """Abstract base class for key-generation strategies."""

    @property
    @abstractmethod
    def generated_by_database(self) -> bool:
        """True if the id is read back from the database after the INSERT."""
        pass

    def next_id(self, descriptor: EntityDescriptor) -> int:
        """Return the id for the next row of descriptor's type, before it is inserted."""
        raise ConfigurationError(
            f"{type(self).__name__} does not allocate keys before insert"
        )


class DatabaseGeneratedKeys(KeyGenerationStrategy):
    """Keys are assigned by the database and fetched back after the INSERT."""

    @property
    def generated_by_database(self) -> bool:
        return True

    def __repr__(self):
        return "DatabaseGeneratedKeys()"


class ExternallyGeneratedKeys(KeyGenerationStrategy):
    """
    Keys are allocated by a generator before the INSERT.

    Attributes:
        generator (Callable[[EntityDescriptor], int]): Returns the next id
            for an entity type
    """

    def __init__(self, generator: Optional[Callable[[EntityDescriptor], int]]):
        """
        Args:
            generator: Callable returning the next id for a descriptor

        Raises:
            ConfigurationError: If no generator is given
        """
        if generator is None or not callable(generator):
            raise ConfigurationError("ExternallyGeneratedKeys requires a key generator")
        self.generator = generator

    @property
    def generated_by_database(self) -> bool:
        return False

    def next_id(self, descriptor: EntityDescriptor) -> int:
        return int(self.generator(descriptor))

    def __repr__(self):
        return f"ExternallyGeneratedKeys({self.generator!r})"
