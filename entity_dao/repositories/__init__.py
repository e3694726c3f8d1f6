"""
This package contains the generic repository and its key-generation strategies.
"""

from entity_dao.repositories.generic_dao import GenericDao
from entity_dao.repositories.keys import (
    DatabaseGeneratedKeys,
    ExternallyGeneratedKeys,
    KeyGenerationStrategy,
)

__all__ = [
    "GenericDao",
    "KeyGenerationStrategy",
    "DatabaseGeneratedKeys",
    "ExternallyGeneratedKeys",
]
