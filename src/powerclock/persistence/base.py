"""
Entity store - Base Classes

Abstract interface for entity stores. Stores live for the lifetime of the
process only.
"""

from abc import ABC, abstractmethod
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from ..core.entity import Entity


class EntityPersistenceBackend(ABC):
    """
    Abstract base class for entity stores.

    Implementations provide saving, loading and deleting entity instances
    with optional TTL support.
    """

    @abstractmethod
    def save_entity_sync(self, entity: 'Entity', ttl: Optional[int] = None) -> bool:
        """
        Save entity instance.

        Args:
            entity: Entity instance to store
            ttl: Time-to-live in seconds (optional)

        Returns:
            True if save was successful, False otherwise
        """

    @abstractmethod
    def load_entity_sync(self, entity_id: str) -> Optional['Entity']:
        """Load entity instance, or None when missing or expired."""

    @abstractmethod
    def delete_entity_sync(self, entity_id: str) -> bool:
        """Delete entity, returning whether it existed."""

    @abstractmethod
    def exists_sync(self, entity_id: str) -> bool:
        """Check if entity exists."""
