"""
Entity store - Memory Backend

In-memory entity store. Data is lost when the application restarts.
"""

import logging
import time
from typing import Dict, Any, Optional, TYPE_CHECKING

from .base import EntityPersistenceBackend

if TYPE_CHECKING:
    from ..core.entity import Entity

logger = logging.getLogger(__name__)


class MemoryRepo(EntityPersistenceBackend):
    """
    In-memory entity store (Singleton).

    Every entity class shares the same instance so that `Entity.get` finds
    what an earlier request saved.
    """

    _instance = None
    _initialized = False

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        if not self._initialized:
            self._data: Dict[str, Any] = {}
            self._expiry: Dict[str, float] = {}
            MemoryRepo._initialized = True

    def _expired(self, key: str) -> bool:
        if key in self._expiry and time.time() > self._expiry[key]:
            self._data.pop(key, None)
            self._expiry.pop(key, None)
            logger.debug("Entity %s expired", key)
            return True
        return False

    def save_entity_sync(self, entity, ttl: Optional[int] = None) -> bool:
        """Save entity to memory with optional TTL."""
        key = entity.id
        if key is None:
            logger.warning("Refusing to store %s without an id", entity.__class__.__name__)
            return False
        self._data[key] = entity
        if ttl:
            self._expiry[key] = time.time() + ttl
        else:
            self._expiry.pop(key, None)
        return True

    def load_entity_sync(self, key: str) -> Optional['Entity']:
        if self._expired(key):
            return None
        return self._data.get(key)

    def delete_entity_sync(self, key: str) -> bool:
        existed = key in self._data
        self._data.pop(key, None)
        self._expiry.pop(key, None)
        return existed

    def exists_sync(self, key: str) -> bool:
        if self._expired(key):
            return False
        return key in self._data

    def clear(self) -> None:
        """Forget every stored entity."""
        self._data.clear()
        self._expiry.clear()
