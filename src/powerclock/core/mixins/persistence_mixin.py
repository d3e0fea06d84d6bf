"""
PersistenceMixin: entity store operations without base model dependencies.
"""

from typing import Optional


class PersistenceMixin:
    """
    Save, delete and exists through the entity's configured backend.
    """

    def save(self, ttl: Optional[int] = None) -> bool:
        """Save entity to configured backend."""
        return self.persistence_backend.save_entity_sync(self, ttl or self._ttl)

    def delete(self) -> bool:
        return self.persistence_backend.delete_entity_sync(self.id)

    def exists(self) -> bool:
        return self.persistence_backend.exists_sync(self.id)

    @classmethod
    def get(cls, req, **kwargs):
        """Get cached entity or create new."""
        entity_id = cls._get_id(req, **kwargs)

        backend = cls._persistence_backend_class()
        cached = backend.load_entity_sync(entity_id)
        if cached is not None and isinstance(cached, cls):
            return cached

        return cls(req, id=entity_id, **kwargs)
