"""
PowerClock entity stores.

Process-local storage for entity instances between requests.
"""

from .base import EntityPersistenceBackend
from .memory import MemoryRepo

__all__ = [
    "EntityPersistenceBackend",
    "MemoryRepo",
]
