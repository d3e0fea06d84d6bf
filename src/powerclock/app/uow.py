"""
Unit of Work Pattern

Stores the entity touched by a command and publishes the command record
once the store accepted it.
"""

import logging
from typing import List, Dict, Any, TYPE_CHECKING

if TYPE_CHECKING:
    from ..core.entity import Entity
    from .bus import EventBus

logger = logging.getLogger(__name__)


class UnitOfWork:
    """
    Manages entity commits and domain events.

    Events are collected and only published after a successful commit. A
    failed commit drops them.
    """

    def __init__(self, bus: 'EventBus'):
        self.bus = bus
        self._events: List[Dict[str, Any]] = []
        self._committed = False

    def collect_event(self, event_data: Dict[str, Any]) -> None:
        self._events.append(event_data)

    async def commit(self, entity: 'Entity', command_record: Dict[str, Any]) -> None:
        """
        Store entity state and publish collected domain events.

        Args:
            entity: Entity to store
            command_record: Command record from dispatcher
        """
        self._committed = False
        try:
            if entity.persistence_backend is not None:
                entity.persistence_backend.save_entity_sync(entity, entity._ttl)
            self.collect_event(command_record)
            self._committed = True
        except Exception:
            logger.exception("Commit failed for %s", command_record.get('entity'))
            self.rollback()
            raise
        await self._publish_events()

    async def _publish_events(self) -> None:
        events, self._events = self._events, []
        for event in events:
            await self.bus.publish(event)

    def rollback(self) -> None:
        """Drop collected events that were never committed."""
        if not self._committed:
            self._events.clear()
