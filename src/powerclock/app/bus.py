"""
Event Bus

Publishes command records from the dispatcher and frames from the clock to
in-process subscribers such as open SSE streams.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Callable, Awaitable, List, Dict, Any

logger = logging.getLogger(__name__)

Handler = Callable[[Dict[str, Any]], Awaitable[None]]


class EventBus(ABC):
    """Abstract base class for event buses."""

    @abstractmethod
    async def publish(self, event: Dict[str, Any]) -> None:
        """Publish an event to all subscribers."""

    @abstractmethod
    def subscribe(self, handler: Handler) -> None:
        """Subscribe a handler to receive events."""

    @abstractmethod
    def unsubscribe(self, handler: Handler) -> None:
        """Stop delivering events to `handler`."""


class InProcessBus(EventBus):
    """
    Simple in-process event bus for single-instance applications.

    Handlers run concurrently; one failing handler never blocks the others.
    """

    def __init__(self):
        self._subscribers: List[Handler] = []

    def subscribe(self, handler: Handler) -> None:
        """
        Subscribe a handler to receive all events.

        Args:
            handler: Async function that accepts event data
        """
        self._subscribers.append(handler)

    async def publish(self, event: Dict[str, Any]) -> None:
        """
        Publish an event to all subscribers.

        Args:
            event: Event data dictionary
        """
        if not self._subscribers:
            return

        # Snapshot the list; handlers may unsubscribe while we wait
        handlers = list(self._subscribers)
        results = await asyncio.gather(*(handler(event) for handler in handlers), return_exceptions=True)

        for handler, result in zip(handlers, results):
            if isinstance(result, Exception):
                logger.warning("Event handler %r raised on %s: %s",
                               handler, event.get('event'), result)

    def unsubscribe(self, handler: Handler) -> None:
        if handler in self._subscribers:
            self._subscribers.remove(handler)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)
