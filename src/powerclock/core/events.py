"""
Event Decorator

The @event decorator only stores metadata on the method.
Route registration is handled by the dispatcher and the FastHTML adapter.
"""

import inspect
import json
import logging
from dataclasses import dataclass
from typing import Optional, Any, Dict

logger = logging.getLogger(__name__)


@dataclass
class EventInfo:
    """Metadata about an event method stored by the @event decorator."""
    name: str
    method: str
    selector: Optional[str]
    merge_mode: str
    signature: inspect.Signature
    path: Optional[str] = None


class DatastarPayload:
    """Datastar signals sent by the browser, injectable into event methods."""

    def __init__(self, data: Dict[str, Any] = None):
        self._data = data or {}

    def __getattr__(self, name: str) -> Any:
        return self._data.get(name)

    def __getitem__(self, key: str) -> Any:
        return self._data.get(key)

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def __contains__(self, key: str) -> bool:
        return key in self._data

    def __repr__(self) -> str:
        return f"DatastarPayload({self._data})"

    @property
    def raw_data(self) -> Dict[str, Any]:
        """Access the raw data dictionary."""
        return self._data


def event(
    fn=None,
    *,
    method: str = "GET",
    selector: Optional[str] = None,
    merge_mode: str = "morph",
    path: Optional[str] = None,
):
    """
    Mark an entity method as a browser-callable event.

    Args:
        fn: Function being decorated (when used without parentheses)
        method: HTTP method for the event (GET, POST, etc.)
        selector: CSS selector for Datastar fragment updates
        merge_mode: Datastar merge mode (morph, inner, ...)
        path: Custom path for the route (optional)

    Returns:
        The same function with an `_event_info` attribute
    """
    def decorator(func):
        func._event_info = EventInfo(
            name=func.__name__,
            method=method.upper(),
            selector=selector,
            merge_mode=merge_mode,
            signature=inspect.signature(func),
            path=path,
        )
        return func

    if fn is not None:
        return decorator(fn)

    return decorator


def datastar_from_queryParams(request) -> DatastarPayload:
    """Extract Datastar payload from request query params only."""
    raw = request.query_params.get('datastar') if request is not None else None
    if not raw:
        return DatastarPayload()
    try:
        data = json.loads(raw)
    except ValueError:
        logger.warning("Ignoring malformed datastar query param: %.80s", raw)
        return DatastarPayload()
    return DatastarPayload(data if isinstance(data, dict) else None)
