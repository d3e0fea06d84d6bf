"""
FastHTML Web Adapter

`configure_app` wires a FastHTML app to PowerClock: logging, the shared
clock, the Datastar middleware and one route per entity event.
"""

import inspect
import logging
from typing import Callable, List, Optional, Type

from starlette.requests import Request

from ..app.clock import Clock, set_clock
from ..app.dispatcher import Dispatcher, setup_datastar_middleware
from ..config import ApplicationConfig, configure_int_digits, configure_logging, get_config
from ..core.entity import Entity
from ..core.events import DatastarPayload, EventInfo

logger = logging.getLogger(__name__)


class FastHTMLDispatcher(Dispatcher):
    """FastHTML-specific dispatcher that only overrides what's needed."""

    def _register_route(self, router, path: str, handler: Callable, event_info: EventInfo):
        """Register route using FastHTML's decorator pattern."""
        router(path, methods=[event_info.method])(handler)

    def _create_route_handler(self, entity_class: Type[Entity], event_name: str, event_info: EventInfo) -> Callable:
        """Give the generic handler the event's signature so FastHTML binds its params."""
        base_handler = super()._create_route_handler(entity_class, event_name, event_info)

        sig = event_info.signature
        params = list(sig.parameters.values())
        if params and params[0].name == "self":
            params.pop(0)
        # The dispatcher builds these from the request itself
        params = [p for p in params if p.annotation is not DatastarPayload]

        if not any(p.annotation is Request or p.name in ("request", "req") for p in params):
            params.append(inspect.Parameter(
                "request",
                kind=inspect.Parameter.KEYWORD_ONLY,
                default=None,
                annotation=Request,
            ))

        # FastHTML passes values positionally, in signature order
        names = [p.name for p in params]

        async def handler(*args, **kwargs):
            kwargs.update(zip(names, args))
            return await base_handler(**kwargs)

        handler.__name__ = base_handler.__name__
        handler._event_info = event_info
        handler._entity_class = entity_class
        handler.__signature__ = sig.replace(parameters=params, return_annotation=inspect.Signature.empty)
        return handler


def configure_app(app, rt, entity_classes: List[Type[Entity]] = None, config: Optional[ApplicationConfig] = None):
    """
    Configure a FastHTML app with PowerClock entities.

    ```python
    from powerclock.adapters.fasthtml import configure_app
    app, rt = fast_app()
    configure_app(app, rt, [PowerClock])
    ```

    Args:
        app: FastHTML app instance
        rt: FastHTML router instance
        entity_classes: Entities to register. None registers all Entity subclasses.
        config: Application configuration, defaults to `get_config()`

    Returns:
        The dispatcher that owns the registered routes
    """
    config = config or get_config()
    configure_logging(config.logging)
    configure_int_digits(config.clock)

    dispatcher = FastHTMLDispatcher()
    set_clock(Clock.from_config(config.clock, bus=dispatcher.bus))

    setup_datastar_middleware(app, dispatcher)
    dispatcher.include_entities(rt, entity_classes)

    logger.info("PowerClock configured for %s with %d routes",
                config.environment.value, len(dispatcher.namespace_routes))
    return dispatcher
