"""
Command Dispatcher

Turns @event methods into route handlers: resolves the entity and the
arguments, runs the event, commits it through the Unit of Work and renders
the result as Datastar SSE, JSON or plain content.
"""

import inspect
import logging
from datetime import datetime, timezone
from typing import Any, AsyncGenerator, Callable, Dict, Optional, Tuple, Type

from datastar_py import ServerSentEventGenerator as SSE
from datastar_py.starlette import DatastarResponse
from fastcore.xml import FT, to_xml
from starlette.applications import Starlette
from starlette.middleware.base import BaseHTTPMiddleware, DispatchFunction
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.types import ASGIApp

from ..core.entity import Entity
from ..core.events import DatastarPayload, EventInfo, datastar_from_queryParams
from ..core.signals import EventMethodDescriptor
from .bus import EventBus, InProcessBus
from .datastar import explode_datastar_params_in_request, is_datastar_request
from .uow import UnitOfWork
from .utils import coerce_param

logger = logging.getLogger(__name__)


class Dispatcher:
    """
    Base dispatcher for entity event routing and execution.

    1. Discovers @event methods on entity classes
    2. Creates route handlers for web frameworks
    3. Executes commands via call_event
    4. Converts results to appropriate responses
    """

    def __init__(self, uow: Optional[UnitOfWork] = None, bus: Optional[EventBus] = None):
        self.namespace_routes: Dict[str, str] = {}
        self.bus = bus or InProcessBus()
        self.uow = uow or UnitOfWork(self.bus)

    def _register_route(self, router, path: str, handler: Callable, event_info: EventInfo):
        """Register a route with the framework router. Framework dispatchers override this."""
        raise NotImplementedError("Subclasses must implement _register_route")

    def discover_events(self, entity_class: Type[Entity]) -> Dict[str, EventInfo]:
        """Discover all @event decorated methods on an entity class."""
        events = {}
        for name in dir(entity_class):
            if name.startswith('__'):
                continue
            method = getattr(entity_class, name, None)
            info = getattr(method, '_event_info', None)
            if isinstance(info, EventInfo):
                events[name] = info
        return events

    def event_path(self, entity_class: Type[Entity], event_name: str, event_info: EventInfo, base_path: str = "") -> str:
        path = event_info.path or f"/{entity_class.get_namespace().lower()}/{event_name}"
        if base_path:
            path = f"/{base_path.strip('/')}{path}"
        return path

    def include_entity(self, router, entity_class: Type[Entity], base_path: str = "") -> None:
        """Register the events of one entity class with `router`."""
        for event_name, event_info in self.discover_events(entity_class).items():
            path = self.event_path(entity_class, event_name, event_info, base_path)
            self.namespace_routes[path] = entity_class.get_namespace()
            handler = self._create_route_handler(entity_class, event_name, event_info)
            self._register_route(router, path, handler, event_info)
            logger.debug("Registered %s %s -> %s.%s", event_info.method, path, entity_class.__name__, event_name)

    def include_entities(self, router, entity_classes: list = None, base_path: str = ""):
        """Register multiple entity classes, or every direct Entity subclass."""
        if not entity_classes:
            entity_classes = Entity.__subclasses__()
        for entity_class in entity_classes:
            self.include_entity(router, entity_class, base_path)

    def _create_route_handler(self, entity_class: Type[Entity], event_name: str, event_info: EventInfo) -> Callable:
        """Create a route handler that runs one entity event."""
        async def handler(*args, **kwargs):
            request, resolved_args, resolved_kwargs = self._resolve_args(args, kwargs)
            try:
                entity = entity_class.get(request)
                event_function = self._get_event_function(entity_class, event_name)
                resolved_kwargs = self._fill_from_query(event_info, request, resolved_args, resolved_kwargs)
                new_entity, command_record = await self.call_event(entity, event_function, request, *resolved_args, **resolved_kwargs)
                await self.uow.commit(new_entity, command_record)
                return await self.command_to_response(command_record, new_entity, request)
            except Exception as e:
                logger.exception("Error executing %s.%s", entity_class.__name__, event_name)
                return f"Error executing {event_name}: {e}"

        handler.__name__ = f"{entity_class.__name__.lower()}_{event_name}"
        handler._event_info = event_info
        handler._entity_class = entity_class
        return handler

    def _get_event_function(self, entity_class: Type[Entity], event_name: str) -> Callable:
        event_function = getattr(entity_class, event_name)
        if isinstance(event_function, EventMethodDescriptor):
            return event_function.original_method
        return event_function

    def _fill_from_query(self, event_info: EventInfo, request: Optional[Request], args: tuple, kwargs: dict) -> dict:
        """Bind parameters the framework did not supply from the query string and the Datastar payload."""
        if request is None:
            return kwargs
        params = list(event_info.signature.parameters.values())[1 + len(args):]
        for p in params:
            if p.name in kwargs or p.kind in (p.VAR_POSITIONAL, p.VAR_KEYWORD):
                continue
            if p.annotation is DatastarPayload:
                kwargs[p.name] = datastar_from_queryParams(request)
            elif p.name in ('request', 'req'):
                kwargs[p.name] = request
            elif p.name in request.query_params:
                kwargs[p.name] = coerce_param(p, request.query_params[p.name])
        return kwargs

    async def call_event(self, entity: Entity, event_function: Callable, request: Optional[Request], *resolved_args, **resolved_kwargs) -> Tuple[Any, Dict]:
        """Run `event_function` against `entity` and build the command record."""
        event_info = getattr(event_function, '_event_info', None)
        result = event_function(entity, *resolved_args, **resolved_kwargs)
        if inspect.isawaitable(result):
            result = await result

        # The method may return a replacement entity
        new_entity = result if isinstance(result, Entity) else entity

        command_record = {
            "entity": f"{entity.__class__.__name__}:{entity.id}",
            "event": event_info.name if event_info else getattr(event_function, '__name__', str(event_function)),
            "args": resolved_args,
            "kwargs": resolved_kwargs,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "result": result,
            "event_info": event_info,
        }
        return new_entity, command_record

    def _resolve_args(self, args: tuple, kwargs: dict) -> Tuple[Optional[Request], tuple, dict]:
        """Pull the request out of args/kwargs and return request, args, kwargs."""
        request = None
        remaining = []
        for arg in args:
            if request is None and isinstance(arg, Request):
                request = arg
            else:
                remaining.append(arg)
        clean_kwargs = {}
        for k, v in kwargs.items():
            if request is None and isinstance(v, Request):
                request = v
            elif not isinstance(v, Request):
                clean_kwargs[k] = v
        return request, tuple(remaining), clean_kwargs

    async def command_to_response(self, command_record: Dict[str, Any], entity: Entity, request: Optional[Request]) -> Any:
        """
        Convert command execution result to an HTTP response.

        - Datastar requests get an SSE stream (signals first, then fragments)
        - Requests accepting JSON get the entity state
        - Anything else gets the result itself
        """
        result = command_record.get('result')
        event_info = command_record.get('event_info')
        selector = event_info.selector if event_info else None
        merge_mode = event_info.merge_mode if event_info else 'morph'

        if request is not None and await is_datastar_request(request):
            return DatastarResponse(self._create_sse_stream(result, entity, selector, merge_mode))

        if inspect.isasyncgen(result):
            await result.aclose()
            result = None

        if request is not None and 'application/json' in request.headers.get('accept', ''):
            return JSONResponse({
                'success': True,
                'entity': entity.model_dump(),
                'command': command_record['event'],
            })

        if result is None:
            return f"Command {command_record['event']} executed successfully"
        return result

    async def _create_sse_stream(
        self,
        result: Any,
        entity: Entity,
        selector: str = None,
        merge_mode: str = 'morph'
    ) -> AsyncGenerator[str, None]:
        """Create Server-Sent Event stream for Datastar responses."""
        yield SSE.merge_signals(entity.signals)

        try:
            if hasattr(result, '__aiter__'):
                async for item in result:
                    for sse_event in self._handle_stream_item(item, entity, selector, merge_mode):
                        yield sse_event
            elif inspect.isgenerator(result):
                for item in result:
                    for sse_event in self._handle_stream_item(item, entity, selector, merge_mode):
                        yield sse_event
            else:
                fragment = self._render_fragment(result)
                if fragment:
                    yield self._create_fragment_event(fragment, selector, merge_mode)
        except Exception:
            logger.exception("Event stream for %s:%s failed", entity.__class__.__name__, entity.id)

    def _handle_stream_item(self, item: Any, entity: Entity, selector: str = None, merge_mode: str = 'morph'):
        """SSE events for one item of a generator: fresh signals, then the fragment if any."""
        if entity.auto_persist:
            entity.save()
        yield SSE.merge_signals(entity.signals)
        fragment = self._render_fragment(item)
        if fragment:
            yield self._create_fragment_event(fragment, selector, merge_mode)

    def _create_fragment_event(self, fragment: str, selector: str = None, merge_mode: str = 'morph') -> str:
        if selector:
            return SSE.merge_fragments(fragment, selector=selector, merge_mode=merge_mode)
        return SSE.merge_fragments(fragment, merge_mode=merge_mode)

    def _render_fragment(self, item: Any) -> Optional[str]:
        """Render an item to an HTML fragment string, or None if not renderable."""
        if item is None:
            return None
        if isinstance(item, FT) or hasattr(item, '__ft__'):
            return to_xml(item)
        if isinstance(item, tuple) and all(isinstance(o, FT) for o in item):
            return to_xml(item)
        if isinstance(item, bytes):
            return item.decode()
        if isinstance(item, str):
            return item or None
        return None


class DatastarMiddleware(BaseHTTPMiddleware):
    """Explode namespaced Datastar signals into query params for event routes."""

    def __init__(self, app: ASGIApp, dispatch: DispatchFunction | None = None, dispatcher: Dispatcher = None) -> None:
        super().__init__(app, dispatch)
        self.dispatcher = dispatcher

    async def dispatch(self, request, call_next):
        if await is_datastar_request(request):
            namespace = self.dispatcher.namespace_routes.get(request.scope["path"])
            if namespace:
                await explode_datastar_params_in_request(request, namespace)
        return await call_next(request)


def setup_datastar_middleware(app: Starlette, dispatcher: Dispatcher):
    app.add_middleware(DatastarMiddleware, dispatcher=dispatcher)
    return app
