"""
Dispatcher tests: event discovery, command execution, the Unit of Work and
SSE rendering of event results.
"""

import json
from typing import ClassVar
from urllib.parse import urlencode

import pytest
from fasthtml.common import Div
from starlette.requests import Request

from powerclock import DatastarPayload, Entity, InProcessBus, UnitOfWork, event
from powerclock.app.dispatcher import Dispatcher
from powerclock.persistence import EntityPersistenceBackend, MemoryRepo


class Lamp(Entity):
    on: bool = False
    brightness: int = 0

    @event
    def switch(self):
        self.on = not self.on

    @event(selector="#level", merge_mode="inner")
    async def dim(self, level: int = 10):
        self.brightness = level
        return Div(f"level {level}", id="level")

    @event
    async def fade(self, steps: int = 3):
        for i in range(steps):
            self.brightness = i
            yield Div(str(i))

    def not_an_event(self):
        pass


class BrokenRepo(EntityPersistenceBackend):
    def save_entity_sync(self, entity, ttl=None):
        raise RuntimeError("disk full")

    def load_entity_sync(self, key):
        return None

    def delete_entity_sync(self, key):
        return False

    def exists_sync(self, key):
        return False


class Fragile(Entity):
    _auto_persist: ClassVar[bool] = False
    _persistence_backend_class: ClassVar[type] = BrokenRepo
    count: int = 0


class Draft(Entity):
    _auto_persist: ClassVar[bool] = False
    text: str = ""

    @event
    def write(self, datastar: DatastarPayload, suffix: str = ""):
        self.text = datastar.get("text", "") + suffix


async def collect(stream):
    return [item async for item in stream]


def test_discover_events():
    events = Dispatcher().discover_events(Lamp)
    assert set(events) == {"switch", "dim", "fade"}
    assert events["dim"].selector == "#level"


def test_event_path():
    dispatcher = Dispatcher()
    info = Lamp.switch._event_info
    assert dispatcher.event_path(Lamp, "switch", info) == "/lamp/switch"
    assert dispatcher.event_path(Lamp, "switch", info, base_path="/api/") == "/api/lamp/switch"


def test_register_route_is_abstract():
    with pytest.raises(NotImplementedError):
        Dispatcher().include_entity(object(), Lamp)


async def test_call_event_sync():
    dispatcher = Dispatcher()
    lamp = Lamp()
    fn = dispatcher._get_event_function(Lamp, "switch")
    entity, record = await dispatcher.call_event(lamp, fn, None)
    assert entity is lamp
    assert lamp.on
    assert record["event"] == "switch"
    assert record["entity"] == f"Lamp:{lamp.id}"
    assert record["result"] is None


async def test_call_event_awaits_coroutines():
    dispatcher = Dispatcher()
    lamp = Lamp()
    fn = dispatcher._get_event_function(Lamp, "dim")
    _, record = await dispatcher.call_event(lamp, fn, None, level=40)
    assert lamp.brightness == 40
    assert record["kwargs"] == {"level": 40}
    assert "level 40" in dispatcher._render_fragment(record["result"])


def test_resolve_args_separates_request():
    request = Request({"type": "http", "method": "GET", "path": "/", "headers": [], "query_string": b""})
    request_out, args, kwargs = Dispatcher()._resolve_args((1, request), {"x": 2, "request": request})
    assert request_out is request
    assert args == (1,)
    assert kwargs == {"x": 2}


async def test_plain_response_without_request():
    dispatcher = Dispatcher()
    lamp = Lamp()
    _, record = await dispatcher.call_event(lamp, dispatcher._get_event_function(Lamp, "switch"), None)
    assert await dispatcher.command_to_response(record, lamp, None) == "Command switch executed successfully"


async def test_sse_stream_for_single_result():
    dispatcher = Dispatcher()
    lamp = Lamp()
    _, record = await dispatcher.call_event(lamp, dispatcher._get_event_function(Lamp, "dim"), None, level=7)
    events = await collect(dispatcher._create_sse_stream(record["result"], lamp, "#level", "inner"))

    assert len(events) == 2
    assert "merge-signals" in events[0]
    assert '"brightness": 7' in events[0] or '"brightness":7' in events[0]
    assert "merge-fragments" in events[1]
    assert "#level" in events[1]


async def test_sse_stream_for_async_generator():
    dispatcher = Dispatcher()
    lamp = Lamp()
    _, record = await dispatcher.call_event(lamp, dispatcher._get_event_function(Lamp, "fade"), None, steps=3)
    events = await collect(dispatcher._create_sse_stream(record["result"], lamp))

    # initial signals, then signals + fragment per item
    assert len(events) == 1 + 3 * 2
    assert sum("merge-fragments" in e for e in events) == 3
    assert lamp.brightness == 2


async def test_sse_stream_skips_unrenderable_results():
    dispatcher = Dispatcher()
    events = await collect(dispatcher._create_sse_stream(42, Lamp()))
    assert len(events) == 1


def test_render_fragment():
    dispatcher = Dispatcher()
    assert dispatcher._render_fragment(None) is None
    assert dispatcher._render_fragment("") is None
    assert dispatcher._render_fragment(b"<b>x</b>") == "<b>x</b>"
    assert "<div>" in dispatcher._render_fragment(Div("a"))
    assert dispatcher._render_fragment(object()) is None


async def test_uow_commit_saves_and_publishes():
    bus = InProcessBus()
    seen = []

    async def handler(event):
        seen.append(event)

    bus.subscribe(handler)
    uow = UnitOfWork(bus)
    lamp = Lamp(id="lamp_x")
    MemoryRepo().clear()

    await uow.commit(lamp, {"entity": "Lamp:lamp_x", "event": "switch"})
    assert MemoryRepo().exists_sync(lamp.id)
    assert seen == [{"entity": "Lamp:lamp_x", "event": "switch"}]


async def test_uow_failed_commit_publishes_nothing():
    bus = InProcessBus()
    seen = []

    async def handler(event):
        seen.append(event)

    bus.subscribe(handler)
    uow = UnitOfWork(bus)

    with pytest.raises(RuntimeError, match="disk full"):
        await uow.commit(Fragile(), {"entity": "Fragile:1", "event": "bump"})
    assert seen == []
    assert uow._events == []


async def test_bus_isolates_failing_handlers(caplog):
    bus = InProcessBus()
    seen = []

    async def broken(event):
        raise RuntimeError("nope")

    async def healthy(event):
        seen.append(event["event"])

    bus.subscribe(broken)
    bus.subscribe(healthy)
    await bus.publish({"event": "frame"})

    assert seen == ["frame"]
    assert "nope" in caplog.text


async def test_bus_unsubscribe():
    bus = InProcessBus()

    async def handler(event):
        pass

    bus.subscribe(handler)
    assert bus.subscriber_count == 1
    bus.unsubscribe(handler)
    bus.unsubscribe(handler)
    assert bus.subscriber_count == 0
    await bus.publish({"event": "frame"})


async def test_uow_commit_stores_entity_in_empty_store():
    MemoryRepo().clear()
    draft = Draft(id="draft_1")
    assert not draft.exists()

    await UnitOfWork(InProcessBus()).commit(draft, {"entity": "Draft:draft_1", "event": "write"})
    assert MemoryRepo().load_entity_sync("draft_1") is draft


def test_fill_from_query_builds_datastar_payload():
    request = Request({
        "type": "http",
        "method": "GET",
        "path": "/draft/write",
        "headers": [],
        "query_string": urlencode({"datastar": json.dumps({"text": "hi"}), "suffix": "!"}).encode(),
    })
    info = Draft.write._event_info
    kwargs = Dispatcher()._fill_from_query(info, request, (), {})

    assert isinstance(kwargs["datastar"], DatastarPayload)
    assert kwargs["datastar"].get("text") == "hi"
    assert kwargs["suffix"] == "!"

    draft = Draft(id="draft_2")
    Draft.write(draft, **kwargs)
    assert draft.text == "hi!"
