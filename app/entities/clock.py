"""
PowerClock Entity

Browser-facing side of the doubling clock: the signals the page binds to and
the events its controls call. The counter itself lives in the shared clock.
"""

import logging
from contextlib import aclosing
from typing import ClassVar, Optional

from fasthtml.common import P, Span
from powerclock import ClockFrame, Entity, InvalidModulusError, event, get_clock

logger = logging.getLogger(__name__)


class PowerClock(Entity):
    """Globally shared power-of-two clock."""
    # The server owns this state; client signals never overwrite it
    _sync_with_client: ClassVar[bool] = False

    id: str = "global_clock"
    power: int = 1
    modulus: int = 1
    fps: int = 0
    paused: bool = False

    def apply(self, frame: ClockFrame) -> "PowerClock":
        self.power = frame.power
        self.modulus = frame.modulus
        self.fps = frame.fps
        self.paused = frame.paused
        return self

    def refresh(self) -> "PowerClock":
        return self.apply(get_clock().snapshot())

    def value_view(self, frame: Optional[ClockFrame] = None):
        # The value is sent as HTML, never as a signal, so it stays out of request URLs
        frame = frame or get_clock().snapshot()
        return P(str(frame.value), id="power-value", cls="text-xl font-mono break-all")

    @event
    async def live(self):
        """Stream an update for every display-worthy tick."""
        clock = get_clock()
        clock.start()
        self.refresh()
        yield self.value_view()
        async with aclosing(clock.frames()) as frames:
            async for frame in frames:
                self.apply(frame)
                yield self.value_view(frame)

    @event
    def toggle_pause(self):
        get_clock().toggle_pause()
        self.refresh()

    @event(selector="#message", merge_mode="inner")
    def set_modulus(self, new_modulus: int):
        # Must not match a signal name or the exploded signals override it
        try:
            get_clock().set_modulus(new_modulus)
        except InvalidModulusError as e:
            logger.info("Rejected modulus %r: %s", new_modulus, e)
            self.refresh()
            return Span(str(e), cls="text-red-600")
        self.refresh()
        return Span()
