"""
Clock

Delivers ticks to the counter engine from a single asyncio task and publishes
display-worthy frames on the event bus.

The pause gate is checked before every tick; while it is set the engine
receives nothing and no frames are published.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import AsyncIterator, Optional, TYPE_CHECKING

from ..core.engine import CounterEngine
from ..core.fps import FPSCounter
from ..core.pause import PauseGate
from .bus import EventBus, InProcessBus

if TYPE_CHECKING:
    from ..config import ClockConfig

logger = logging.getLogger(__name__)

FRAME_EVENT = "frame"


@dataclass(frozen=True)
class ClockFrame:
    """What the page needs to render one update."""
    value: int
    power: int
    modulus: int
    fps: int
    paused: bool


class Clock:
    """Periodic tick source wired to one engine, pause gate and FPS counter."""

    def __init__(
        self,
        engine: Optional[CounterEngine] = None,
        gate: Optional[PauseGate] = None,
        fps: Optional[FPSCounter] = None,
        interval: float = 0.001,
        bus: Optional[EventBus] = None,
    ):
        if interval <= 0:
            raise ValueError(f"Clock interval must be positive, got {interval!r}")
        self.engine = engine or CounterEngine()
        self.gate = gate or PauseGate()
        self.fps = fps or FPSCounter()
        self.interval = interval
        self.bus = bus or InProcessBus()
        self._task: Optional[asyncio.Task] = None

    @classmethod
    def from_config(cls, config: 'ClockConfig', bus: Optional[EventBus] = None) -> 'Clock':
        return cls(
            engine=CounterEngine(modulus=config.modulus, bit_width=config.bit_width),
            gate=PauseGate(paused=config.start_paused),
            interval=config.interval,
            bus=bus,
        )

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start ticking on the running event loop. Calling it again is a no-op."""
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())
        logger.info("Clock started (interval=%ss, modulus=%s)", self.interval, self.engine.modulus)

    async def stop(self) -> None:
        if self._task is None:
            return
        task, self._task = self._task, None
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Clock stopped at power %s", self.engine.power)

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                await self.step()
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("Clock tick failed")

    async def step(self) -> bool:
        """Deliver one tick unless paused. Returns whether a frame was published."""
        if self.gate.is_paused:
            return False
        self.fps.tick()
        if not self.engine.tick():
            return False
        await self.bus.publish({"event": FRAME_EVENT, "frame": self.snapshot()})
        return True

    def toggle_pause(self) -> bool:
        paused = self.gate.toggle()
        logger.info("Clock %s", "paused" if paused else "resumed")
        return paused

    def set_modulus(self, modulus: int) -> None:
        self.engine.set_modulus(modulus)
        logger.debug("Modulus set to %s", modulus)

    def snapshot(self) -> ClockFrame:
        counter = self.engine.snapshot()
        return ClockFrame(
            value=counter.value,
            power=counter.power,
            modulus=counter.modulus,
            fps=self.fps.get_tick(),
            paused=self.gate.is_paused,
        )

    async def frames(self) -> AsyncIterator[ClockFrame]:
        """Yield published frames, skipping any the consumer was too slow to take."""
        queue: asyncio.Queue = asyncio.Queue(maxsize=1)

        async def _on_event(event):
            if event.get("event") != FRAME_EVENT:
                return
            if queue.full():
                queue.get_nowait()
            queue.put_nowait(event["frame"])

        self.bus.subscribe(_on_event)
        try:
            while True:
                yield await queue.get()
        finally:
            self.bus.unsubscribe(_on_event)


_clock: Optional[Clock] = None


def get_clock() -> Clock:
    """Return the process-wide clock, creating a default one on first use."""
    global _clock
    if _clock is None:
        _clock = Clock()
    return _clock


def set_clock(clock: Optional[Clock]) -> None:
    global _clock
    _clock = clock
