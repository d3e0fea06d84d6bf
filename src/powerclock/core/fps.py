"""Ticks-per-second counter over a trailing one second window."""

import time
from collections import deque
from typing import Callable, Deque


class FPSCounter:
    """Counts ticks seen during the last `window` seconds."""

    def __init__(self, window: float = 1.0, clock: Callable[[], float] = time.monotonic):
        self.window = window
        self._clock = clock
        self._ticks: Deque[float] = deque()

    def _prune(self, now: float) -> None:
        cutoff = now - self.window
        while self._ticks and self._ticks[0] <= cutoff:
            self._ticks.popleft()

    def tick(self) -> None:
        now = self._clock()
        self._ticks.append(now)
        self._prune(now)

    def get_tick(self) -> int:
        self._prune(self._clock())
        return len(self._ticks)

    def reset(self) -> None:
        self._ticks.clear()
