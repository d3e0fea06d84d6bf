"""
Pause Gate

Shared flag toggled by UI event handlers and read by the clock before it
delivers a tick. The counter engine itself has no notion of being paused.
"""

import threading


class PauseGate:
    """Thread-safe paused/running flag backed by `threading.Event`."""

    def __init__(self, paused: bool = False):
        self._paused = threading.Event()
        if paused:
            self._paused.set()

    @property
    def is_paused(self) -> bool:
        return self._paused.is_set()

    def pause(self) -> None:
        self._paused.set()

    def resume(self) -> None:
        self._paused.clear()

    def toggle(self) -> bool:
        """Flip the flag and return the new paused state."""
        # A tick delivered or missed around the flip is harmless
        if self._paused.is_set():
            self._paused.clear()
        else:
            self._paused.set()
        return self._paused.is_set()

    def __repr__(self) -> str:
        return f"PauseGate(paused={self.is_paused})"
