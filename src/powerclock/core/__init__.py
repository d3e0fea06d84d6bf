"""
PowerClock Core Module

Domain layer: the counter engine, pause gate and FPS counter, plus the
entity, event and signal building blocks used by the web layer.
"""

from .engine import CounterEngine, CounterSnapshot, InvalidModulusError
from .pause import PauseGate
from .fps import FPSCounter
from .entity import Entity, datastar_script
from .events import event, EventInfo, DatastarPayload, datastar_from_queryParams
from .signals import SignalDescriptor, EventMethodDescriptor

__all__ = [
    "CounterEngine",
    "CounterSnapshot",
    "InvalidModulusError",
    "PauseGate",
    "FPSCounter",
    "Entity",
    "datastar_script",
    "event",
    "EventInfo",
    "DatastarPayload",
    "datastar_from_queryParams",
    "SignalDescriptor",
    "EventMethodDescriptor",
]
