"""
Application Service Layer

Bridges the web layer and the domain:
- dispatcher: request → event binding and command execution
- uow: commits entity state and publishes command records
- bus: in-process event bus for command records and clock frames
- clock: the tick source driving the counter engine
"""

from .bus import EventBus, InProcessBus
from .clock import Clock, ClockFrame, get_clock, set_clock
from .dispatcher import Dispatcher
from .uow import UnitOfWork

__all__ = [
    'EventBus',
    'InProcessBus',
    'Clock',
    'ClockFrame',
    'get_clock',
    'set_clock',
    'Dispatcher',
    'UnitOfWork',
]
