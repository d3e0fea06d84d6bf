"""
PowerClock - a doubling power-of-two clock for FastHTML and Datastar

An arbitrary-precision counter doubles on every clock tick and streams the
running power of two to the browser over server-sent events.
"""

from .core import (
    CounterEngine,
    CounterSnapshot,
    InvalidModulusError,
    PauseGate,
    FPSCounter,
    Entity,
    event,
    datastar_script,
    DatastarPayload,
)
from .persistence import EntityPersistenceBackend, MemoryRepo
from .app import Clock, ClockFrame, get_clock, set_clock, UnitOfWork, InProcessBus
from .config import ApplicationConfig, Environment, get_config, set_config

__version__ = "0.1.0"

__all__ = [
    # Counter core
    'CounterEngine',
    'CounterSnapshot',
    'InvalidModulusError',
    'PauseGate',
    'FPSCounter',

    # Entities
    'Entity',
    'event',
    'datastar_script',
    'DatastarPayload',
    'EntityPersistenceBackend',
    'MemoryRepo',

    # Application service layer
    'Clock',
    'ClockFrame',
    'get_clock',
    'set_clock',
    'UnitOfWork',
    'InProcessBus',

    # Configuration
    'ApplicationConfig',
    'Environment',
    'get_config',
    'set_config',
]
