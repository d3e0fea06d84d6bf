"""
Demo App Entities

Domain entities for the PowerClock demo application.
"""

from .clock import PowerClock

__all__ = [
    "PowerClock",
]
