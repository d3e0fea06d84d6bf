"""
Infrastructure Adapters

Web framework integrations for PowerClock entities.
"""

from .fasthtml import FastHTMLDispatcher, configure_app

__all__ = ["FastHTMLDispatcher", "configure_app"]
