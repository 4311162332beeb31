"""Common utilities for Glass Interpreter."""

from glassinterp.common.logging import get_logger, setup_logging
from glassinterp.common.listeners import ListenerRegistry, Unsubscribe

__all__ = [
    "get_logger",
    "setup_logging",
    "ListenerRegistry",
    "Unsubscribe",
]
