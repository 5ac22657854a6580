"""
Lightweight event bus for decoupled inter-module communication.

The navigation core publishes lock transitions, recognised intents and
sent commands here; logging subscribes without the core knowing about it.

Usage:
    bus = EventBus()
    bus.subscribe(Events.INTENT_DETECTED, my_handler)
    bus.emit(Events.INTENT_DETECTED, intent=NavigationIntent.GO_LEFT, label="GO LEFT")
"""

import logging
import threading
from collections import defaultdict
from typing import Callable

logger = logging.getLogger(__name__)


def _handler_name(callback: Callable) -> str:
    return getattr(callback, "__qualname__", None) or repr(callback)


class EventBus:
    """Process-wide publish/subscribe bus.

    Handlers run synchronously on the emitting thread (the frame thread),
    highest priority first. A failing handler is logged and skipped, so a
    subscriber can never stop a frame from being processed.
    """

    _instance = None

    def __new__(cls):
        """Singleton pattern: one bus per application."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._listeners = defaultdict(list)  # event -> [(priority, callback)]
            cls._instance._lock = threading.Lock()
        return cls._instance

    def subscribe(self, event_name: str, callback: Callable, priority: int = 0):
        """Register ``callback(**kwargs)`` for ``event_name``.

        Higher ``priority`` runs first; equal priorities keep subscription order.
        """
        with self._lock:
            listeners = self._listeners[event_name]
            listeners.append((priority, callback))
            listeners.sort(key=lambda entry: -entry[0])
        logger.debug("Subscribed %s to '%s' (priority=%d)",
                     _handler_name(callback), event_name, priority)

    def unsubscribe(self, event_name: str, callback: Callable):
        with self._lock:
            self._listeners[event_name] = [
                entry for entry in self._listeners[event_name] if entry[1] is not callback
            ]

    def emit(self, event_name: str, **kwargs):
        with self._lock:
            listeners = list(self._listeners.get(event_name, ()))

        for _, callback in listeners:
            try:
                callback(**kwargs)
            except Exception as e:
                logger.error("Handler %s failed on '%s': %s", _handler_name(callback), event_name, e)

    def reset(self):
        """Drop every subscription (for testing)."""
        with self._lock:
            self._listeners.clear()


# =============================================================================
# Standard Event Names (constants to avoid typos)
# =============================================================================

class Events:
    """Standard event names used throughout the system."""

    # Tracking
    FRAME_RECEIVED = "frame_received"
    SUBJECT_LOCKED = "subject_locked"
    SUBJECT_LOST = "subject_lost"

    # Recognition
    INTENT_DETECTED = "intent_detected"
    FLYING_CHANGED = "flying_changed"

    # Commands
    COMMAND_SENT = "command_sent"
    COMMAND_FAILED = "command_failed"

    # Lifecycle
    SYSTEM_STARTED = "system_started"
    SYSTEM_SHUTDOWN = "system_shutdown"
