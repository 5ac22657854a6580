"""
Intent -> key sequence translation and delivery to the target application.

Turning is strafe + forward, so GO_LEFT/GO_RIGHT produce two taps. Delivery
goes through a KeySender, so the injection backend can be swapped or
mocked.
"""

import logging
from typing import Dict, List, Optional

from bodynav.core.events import EventBus, Events
from bodynav.core.types import (
    CommandSequence, KeyAction, KeyDirection, NavigationIntent,
    VK_C, VK_E, VK_F, VK_LEFT, VK_RIGHT, VK_UP,
)

logger = logging.getLogger(__name__)

DEFAULT_TARGET_PROCESS = "SecondLife"

# Logical key name -> virtual-key code
DEFAULT_KEYS: Dict[str, int] = {
    "up": VK_E,
    "down": VK_C,
    "fly": VK_F,
    "forward": VK_UP,
    "left": VK_LEFT,
    "right": VK_RIGHT,
}

# Intent -> logical keys tapped in order
INTENT_KEYS: Dict[NavigationIntent, tuple] = {
    NavigationIntent.NONE: (),
    NavigationIntent.STAY: (),
    NavigationIntent.START_FLYING: ("fly",),
    NavigationIntent.STOP_FLYING: ("fly",),
    NavigationIntent.GO_UP: ("up",),
    NavigationIntent.GO_DOWN: ("down",),
    NavigationIntent.GO_FORWARD: ("forward",),
    NavigationIntent.GO_LEFT: ("left", "forward"),
    NavigationIntent.GO_RIGHT: ("right", "forward"),
}


def tap(vk_code: int) -> CommandSequence:
    return (KeyAction(vk_code, KeyDirection.PRESS), KeyAction(vk_code, KeyDirection.RELEASE))


class DispatchResult:
    """Outcome of dispatching one intent."""

    __slots__ = ("intent", "sequence", "delivered", "failed")

    def __init__(self, intent: NavigationIntent, sequence: CommandSequence):
        self.intent = intent
        self.sequence = sequence
        self.delivered = 0  # windows posted to, summed over actions
        self.failed = False

    def __repr__(self):
        return (f"DispatchResult({self.intent.value}, actions={len(self.sequence)}, "
                f"delivered={self.delivered})")


class CommandDispatcher:
    """Builds the command sequence for an intent and posts it to the target."""

    def __init__(self, sender, config: Optional[dict] = None, event_bus: EventBus = None):
        config = config or {}
        self._sender = sender
        self._target = config.get("target_process", DEFAULT_TARGET_PROCESS)
        self._keys = dict(DEFAULT_KEYS)
        self._keys.update(config.get("keys", {}) or {})
        self._bus = event_bus or EventBus()
        self._dispatch_count = 0

    def build_sequence(self, intent: NavigationIntent) -> CommandSequence:
        """Fixed intent -> ordered press/release list. Empty for NONE and STAY."""
        sequence: List[KeyAction] = []
        for key_name in INTENT_KEYS[intent]:
            sequence.extend(tap(self._keys[key_name]))
        return tuple(sequence)

    def dispatch(self, intent: NavigationIntent) -> DispatchResult:
        """Send the intent's sequence to every matching target process.

        Never raises: a sender failure is logged and the rest of the
        sequence is still attempted.
        """
        result = DispatchResult(intent, self.build_sequence(intent))
        if not result.sequence:
            return result

        for action in result.sequence:
            try:
                result.delivered += self._sender.send_key(self._target, action)
            except Exception as e:
                result.failed = True
                logger.error("Failed to send %r to %s: %s", action, self._target, e)

        self._dispatch_count += 1
        if result.failed:
            self._bus.emit(Events.COMMAND_FAILED, intent=intent, target=self._target)
        else:
            self._bus.emit(Events.COMMAND_SENT, intent=intent, sequence=result.sequence,
                           delivered=result.delivered)

        if result.delivered == 0:
            logger.debug("No '%s' window received %s", self._target, intent.value)
        return result

    @property
    def target_process(self) -> str:
        return self._target

    @property
    def dispatch_count(self) -> int:
        return self._dispatch_count
