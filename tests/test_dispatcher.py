"""
Tests for Command Dispatch Module
==================================
"""

from unittest.mock import Mock

import pytest

from bodynav.core.events import Events
from bodynav.core.types import (
    KeyAction, KeyDirection, NavigationIntent,
    VK_C, VK_E, VK_F, VK_LEFT, VK_RIGHT, VK_UP,
)
from bodynav.modules.control.command_dispatcher import CommandDispatcher, tap


PRESS, RELEASE = KeyDirection.PRESS, KeyDirection.RELEASE


@pytest.fixture
def sender():
    sender = Mock()
    sender.send_key.return_value = 1
    return sender


@pytest.fixture
def dispatcher(sender, bus):
    return CommandDispatcher(sender, {"target_process": "SecondLife"}, event_bus=bus)


class TestBuildSequence:
    """Fixed intent -> key table."""

    @pytest.mark.parametrize("intent", [NavigationIntent.NONE, NavigationIntent.STAY])
    def test_no_op(self, dispatcher, intent):
        assert dispatcher.build_sequence(intent) == ()

    @pytest.mark.parametrize("intent,vk", [
        (NavigationIntent.START_FLYING, VK_F),
        (NavigationIntent.STOP_FLYING, VK_F),
        (NavigationIntent.GO_UP, VK_E),
        (NavigationIntent.GO_DOWN, VK_C),
        (NavigationIntent.GO_FORWARD, VK_UP),
    ])
    def test_single_tap(self, dispatcher, intent, vk):
        assert dispatcher.build_sequence(intent) == (
            KeyAction(vk, PRESS), KeyAction(vk, RELEASE),
        )

    def test_go_left_is_strafe_then_forward(self, dispatcher):
        assert dispatcher.build_sequence(NavigationIntent.GO_LEFT) == (
            KeyAction(VK_LEFT, PRESS), KeyAction(VK_LEFT, RELEASE),
            KeyAction(VK_UP, PRESS), KeyAction(VK_UP, RELEASE),
        )

    def test_go_right_is_strafe_then_forward(self, dispatcher):
        assert dispatcher.build_sequence(NavigationIntent.GO_RIGHT) == (
            KeyAction(VK_RIGHT, PRESS), KeyAction(VK_RIGHT, RELEASE),
            KeyAction(VK_UP, PRESS), KeyAction(VK_UP, RELEASE),
        )

    def test_every_intent_mapped(self, dispatcher):
        for intent in NavigationIntent:
            dispatcher.build_sequence(intent)

    def test_remapped_keys(self, sender, bus):
        dispatcher = CommandDispatcher(sender, {"keys": {"forward": 0x57}}, event_bus=bus)
        assert dispatcher.build_sequence(NavigationIntent.GO_LEFT) == tap(VK_LEFT) + tap(0x57)


class TestDispatch:

    def test_sends_in_order(self, dispatcher, sender):
        result = dispatcher.dispatch(NavigationIntent.GO_LEFT)
        sent = [c.args for c in sender.send_key.call_args_list]
        assert sent == [("SecondLife", action) for action in result.sequence]
        assert result.delivered == 4

    def test_stay_sends_nothing(self, dispatcher, sender):
        result = dispatcher.dispatch(NavigationIntent.STAY)
        sender.send_key.assert_not_called()
        assert result.sequence == ()
        assert dispatcher.dispatch_count == 0

    def test_no_target_process_is_silent(self, dispatcher, sender):
        sender.send_key.return_value = 0
        result = dispatcher.dispatch(NavigationIntent.GO_UP)
        assert result.delivered == 0
        assert not result.failed

    def test_sender_error_does_not_raise(self, dispatcher, sender, bus):
        failed = Mock()
        bus.subscribe(Events.COMMAND_FAILED, failed)
        sender.send_key.side_effect = [OSError("gone"), 1, 1, 1]

        result = dispatcher.dispatch(NavigationIntent.GO_RIGHT)

        assert result.failed
        assert sender.send_key.call_count == 4
        assert result.delivered == 3
        failed.assert_called_once()

    def test_command_sent_event(self, dispatcher, bus):
        handler = Mock()
        bus.subscribe(Events.COMMAND_SENT, handler)
        result = dispatcher.dispatch(NavigationIntent.START_FLYING)
        handler.assert_called_once_with(
            intent=NavigationIntent.START_FLYING, sequence=result.sequence, delivered=2,
        )

    def test_default_target(self, sender, bus):
        assert CommandDispatcher(sender, event_bus=bus).target_process == "SecondLife"
