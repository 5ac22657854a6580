"""Command dispatch and key delivery."""
from .command_dispatcher import CommandDispatcher, DispatchResult
from .key_senders import KeySender, SimulatedKeySender, create_key_sender

__all__ = [
    "CommandDispatcher",
    "DispatchResult",
    "KeySender",
    "SimulatedKeySender",
    "create_key_sender",
]
