from bodynav.core.types import (
    Body, BodyTrackingState, CommandSequence, ControlState, Joint,
    JointTrackingState, JointType, KeyAction, KeyDirection,
    NavigationIntent, PoseFrame,
)
from bodynav.core.events import EventBus, Events
