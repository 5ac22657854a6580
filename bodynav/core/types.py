"""
Shared domain types for the body-gesture navigation system.

Centralizes enums, data classes, and type definitions used across modules
to eliminate circular imports and ensure type consistency.

Coordinates are sensor skeleton space: metres, +Y up, +X to the sensor's
right. A larger y is always physically higher.
"""

import time
from enum import Enum, IntEnum
from typing import Dict, Mapping, NamedTuple, Optional, Tuple

import numpy as np

from bodynav.core.errors import IncompleteBodyError, FrameFormatError


# =============================================================================
# Skeleton
# =============================================================================

class JointType(IntEnum):
    """Fixed skeleton landmarks. The value is the row in a (20, 3) array."""
    HIP_CENTER = 0
    SPINE = 1
    SHOULDER_CENTER = 2
    HEAD = 3
    SHOULDER_LEFT = 4
    ELBOW_LEFT = 5
    WRIST_LEFT = 6
    HAND_LEFT = 7
    SHOULDER_RIGHT = 8
    ELBOW_RIGHT = 9
    WRIST_RIGHT = 10
    HAND_RIGHT = 11
    HIP_LEFT = 12
    KNEE_LEFT = 13
    ANKLE_LEFT = 14
    FOOT_LEFT = 15
    HIP_RIGHT = 16
    KNEE_RIGHT = 17
    ANKLE_RIGHT = 18
    FOOT_RIGHT = 19

    @property
    def sensor_name(self) -> str:
        """CamelCase name used by the sensor SDK and recordings ("WristLeft")."""
        return "".join(part.capitalize() for part in self.name.split("_"))

    @classmethod
    def from_sensor_name(cls, name: str) -> 'JointType':
        try:
            return _JOINTS_BY_SENSOR_NAME[name]
        except KeyError:
            raise FrameFormatError(f"Unknown joint name: {name!r}") from None


_JOINTS_BY_SENSOR_NAME = {j.sensor_name: j for j in JointType}

JOINT_COUNT = len(JointType)


class JointTrackingState(Enum):
    NOT_TRACKED = "NotTracked"
    INFERRED = "Inferred"
    TRACKED = "Tracked"


class BodyTrackingState(Enum):
    NOT_TRACKED = "NotTracked"
    POSITION_ONLY = "PositionOnly"
    TRACKED = "Tracked"

    @classmethod
    def from_string(cls, name: str) -> 'BodyTrackingState':
        try:
            return cls(name)
        except ValueError:
            raise FrameFormatError(f"Unknown body tracking state: {name!r}") from None


class Joint(NamedTuple):
    """A single landmark of one body in one frame."""
    joint_type: JointType
    x: float
    y: float
    z: float
    tracking_state: JointTrackingState = JointTrackingState.TRACKED

    @property
    def position(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.z)


class Body:
    """One candidate tracked person in a pose frame.

    A complete body carries exactly one Joint per JointType, including
    joints the sensor reports as NotTracked.
    """

    __slots__ = ("tracking_id", "tracking_state", "joints")

    def __init__(self, tracking_id: int, tracking_state: BodyTrackingState,
                 joints: Mapping[JointType, Joint]):
        self.tracking_id = tracking_id
        self.tracking_state = tracking_state
        self.joints: Dict[JointType, Joint] = dict(joints)

    def __repr__(self):
        return (f"Body(id={self.tracking_id}, state={self.tracking_state.value}, "
                f"joints={len(self.joints)})")

    @property
    def is_tracked(self) -> bool:
        return self.tracking_state is BodyTrackingState.TRACKED

    @property
    def is_complete(self) -> bool:
        """True when every landmark is present and keyed by its own type."""
        if len(self.joints) != JOINT_COUNT:
            return False
        return all(
            joint_type in self.joints and self.joints[joint_type].joint_type is joint_type
            for joint_type in JointType
        )

    def to_numpy(self) -> np.ndarray:
        """Return joint positions as a (20, 3) array indexed by JointType."""
        if not self.is_complete:
            missing = [j.sensor_name for j in JointType if j not in self.joints]
            raise IncompleteBodyError(
                f"Body {self.tracking_id} is missing joints: {missing}"
            )
        positions = np.empty((JOINT_COUNT, 3), dtype=np.float64)
        for joint_type, joint in self.joints.items():
            positions[joint_type] = joint.position
        return positions

    @classmethod
    def from_dict(cls, data: dict) -> 'Body':
        """Build a body from its recording form.

        Missing joints are allowed here; callers check ``is_complete``.
        """
        try:
            tracking_id = int(data["tracking_id"])
            state = BodyTrackingState.from_string(data.get("tracking_state", "NotTracked"))
            joints = {}
            for name, joint_data in data.get("joints", {}).items():
                joint_type = JointType.from_sensor_name(name)
                x, y, z = (float(v) for v in joint_data["position"])
                joint_state = JointTrackingState(joint_data.get("tracking_state", "Tracked"))
                joints[joint_type] = Joint(joint_type, x, y, z, joint_state)
        except FrameFormatError:
            raise
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise FrameFormatError(f"Malformed body record: {e}") from e
        return cls(tracking_id, state, joints)

    def to_dict(self) -> dict:
        return {
            "tracking_id": self.tracking_id,
            "tracking_state": self.tracking_state.value,
            "joints": {
                joint_type.sensor_name: {
                    "position": list(joint.position),
                    "tracking_state": joint.tracking_state.value,
                }
                for joint_type, joint in sorted(self.joints.items())
            },
        }


MAX_BODIES = 6


class PoseFrame:
    """All bodies reported by the sensor at one sampling instant."""

    __slots__ = ("frame_id", "timestamp", "bodies")

    def __init__(self, frame_id: int, bodies=(), timestamp: Optional[float] = None):
        bodies = tuple(bodies)
        if len(bodies) > MAX_BODIES:
            raise FrameFormatError(
                f"Frame {frame_id} has {len(bodies)} bodies (max {MAX_BODIES})"
            )
        self.frame_id = frame_id
        self.timestamp = time.time() if timestamp is None else timestamp
        self.bodies: Tuple[Body, ...] = bodies

    def __repr__(self):
        return f"PoseFrame({self.frame_id}, bodies={len(self.bodies)})"

    def find(self, tracking_id: int) -> Optional[Body]:
        for body in self.bodies:
            if body.tracking_id == tracking_id:
                return body
        return None

    @classmethod
    def from_dict(cls, data: dict) -> 'PoseFrame':
        try:
            frame_id = int(data["frame_id"])
            bodies = [Body.from_dict(b) for b in data.get("bodies", [])]
            timestamp = data.get("timestamp")
        except FrameFormatError:
            raise
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise FrameFormatError(f"Malformed frame record: {e}") from e
        return cls(frame_id, bodies, timestamp=timestamp)

    def to_dict(self) -> dict:
        return {
            "frame_id": self.frame_id,
            "timestamp": self.timestamp,
            "bodies": [b.to_dict() for b in self.bodies],
        }


# =============================================================================
# Intents & Commands
# =============================================================================

class NavigationIntent(Enum):
    """The classifier's single output per frame."""
    NONE = "none"
    STAY = "stay"
    START_FLYING = "start_flying"
    STOP_FLYING = "stop_flying"
    GO_UP = "go_up"
    GO_DOWN = "go_down"
    GO_FORWARD = "go_forward"
    GO_LEFT = "go_left"
    GO_RIGHT = "go_right"

    @property
    def label(self) -> str:
        """On-screen text, e.g. "GO LEFT". Empty for NONE."""
        if self is NavigationIntent.NONE:
            return ""
        return self.value.replace("_", " ").upper()

    @property
    def is_flight_toggle(self) -> bool:
        return self in (NavigationIntent.START_FLYING, NavigationIntent.STOP_FLYING)

    @property
    def is_locomotion(self) -> bool:
        return self in (
            NavigationIntent.GO_UP, NavigationIntent.GO_DOWN,
            NavigationIntent.GO_FORWARD, NavigationIntent.GO_LEFT,
            NavigationIntent.GO_RIGHT,
        )


class KeyDirection(Enum):
    PRESS = "press"
    RELEASE = "release"


class KeyAction(NamedTuple):
    vk_code: int
    direction: KeyDirection

    def __repr__(self):
        return f"KeyAction(0x{self.vk_code:02X}, {self.direction.value})"


CommandSequence = Tuple[KeyAction, ...]

# Windows virtual-key codes of the navigation keys
VK_LEFT = 0x25
VK_UP = 0x26
VK_RIGHT = 0x27
VK_C = 0x43
VK_E = 0x45
VK_F = 0x46


# =============================================================================
# Cross-frame state
# =============================================================================

class ControlState(NamedTuple):
    """Everything that survives from one frame to the next.

    ``lock`` is the tracking id of the controlled body, or None when
    unlocked. ``flying`` persists across lock changes.
    """
    lock: Optional[int] = None
    flying: bool = False

    @property
    def is_locked(self) -> bool:
        return self.lock is not None
