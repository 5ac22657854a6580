"""
Synthetic skeletons for demos, sample recordings and tests.

A standing body ~2 m from the sensor, hip centre at y=0, shoulders 0.4 m
apart. Each pose overrides only the arm joints.
"""

from typing import Dict, Iterator, List, Tuple

from bodynav.core.types import (
    Body, BodyTrackingState, Joint, JointTrackingState, JointType, PoseFrame,
)

Position = Tuple[float, float, float]

NEUTRAL: Dict[JointType, Position] = {
    JointType.HIP_CENTER: (0.0, 0.0, 2.0),
    JointType.SPINE: (0.0, 0.25, 2.0),
    JointType.SHOULDER_CENTER: (0.0, 0.55, 2.0),
    JointType.HEAD: (0.0, 0.75, 2.0),
    JointType.SHOULDER_LEFT: (-0.2, 0.5, 2.0),
    JointType.ELBOW_LEFT: (-0.25, 0.25, 2.0),
    JointType.WRIST_LEFT: (-0.25, -0.1, 2.0),
    JointType.HAND_LEFT: (-0.25, -0.15, 2.0),
    JointType.SHOULDER_RIGHT: (0.2, 0.5, 2.0),
    JointType.ELBOW_RIGHT: (0.25, 0.25, 2.0),
    JointType.WRIST_RIGHT: (0.25, -0.1, 2.0),
    JointType.HAND_RIGHT: (0.25, -0.15, 2.0),
    JointType.HIP_LEFT: (-0.1, -0.05, 2.0),
    JointType.KNEE_LEFT: (-0.1, -0.5, 2.0),
    JointType.ANKLE_LEFT: (-0.1, -0.9, 2.0),
    JointType.FOOT_LEFT: (-0.1, -0.95, 1.9),
    JointType.HIP_RIGHT: (0.1, -0.05, 2.0),
    JointType.KNEE_RIGHT: (0.1, -0.5, 2.0),
    JointType.ANKLE_RIGHT: (0.1, -0.9, 2.0),
    JointType.FOOT_RIGHT: (0.1, -0.95, 1.9),
}

# Arm overrides on top of NEUTRAL (which is itself the resting pose)
POSES: Dict[str, Dict[JointType, Position]] = {
    "rest": {},
    # hands above the head, elbows still below it
    "arms_raised": {
        JointType.ELBOW_LEFT: (-0.25, 0.6, 2.0),
        JointType.WRIST_LEFT: (-0.2, 0.95, 2.0),
        JointType.HAND_LEFT: (-0.2, 1.0, 2.0),
        JointType.ELBOW_RIGHT: (0.25, 0.6, 2.0),
        JointType.WRIST_RIGHT: (0.2, 0.95, 2.0),
        JointType.HAND_RIGHT: (0.2, 1.0, 2.0),
    },
    # elbows above the head
    "elbows_up": {
        JointType.ELBOW_LEFT: (-0.3, 0.85, 2.0),
        JointType.WRIST_LEFT: (-0.25, 1.05, 2.0),
        JointType.HAND_LEFT: (-0.25, 1.1, 2.0),
        JointType.ELBOW_RIGHT: (0.3, 0.85, 2.0),
        JointType.WRIST_RIGHT: (0.25, 1.05, 2.0),
        JointType.HAND_RIGHT: (0.25, 1.1, 2.0),
    },
    # left hand held in front of the chest, right arm down
    "left_hand_chest": {
        JointType.WRIST_LEFT: (-0.22, 0.4, 1.8),
        JointType.HAND_LEFT: (-0.2, 0.45, 1.75),
    },
    # right hand held in front of the chest, left arm down
    "right_hand_chest": {
        JointType.WRIST_RIGHT: (0.22, 0.4, 1.8),
        JointType.HAND_RIGHT: (0.2, 0.45, 1.75),
    },
    "left_arm_out": {
        JointType.ELBOW_LEFT: (-0.45, 0.5, 2.0),
        JointType.WRIST_LEFT: (-0.7, 0.5, 2.0),
        JointType.HAND_LEFT: (-0.78, 0.5, 2.0),
    },
    "right_arm_out": {
        JointType.ELBOW_RIGHT: (0.45, 0.5, 2.0),
        JointType.WRIST_RIGHT: (0.7, 0.5, 2.0),
        JointType.HAND_RIGHT: (0.78, 0.5, 2.0),
    },
    # both hands just above the hips
    "hands_low": {
        JointType.ELBOW_LEFT: (-0.25, 0.25, 1.9),
        JointType.WRIST_LEFT: (-0.2, 0.1, 1.8),
        JointType.HAND_LEFT: (-0.18, 0.1, 1.75),
        JointType.ELBOW_RIGHT: (0.25, 0.25, 1.9),
        JointType.WRIST_RIGHT: (0.2, 0.1, 1.8),
        JointType.HAND_RIGHT: (0.18, 0.1, 1.75),
    },
}


def pose_body(pose: str = "rest", tracking_id: int = 1,
              state: BodyTrackingState = BodyTrackingState.TRACKED,
              offset: Position = (0.0, 0.0, 0.0)) -> Body:
    """Build a complete body in one of the named poses, shifted by ``offset``."""
    positions = dict(NEUTRAL)
    positions.update(POSES[pose])
    dx, dy, dz = offset
    joints = {
        joint_type: Joint(joint_type, x + dx, y + dy, z + dz, JointTrackingState.TRACKED)
        for joint_type, (x, y, z) in positions.items()
    }
    return Body(tracking_id, state, joints)


# (pose, frames) script for the demo session
DEMO_SCRIPT: List[Tuple[str, int]] = [
    ("rest", 30),
    ("elbows_up", 10),
    ("rest", 10),
    ("arms_raised", 15),
    ("right_hand_chest", 20),
    ("left_arm_out", 15),
    ("right_arm_out", 15),
    ("hands_low", 15),
    ("left_hand_chest", 10),
    ("rest", 30),
]


def demo_session(tracking_id: int = 7, bystander_id: int = 3) -> Iterator[PoseFrame]:
    """Frames of one operator running through every gesture.

    A bystander stands to the side the whole time, a few empty frames
    precede the operator, and the operator steps out at the end.
    """
    frame_id = 0
    for _ in range(5):
        yield PoseFrame(frame_id, [], timestamp=frame_id / 30.0)
        frame_id += 1

    for pose, count in DEMO_SCRIPT:
        for _ in range(count):
            bodies = [
                pose_body(pose, tracking_id),
                pose_body("rest", bystander_id, offset=(1.2, 0.0, 0.8)),
            ]
            yield PoseFrame(frame_id, bodies, timestamp=frame_id / 30.0)
            frame_id += 1

    for _ in range(10):
        bodies = [pose_body("rest", bystander_id, offset=(1.2, 0.0, 0.8))]
        yield PoseFrame(frame_id, bodies, timestamp=frame_id / 30.0)
        frame_id += 1
