"""
Rule-based body gesture classifier for flight navigation.

Each frame yields exactly one NavigationIntent from the locked body's
joint geometry and the current flying mode. Rules are an ordered table;
the first rule whose predicate holds wins, so ties are resolved by row
order and never surface as errors.

Vertical comparisons use sensor skeleton space where +Y is up.
"""

import logging
from typing import Callable, NamedTuple, Optional, Tuple

import numpy as np

from bodynav.core.types import JointType, NavigationIntent

logger = logging.getLogger(__name__)

# Row aliases into the (20, 3) joint array
HIP_CENTER = JointType.HIP_CENTER
SPINE = JointType.SPINE
SHOULDER_CENTER = JointType.SHOULDER_CENTER
HEAD = JointType.HEAD
SHOULDER_LEFT = JointType.SHOULDER_LEFT
ELBOW_LEFT = JointType.ELBOW_LEFT
WRIST_LEFT = JointType.WRIST_LEFT
SHOULDER_RIGHT = JointType.SHOULDER_RIGHT
ELBOW_RIGHT = JointType.ELBOW_RIGHT
WRIST_RIGHT = JointType.WRIST_RIGHT

X, Y = 0, 1

# Wrist-to-shoulder horizontal distance is scaled by this before being
# compared with the shoulder span.
RATIO_WRIST_SHOULDER = 5.0


# =============================================================================
# Geometry helpers
# =============================================================================

def in_band(joints: np.ndarray, joint: int) -> bool:
    """Joint height lies between spine and head, inclusive."""
    y = joints[joint, Y]
    return joints[SPINE, Y] <= y <= joints[HEAD, Y]


def shoulder_span(joints: np.ndarray) -> float:
    return abs(joints[SHOULDER_LEFT, X] - joints[SHOULDER_RIGHT, X])


def arm_reach(joints: np.ndarray, wrist: int, shoulder: int) -> float:
    """Scaled sideways distance of a wrist from its shoulder."""
    return abs(joints[wrist, X] - joints[shoulder, X]) * RATIO_WRIST_SHOULDER


# =============================================================================
# Predicates
# =============================================================================

def is_staying(joints: np.ndarray) -> bool:
    """Both wrists below the hip centre: arms at rest."""
    hip = joints[HIP_CENTER, Y]
    return hip > joints[WRIST_LEFT, Y] and hip > joints[WRIST_RIGHT, Y]


def is_start_flying(joints: np.ndarray) -> bool:
    """Both elbows raised above the head."""
    head = joints[HEAD, Y]
    return head < joints[ELBOW_LEFT, Y] and head < joints[ELBOW_RIGHT, Y]


def is_stop_flying(joints: np.ndarray) -> bool:
    """Left hand held close in front of the chest, right hand out of the band."""
    return (in_band(joints, WRIST_LEFT)
            and not in_band(joints, WRIST_RIGHT)
            and arm_reach(joints, WRIST_LEFT, SHOULDER_LEFT) < shoulder_span(joints))


def is_go_up(joints: np.ndarray) -> bool:
    """Both wrists above the head."""
    head = joints[HEAD, Y]
    return head < joints[WRIST_LEFT, Y] and head < joints[WRIST_RIGHT, Y]


def is_go_down(joints: np.ndarray) -> bool:
    """Both wrists between the hip centre and the middle of the torso."""
    hip = joints[HIP_CENTER, Y]
    reference = (joints[SHOULDER_CENTER, Y] + hip) / 2.0
    left, right = joints[WRIST_LEFT, Y], joints[WRIST_RIGHT, Y]
    return reference > left and reference > right and hip < left and hip < right


def is_go_forward(joints: np.ndarray) -> bool:
    """Mirror of stop-flying on the right arm."""
    return (in_band(joints, WRIST_RIGHT)
            and not in_band(joints, WRIST_LEFT)
            and arm_reach(joints, WRIST_RIGHT, SHOULDER_RIGHT) < shoulder_span(joints))


def is_go_left(joints: np.ndarray) -> bool:
    """Left arm stretched sideways inside the band, right hand out of it."""
    return (arm_reach(joints, WRIST_LEFT, SHOULDER_LEFT) > shoulder_span(joints)
            and not in_band(joints, WRIST_RIGHT)
            and in_band(joints, WRIST_LEFT))


def is_go_right(joints: np.ndarray) -> bool:
    """Right arm stretched sideways inside the band, left hand out of it."""
    return (arm_reach(joints, WRIST_RIGHT, SHOULDER_RIGHT) > shoulder_span(joints)
            and not in_band(joints, WRIST_LEFT)
            and in_band(joints, WRIST_RIGHT))


# =============================================================================
# Rule table
# =============================================================================

class GestureRule(NamedTuple):
    """One row of the priority table.

    ``when_flying`` restricts the row to one flying mode (None = any);
    ``sets_flying`` is the mode after the row fires (None = unchanged).
    """
    intent: NavigationIntent
    predicate: Callable[[np.ndarray], bool]
    when_flying: Optional[bool] = None
    sets_flying: Optional[bool] = None


GESTURE_RULES: Tuple[GestureRule, ...] = (
    GestureRule(NavigationIntent.STAY, is_staying),
    GestureRule(NavigationIntent.START_FLYING, is_start_flying, when_flying=False, sets_flying=True),
    GestureRule(NavigationIntent.STOP_FLYING, is_stop_flying, when_flying=True, sets_flying=False),
    GestureRule(NavigationIntent.GO_UP, is_go_up),
    GestureRule(NavigationIntent.GO_DOWN, is_go_down),
    GestureRule(NavigationIntent.GO_FORWARD, is_go_forward),
    GestureRule(NavigationIntent.GO_LEFT, is_go_left),
    GestureRule(NavigationIntent.GO_RIGHT, is_go_right),
)


class GestureClassifier:
    """Maps joint geometry plus flying mode to one intent and the next mode.

    Stateless: the flying mode is passed in and returned, never stored.
    Flight toggles use guarded evaluation, so a row whose ``when_flying``
    does not match the current mode is skipped without evaluating it.
    """

    def __init__(self, rules: Tuple[GestureRule, ...] = GESTURE_RULES):
        self._rules = tuple(rules)

    def classify(self, joints: np.ndarray, flying: bool) -> Tuple[NavigationIntent, bool]:
        """Classify one frame.

        Args:
            joints: (20, 3) positions indexed by JointType
            flying: Current flying mode

        Returns:
            (intent, flying mode after this frame)
        """
        for rule in self._rules:
            if rule.when_flying is not None and rule.when_flying != flying:
                continue
            if rule.predicate(joints):
                if rule.sets_flying is not None:
                    logger.debug("Flying mode %s -> %s", flying, rule.sets_flying)
                    flying = rule.sets_flying
                return rule.intent, flying
        return NavigationIntent.NONE, flying

    @property
    def rules(self) -> Tuple[GestureRule, ...]:
        return self._rules


def describe(intent: NavigationIntent) -> str:
    """On-screen label for an intent ("GO LEFT"); empty for NONE."""
    return intent.label
