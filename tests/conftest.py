"""
Shared fixtures for the bodynav test suite.
"""

import sys
from pathlib import Path

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from bodynav.core.events import EventBus
from bodynav.core.types import BodyTrackingState, PoseFrame
from bodynav.modules.capture.synthetic import pose_body
from bodynav.modules.utils.config import Config


@pytest.fixture(autouse=True)
def reset_singletons():
    """EventBus and Config are process-wide; start every test clean."""
    EventBus().reset()
    Config.reset()
    yield
    EventBus().reset()
    Config.reset()


@pytest.fixture
def bus():
    return EventBus()


def make_frame(*bodies, frame_id=0):
    return PoseFrame(frame_id, list(bodies), timestamp=float(frame_id))


def tracked(tracking_id, pose="rest"):
    return pose_body(pose, tracking_id)


def position_only(tracking_id, pose="rest"):
    return pose_body(pose, tracking_id, state=BodyTrackingState.POSITION_ONLY)


def joints_for(pose):
    """(20, 3) joint array of a synthetic pose."""
    return pose_body(pose).to_numpy()
