"""Pose frame sources."""
from .replay_source import (
    PoseSource, ReplayPoseSource, SequencePoseSource, read_frames, write_frames,
)

__all__ = [
    "PoseSource",
    "ReplayPoseSource",
    "SequencePoseSource",
    "read_frames",
    "write_frames",
]
