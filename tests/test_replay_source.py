"""
Tests for Pose Frame Sources
=============================
"""

import json
import threading

import pytest

from conftest import make_frame, position_only, tracked

from bodynav.core.types import BodyTrackingState
from bodynav.modules.capture.replay_source import (
    ReplayPoseSource, SequencePoseSource, read_frames, write_frames,
)
from bodynav.modules.capture.synthetic import demo_session


@pytest.fixture
def recording(tmp_path):
    path = tmp_path / "session.jsonl"
    frames = [
        make_frame(frame_id=0),
        make_frame(tracked(1), position_only(2), frame_id=1),
        make_frame(tracked(1, "left_arm_out"), tracked(2), frame_id=2),
    ]
    write_frames(path, frames)
    return path


class TestRecordingFormat:

    def test_read_back(self, recording):
        frames = list(read_frames(recording))
        assert [f.frame_id for f in frames] == [0, 1, 2]
        assert frames[1].find(2).tracking_state is BodyTrackingState.POSITION_ONLY
        assert frames[2].find(1).to_numpy().shape == (20, 3)

    def test_joint_names(self, recording):
        record = json.loads(recording.read_text().splitlines()[1])
        joints = record["bodies"][0]["joints"]
        assert "WristLeft" in joints
        assert "ShoulderCenter" in joints
        assert record["bodies"][0]["tracking_state"] == "Tracked"

    def test_bad_lines_skipped(self, tmp_path):
        good = json.dumps(make_frame(tracked(1), frame_id=5).to_dict())
        path = tmp_path / "broken.jsonl"
        lines = [
            "# recorded in the lab",
            "{not json",
            json.dumps({"bodies": []}),
            json.dumps({"frame_id": 1, "bodies": [{"tracking_id": 1, "joints": {"Tail": {"position": [0, 0, 0]}}}]}),
            json.dumps({"frame_id": 2, "bodies": [{"tracking_id": 1, "joints": []}]}),
            json.dumps({"frame_id": 3, "bodies": ["body"]}),
            json.dumps([4]),
            "",
        ]
        payload = "\n".join(lines).encode("utf-8")
        # a line that is not valid UTF-8
        payload += b"\n\xff\xfe{\"frame_id\": 6}\n" + good.encode("utf-8")
        path.write_bytes(payload)
        frames = list(read_frames(path))
        assert [f.frame_id for f in frames] == [5]

    def test_demo_session_count(self, tmp_path):
        path = tmp_path / "demo.jsonl"
        count = write_frames(path, demo_session())
        assert count == len(list(read_frames(path)))


class TestPlayback:

    def test_pushes_all_frames(self, recording):
        source = ReplayPoseSource(recording, fps=0)
        received = []
        source.start(received.append)
        assert [f.frame_id for f in received] == [0, 1, 2]
        assert source.frames_pushed == 3

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ReplayPoseSource(tmp_path / "nope.jsonl")

    def test_seated_mode_flag(self, recording):
        assert ReplayPoseSource(recording, fps=0, seated_mode=True).seated_mode

    def test_restriction_demotes_others(self):
        source = SequencePoseSource([make_frame(tracked(1), tracked(2), position_only(3))])
        source.restrict_to(2)
        received = []
        source.start(received.append)

        states = {b.tracking_id: b.tracking_state for b in received[0].bodies}
        assert states == {
            1: BodyTrackingState.POSITION_ONLY,
            2: BodyTrackingState.TRACKED,
            3: BodyTrackingState.POSITION_ONLY,
        }

    def test_clear_restriction(self):
        source = SequencePoseSource([make_frame(tracked(1), tracked(2))])
        source.restrict_to(2)
        source.clear_restriction()
        received = []
        source.start(received.append)
        assert all(b.is_tracked for b in received[0].bodies)
        assert source.restricted_to is None

    def test_stop_from_callback(self):
        source = SequencePoseSource([make_frame(frame_id=i) for i in range(10)], loop=True)
        received = []

        def callback(frame):
            received.append(frame)
            if len(received) == 25:
                source.stop()

        source.start(callback)
        assert len(received) == 25
        assert [f.frame_id for f in received[:12]] == list(range(10)) + [0, 1]

    def test_empty_looping_source_returns(self):
        source = SequencePoseSource([], loop=True)
        worker = threading.Thread(target=source.start, args=(lambda frame: None,), daemon=True)
        worker.start()
        worker.join(timeout=2.0)
        assert not worker.is_alive()
        assert source.frames_pushed == 0

    def test_unreadable_looping_recording_returns(self, tmp_path):
        path = tmp_path / "bad.jsonl"
        path.write_text("{not json\n[1, 2]\n")
        source = ReplayPoseSource(path, fps=0, loop=True)
        worker = threading.Thread(target=source.start, args=(lambda frame: None,), daemon=True)
        worker.start()
        worker.join(timeout=2.0)
        assert not worker.is_alive()
