"""
Tests for the Application Entry Point
======================================
"""

from bodynav.app import BodyNavigationApp, build_source, main, parse_args
from bodynav.core.events import EventBus, Events
from bodynav.core.types import NavigationIntent
from bodynav.modules.capture.replay_source import SequencePoseSource, write_frames
from bodynav.modules.capture.synthetic import demo_session
from bodynav.modules.control.key_senders import SimulatedKeySender
from bodynav.modules.utils.config import Config


def test_parse_args():
    args = parse_args(["--replay", "s.jsonl", "--mode", "demo", "--method", "simulated"])
    assert args.replay == "s.jsonl"
    assert args.mode == "demo"
    assert args.method == "simulated"
    assert not args.synthetic


def test_build_source_without_recording(tmp_path):
    config = Config().load(config_path=str(tmp_path / "none.yaml"))
    assert build_source(config) is None


def test_build_source_synthetic(tmp_path):
    config = Config().load(config_path=str(tmp_path / "none.yaml"))
    assert isinstance(build_source(config, synthetic=True), SequencePoseSource)


def test_app_runs_demo_session(tmp_path):
    config = Config().load(config_path=str(tmp_path / "none.yaml"))
    sender = SimulatedKeySender()
    source = SequencePoseSource(list(demo_session()))
    app = BodyNavigationApp(config, source, mode="control", sender=sender)

    app.run()

    assert app.pipeline.frame_count == source.frames_pushed
    assert sender.sent
    assert app.pipeline.state.flying is False
    assert source.restricted_to is None


def test_demo_mode_sends_nothing(tmp_path):
    config = Config().load(config_path=str(tmp_path / "none.yaml"))
    source = SequencePoseSource(list(demo_session()))
    app = BodyNavigationApp(config, source, mode="demo")
    results = []
    source.start(lambda frame: results.append(app.pipeline.process_frame(frame)))
    assert NavigationIntent.GO_LEFT in {r.intent for r in results}
    assert all(r.delivered == 0 for r in results)


def test_main_replay(tmp_path):
    recording = tmp_path / "session.jsonl"
    write_frames(recording, demo_session())
    config_path = tmp_path / "config.yaml"
    config_path.write_text("sensor:\n  replay_fps: 0\n")

    code = main(["--config", str(config_path), "--replay", str(recording),
                 "--mode", "demo", "--log-level", "WARNING"])
    assert code == 0


def test_main_missing_recording(tmp_path):
    code = main(["--config", str(tmp_path / "none.yaml"),
                 "--replay", str(tmp_path / "missing.jsonl")])
    assert code == 1


def test_shutdown_releases_subscriptions(tmp_path):
    config = Config().load(config_path=str(tmp_path / "none.yaml"))
    source = SequencePoseSource(list(demo_session()))
    app = BodyNavigationApp(config, source, mode="demo")
    app.run()

    intent_logger = app._intent_logger
    counts = intent_logger.counts
    EventBus().emit(Events.INTENT_DETECTED, intent=NavigationIntent.GO_UP, label="GO UP", frame_id=0)
    assert intent_logger.counts == counts
