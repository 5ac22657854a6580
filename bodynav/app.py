"""
Body-gesture flight navigation - application entry point.

Wires the pose source, lock manager, classifier and dispatcher together
and runs until the source stops or a signal arrives.

Usage:
    bodynav --replay session.jsonl                 # control the target app
    bodynav --replay session.jsonl --mode demo     # recognise only
    bodynav --replay session.jsonl --method simulated --log-level DEBUG
    bodynav --synthetic --mode demo                # built-in gesture walkthrough
"""

import sys
import signal
import argparse
import logging

from bodynav import __version__
from bodynav.core.events import EventBus, Events
from bodynav.core.pipeline import NavigationPipeline
from bodynav.modules.capture.replay_source import ReplayPoseSource, SequencePoseSource
from bodynav.modules.capture.synthetic import demo_session
from bodynav.modules.control.command_dispatcher import CommandDispatcher
from bodynav.modules.control.key_senders import SimulatedKeySender, create_key_sender
from bodynav.modules.recognition.gesture_classifier import GestureClassifier
from bodynav.modules.tracking.subject_lock import SubjectLockManager
from bodynav.modules.utils.config import Config
from bodynav.modules.utils.logger import IntentLogger, setup_logging
from bodynav.modules.utils.performance_monitor import PerformanceMonitor

logger = logging.getLogger(__name__)


class BodyNavigationApp:
    """Owns the modules and the pose source for one run."""

    def __init__(self, config: Config, source, mode: str = "control", sender=None):
        self._config = config
        self._mode = mode
        self._source = source

        self._bus = EventBus()

        control_cfg = config.control
        if sender is None:
            if mode == "demo":
                sender = SimulatedKeySender()
            else:
                sender = create_key_sender(control_cfg.get("method", "auto"))
        self._sender = sender

        self._lock_manager = SubjectLockManager(source=source, event_bus=self._bus)
        self._classifier = GestureClassifier()
        self._dispatcher = CommandDispatcher(sender, control_cfg, event_bus=self._bus)
        self._perf = PerformanceMonitor(
            window_size=config.get("performance.metrics_window", 100),
            frame_budget_ms=config.get("performance.frame_budget_ms", 33.0),
        )
        self._intent_logger = IntentLogger()

        pipeline_cfg = dict(config.pipeline)
        pipeline_cfg["mode"] = mode
        self._pipeline = NavigationPipeline(
            lock_manager=self._lock_manager,
            classifier=self._classifier,
            dispatcher=self._dispatcher,
            performance_monitor=self._perf,
            event_bus=self._bus,
            config=pipeline_cfg,
        )

        self._subscriptions = [
            (Events.INTENT_DETECTED, self._intent_logger.on_intent),
            (Events.FLYING_CHANGED, self._intent_logger.on_flying_changed),
            (Events.SUBJECT_LOCKED, self._intent_logger.on_subject_locked),
            (Events.SUBJECT_LOST, self._intent_logger.on_subject_lost),
        ]
        for event_name, handler in self._subscriptions:
            self._bus.subscribe(event_name, handler)

        logger.info("BodyNavigationApp initialized (mode=%s, target=%s, sender=%s)",
                    mode, self._dispatcher.target_process, sender.method)

    def run(self):
        """Block until the source has no more frames or stop() is called."""
        self._bus.emit(Events.SYSTEM_STARTED, mode=self._mode)
        try:
            self._source.start(self._pipeline.process_frame)
        finally:
            self._shutdown()

    def stop(self):
        self._source.stop()

    def _shutdown(self):
        logger.info("Shutting down...")
        self._source.clear_restriction()
        self._bus.emit(Events.SYSTEM_SHUTDOWN)
        for event_name, handler in self._subscriptions:
            self._bus.unsubscribe(event_name, handler)
        self._perf.print_report()
        self._intent_logger.print_summary()
        logger.info("Shutdown complete.")

    def handle_signal(self, signum, frame):
        """Handle SIGINT/SIGTERM for graceful shutdown."""
        logger.info("Signal %d received, shutting down...", signum)
        self.stop()

    @property
    def pipeline(self) -> NavigationPipeline:
        return self._pipeline


def build_source(config: Config, synthetic: bool = False):
    """Pose source from config; None (after logging why) when there is none."""
    fps = config.get("sensor.replay_fps", 30.0)
    loop = config.get("sensor.loop", False)
    if synthetic:
        return SequencePoseSource(list(demo_session()), fps=fps, loop=loop)

    replay_path = config.get("sensor.replay")
    if not replay_path:
        logger.error("No pose source configured: pass --replay, --synthetic or set sensor.replay")
        return None
    try:
        return ReplayPoseSource(
            replay_path, fps=fps, loop=loop,
            seated_mode=config.get("sensor.seated_mode", False),
        )
    except FileNotFoundError as e:
        logger.error("%s", e)
        return None


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Body-gesture flight navigation via synthetic key events"
    )
    parser.add_argument(
        "--mode", choices=["control", "demo"], default=None,
        help="control sends keys, demo only recognises"
    )
    parser.add_argument("--config", type=str, default=None, help="Path to config.yaml")
    parser.add_argument("--replay", type=str, default=None,
                        help="JSON Lines pose recording to play back")
    parser.add_argument("--synthetic", action="store_true",
                        help="Play the built-in synthetic gesture session instead of a recording")
    parser.add_argument("--loop", action="store_true", help="Loop the recording")
    parser.add_argument("--target", type=str, default=None,
                        help="Process name to receive keys (default from config)")
    parser.add_argument("--method", choices=["auto", "xdotool", "win32", "simulated"],
                        default=None, help="Key delivery backend")
    parser.add_argument("--log-level", type=str, default=None)
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)

    config = Config()
    config.load(config_path=args.config)

    overrides = {}
    if args.target:
        overrides.setdefault("control", {})["target_process"] = args.target
    if args.method:
        overrides.setdefault("control", {})["method"] = args.method
    if args.replay:
        overrides.setdefault("sensor", {})["replay"] = args.replay
    if args.loop:
        overrides.setdefault("sensor", {})["loop"] = True
    config.override(overrides)

    log_cfg = config.get_section("logging")
    setup_logging(
        level=args.log_level or log_cfg.get("level", "INFO"),
        log_file=log_cfg.get("file"),
        max_size_mb=log_cfg.get("max_size_mb", 10),
        backup_count=log_cfg.get("backup_count", 3),
    )

    mode = args.mode or config.get("pipeline.mode", "control")

    logger.info("=" * 60)
    logger.info("  BODYNAV - body gesture flight navigation")
    logger.info("  Version: %s", __version__)
    logger.info("  Mode: %s", mode)
    logger.info("=" * 60)

    source = build_source(config, synthetic=args.synthetic)
    if source is None:
        return 1

    app = BodyNavigationApp(config, source, mode=mode)

    signal.signal(signal.SIGINT, app.handle_signal)
    signal.signal(signal.SIGTERM, app.handle_signal)

    app.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
