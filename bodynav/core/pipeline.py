"""
Per-frame navigation pipeline.

    PoseFrame -> SubjectLockManager -> GestureClassifier -> CommandDispatcher

``step`` is the pure part: (frame, state) -> (intent, state'). The
NavigationPipeline wraps it with the sensor side effects, dispatch, events
and timing, and is the callback handed to the pose source. Frames are
processed one at a time in arrival order.
"""

import logging
from contextlib import nullcontext
from typing import NamedTuple, Optional

from bodynav.core.errors import IncompleteBodyError
from bodynav.core.events import EventBus, Events
from bodynav.core.types import Body, ControlState, NavigationIntent, PoseFrame
from bodynav.modules.recognition.gesture_classifier import GestureClassifier
from bodynav.modules.tracking.subject_lock import locked_body, update_lock

logger = logging.getLogger(__name__)


class StepResult(NamedTuple):
    intent: NavigationIntent
    state: ControlState
    body: Optional[Body] = None


def classify_body(body: Optional[Body], flying: bool, classifier: GestureClassifier):
    """Classify the controlled body; no body (or an incomplete one) yields NONE."""
    if body is None:
        return NavigationIntent.NONE, flying
    try:
        joints = body.to_numpy()
    except IncompleteBodyError as e:
        logger.debug("Skipping classification: %s", e)
        return NavigationIntent.NONE, flying
    return classifier.classify(joints, flying)


def step(frame: PoseFrame, state: ControlState,
         classifier: GestureClassifier = None) -> StepResult:
    """Advance the control state by one frame without side effects."""
    classifier = classifier or GestureClassifier()
    lock = update_lock(frame, state.lock)
    body = locked_body(frame, lock)
    intent, flying = classify_body(body, state.flying, classifier)
    return StepResult(intent, ControlState(lock=lock, flying=flying), body)


class PipelineResult:
    """Result of a single pipeline iteration."""

    __slots__ = (
        "frame_id", "intent", "label", "state", "locked_id",
        "sequence", "delivered", "latency_ms",
    )

    def __init__(self, frame_id: int):
        self.frame_id = frame_id
        self.intent = NavigationIntent.NONE
        self.label = ""
        self.state = ControlState()
        self.locked_id = None
        self.sequence = ()
        self.delivered = 0
        self.latency_ms = 0.0

    def __repr__(self):
        return f"PipelineResult(frame={self.frame_id}, intent={self.intent.value})"


class NavigationPipeline:
    """Lock -> classify -> dispatch for each pushed frame.

    Modes:
        control - commands are sent to the target application
        demo    - intents are recognised and published, nothing is sent
    """

    def __init__(self, lock_manager, classifier, dispatcher,
                 performance_monitor=None, event_bus: EventBus = None,
                 config: Optional[dict] = None):
        config = config or {}
        self._lock_manager = lock_manager
        self._classifier = classifier
        self._dispatcher = dispatcher
        self._perf = performance_monitor
        self._bus = event_bus or EventBus()
        self._mode = config.get("mode", "control")

        self._state = ControlState(flying=bool(config.get("start_flying", False)))
        self._frame_count = 0
        self._last_intent = NavigationIntent.NONE

    def set_mode(self, mode: str):
        """Set pipeline mode: 'control' or 'demo'."""
        self._mode = mode
        logger.info("Pipeline mode set to: %s", mode)

    def _measure(self, stage: str):
        if self._perf is None:
            return nullcontext()
        return self._perf.measure(stage)

    def process_frame(self, frame: PoseFrame) -> PipelineResult:
        """Handle one frame end to end. Never raises on bad frame content."""
        result = PipelineResult(frame.frame_id)
        self._frame_count += 1
        self._bus.emit(Events.FRAME_RECEIVED, frame_id=frame.frame_id)

        with self._measure("total"):
            # --- 1. Subject lock ---
            with self._measure("tracking"):
                lock = self._lock_manager.update(frame, self._state.lock)
                body = locked_body(frame, lock)

            # --- 2. Classification ---
            with self._measure("classification"):
                intent, flying = classify_body(body, self._state.flying, self._classifier)

            if flying != self._state.flying:
                logger.info("Flying mode: %s", "ON" if flying else "OFF")
                self._bus.emit(Events.FLYING_CHANGED, flying=flying)

            self._state = ControlState(lock=lock, flying=flying)
            result.state = self._state
            result.locked_id = lock
            result.intent = intent
            result.label = intent.label

            if intent is not NavigationIntent.NONE:
                self._bus.emit(Events.INTENT_DETECTED, intent=intent, label=intent.label,
                               frame_id=frame.frame_id)
            if intent is not self._last_intent:
                logger.debug("Intent: %s -> %s", self._last_intent.value, intent.value)
                self._last_intent = intent

            # --- 3. Dispatch ---
            if self._mode == "control":
                with self._measure("dispatch"):
                    dispatched = self._dispatcher.dispatch(intent)
                result.sequence = dispatched.sequence
                result.delivered = dispatched.delivered
            else:
                result.sequence = self._dispatcher.build_sequence(intent)

        if self._perf is not None:
            self._perf.tick()
            result.latency_ms = self._perf.get_stage_latency("total")

        return result

    # Push-callback form for PoseSource.start()
    __call__ = process_frame

    @property
    def state(self) -> ControlState:
        return self._state

    @property
    def mode(self) -> str:
        return self._mode

    @property
    def frame_count(self) -> int:
        return self._frame_count

