"""
Single-subject lock-on across frames.

Exactly one body is allowed to issue commands. The lock is taken by the
first fully tracked body in frame order and released the first frame that
body is no longer fully tracked; there is no grace period.
"""

import logging
from typing import Optional

from bodynav.core.events import EventBus, Events
from bodynav.core.types import Body, PoseFrame

logger = logging.getLogger(__name__)


def is_controllable(body: Body) -> bool:
    """A body can hold the lock only when fully tracked with all landmarks."""
    return body.is_tracked and body.is_complete


def update_lock(frame: PoseFrame, lock: Optional[int]) -> Optional[int]:
    """Return the lock after seeing ``frame``.

    Unlocked: first controllable body in frame order wins.
    Locked on k: kept while body k is controllable, otherwise released.
    """
    if lock is None:
        for body in frame.bodies:
            if is_controllable(body):
                return body.tracking_id
        return None

    for body in frame.bodies:
        if body.tracking_id == lock and is_controllable(body):
            return lock
    return None


def locked_body(frame: PoseFrame, lock: Optional[int]) -> Optional[Body]:
    """Get the controlled body in ``frame``, if any."""
    if lock is None:
        return None
    for body in frame.bodies:
        if body.tracking_id == lock and is_controllable(body):
            return body
    return None


class SubjectLockManager:
    """Applies ``update_lock`` and drives the sensor collaborator on transitions.

    ``source`` is anything with ``restrict_to(tracking_id)`` and
    ``clear_restriction()``; it may be None when frames come from a
    source that cannot filter bodies.
    """

    def __init__(self, source=None, event_bus: EventBus = None):
        self._source = source
        self._bus = event_bus or EventBus()
        self._acquisitions = 0
        self._losses = 0

    def set_source(self, source):
        self._source = source

    def update(self, frame: PoseFrame, lock: Optional[int]) -> Optional[int]:
        new_lock = update_lock(frame, lock)

        if lock is not None and new_lock != lock:
            self._losses += 1
            logger.info("Subject %d lost (frame %d), lock released", lock, frame.frame_id)
            if self._source is not None:
                self._source.clear_restriction()
            self._bus.emit(Events.SUBJECT_LOST, tracking_id=lock, frame_id=frame.frame_id)

        if new_lock is not None and new_lock != lock:
            self._acquisitions += 1
            logger.info("Subject %d locked (frame %d)", new_lock, frame.frame_id)
            if self._source is not None:
                self._source.restrict_to(new_lock)
            self._bus.emit(Events.SUBJECT_LOCKED, tracking_id=new_lock, frame_id=frame.frame_id)

        return new_lock

    @property
    def acquisitions(self) -> int:
        return self._acquisitions

    @property
    def losses(self) -> int:
        return self._losses
