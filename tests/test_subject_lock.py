"""
Tests for Subject Lock Module
==============================
"""

from unittest.mock import Mock

import pytest

from conftest import make_frame, position_only, tracked

from bodynav.core.events import Events
from bodynav.core.types import Body, BodyTrackingState, JointType
from bodynav.modules.tracking.subject_lock import (
    SubjectLockManager, is_controllable, locked_body, update_lock,
)


def incomplete(tracking_id):
    body = tracked(tracking_id)
    joints = dict(body.joints)
    del joints[JointType.WRIST_LEFT]
    return Body(tracking_id, BodyTrackingState.TRACKED, joints)


class TestUpdateLock:
    """Pure lock transitions."""

    def test_first_tracked_body_wins(self):
        frame = make_frame(tracked(2), tracked(7))
        assert update_lock(frame, None) == 2

    def test_skips_position_only(self):
        frame = make_frame(position_only(4), tracked(9))
        assert update_lock(frame, None) == 9

    def test_empty_frame_stays_unlocked(self):
        assert update_lock(make_frame(), None) is None

    def test_no_tracked_body_stays_unlocked(self):
        frame = make_frame(position_only(1), position_only(2))
        assert update_lock(frame, None) is None

    def test_lock_kept_while_tracked(self):
        frame = make_frame(tracked(2), tracked(5))
        lock = 5
        for _ in range(10):
            lock = update_lock(frame, lock)
        assert lock == 5

    def test_lost_body_unlocks_immediately(self):
        frame = make_frame(tracked(2))
        assert update_lock(frame, 5) is None

    def test_position_only_unlocks(self):
        frame = make_frame(position_only(5), tracked(2))
        assert update_lock(frame, 5) is None

    def test_no_reacquire_in_release_frame(self):
        """Another body takes over on the next frame, not the one that released."""
        frame = make_frame(tracked(2))
        lock = update_lock(frame, 5)
        assert lock is None
        assert update_lock(frame, lock) == 2

    def test_incomplete_body_cannot_lock(self):
        frame = make_frame(incomplete(3), tracked(4))
        assert update_lock(frame, None) == 4

    def test_incomplete_locked_body_unlocks(self):
        assert update_lock(make_frame(incomplete(3)), 3) is None

    def test_is_controllable(self):
        assert is_controllable(tracked(1))
        assert not is_controllable(position_only(1))
        assert not is_controllable(incomplete(1))


class TestLockedBody:

    def test_returns_locked(self):
        body = tracked(5)
        assert locked_body(make_frame(tracked(2), body), 5) is body

    def test_unlocked_is_none(self):
        assert locked_body(make_frame(tracked(2)), None) is None


class TestSubjectLockManager:
    """Side effects on the sensor collaborator."""

    @pytest.fixture
    def source(self):
        return Mock()

    @pytest.fixture
    def manager(self, source, bus):
        return SubjectLockManager(source=source, event_bus=bus)

    def test_acquire_restricts_source(self, manager, source):
        lock = manager.update(make_frame(tracked(2), tracked(7)), None)
        assert lock == 2
        source.restrict_to.assert_called_once_with(2)
        source.clear_restriction.assert_not_called()

    def test_keep_issues_nothing(self, manager, source):
        manager.update(make_frame(tracked(2)), 2)
        source.restrict_to.assert_not_called()
        source.clear_restriction.assert_not_called()

    def test_loss_clears_restriction(self, manager, source):
        lock = manager.update(make_frame(tracked(3)), 2)
        assert lock is None
        source.clear_restriction.assert_called_once_with()
        source.restrict_to.assert_not_called()

    def test_unlocked_empty_issues_nothing(self, manager, source):
        assert manager.update(make_frame(), None) is None
        assert source.method_calls == []

    def test_events(self, manager, bus):
        locked, lost = Mock(), Mock()
        bus.subscribe(Events.SUBJECT_LOCKED, locked)
        bus.subscribe(Events.SUBJECT_LOST, lost)

        lock = manager.update(make_frame(tracked(4), frame_id=1), None)
        manager.update(make_frame(frame_id=2), lock)

        locked.assert_called_once_with(tracking_id=4, frame_id=1)
        lost.assert_called_once_with(tracking_id=4, frame_id=2)
        assert manager.acquisitions == 1
        assert manager.losses == 1

    def test_without_source(self, bus):
        manager = SubjectLockManager(source=None, event_bus=bus)
        assert manager.update(make_frame(tracked(1)), None) == 1
        assert manager.update(make_frame(), 1) is None
