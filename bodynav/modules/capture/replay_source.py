"""
Pose frame sources.

A source pushes PoseFrames to a callback once per sampling tick and accepts
two commands from the lock manager: ``restrict_to(tracking_id)`` and
``clear_restriction()``.

    ReplayPoseSource   - plays back a JSON Lines recording, one frame per line
    SequencePoseSource - plays back frames already in memory
"""

import json
import time
import logging
from pathlib import Path
from typing import Callable, Iterable, Iterator, Optional

from bodynav.core.errors import FrameFormatError
from bodynav.core.types import Body, BodyTrackingState, PoseFrame

logger = logging.getLogger(__name__)


class PoseSource:
    """Interface of the sensor collaborator."""

    def start(self, callback: Callable[[PoseFrame], None]):
        raise NotImplementedError

    def stop(self):
        raise NotImplementedError

    def restrict_to(self, tracking_id: int):
        raise NotImplementedError

    def clear_restriction(self):
        raise NotImplementedError


def read_frames(path) -> Iterator[PoseFrame]:
    """Yield frames from a JSON Lines recording, skipping undecodable lines."""
    # Invalid UTF-8 becomes U+FFFD, which the JSON decode then rejects
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        for line_no, line in enumerate(f, start=1):
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            try:
                yield PoseFrame.from_dict(json.loads(line))
            except (json.JSONDecodeError, FrameFormatError) as e:
                logger.warning("%s:%d skipped: %s", path, line_no, e)


def write_frames(path, frames: Iterable[PoseFrame]) -> int:
    """Write frames as a JSON Lines recording. Returns the frame count."""
    count = 0
    with open(path, "w", encoding="utf-8") as f:
        for frame in frames:
            f.write(json.dumps(frame.to_dict()))
            f.write("\n")
            count += 1
    return count


class _PlaybackSource(PoseSource):
    """Paced playback with the sensor's skeleton-choosing behaviour.

    While restricted to an id, every other tracked body is reported as
    PositionOnly, the same way the sensor stops skeleton tracking for
    bodies the application did not choose.
    """

    def __init__(self, fps: float = 30.0, loop: bool = False, seated_mode: bool = False):
        self._interval = 1.0 / fps if fps and fps > 0 else 0.0
        self._loop = loop
        self._seated_mode = seated_mode
        self._restricted_to: Optional[int] = None
        self._running = False
        self._frames_pushed = 0

    def _iter_frames(self) -> Iterable[PoseFrame]:
        raise NotImplementedError

    def restrict_to(self, tracking_id: int):
        self._restricted_to = tracking_id
        logger.debug("Skeleton delivery restricted to %d", tracking_id)

    def clear_restriction(self):
        if self._restricted_to is not None:
            logger.debug("Skeleton delivery restriction cleared")
        self._restricted_to = None

    @property
    def restricted_to(self) -> Optional[int]:
        return self._restricted_to

    def _apply_restriction(self, frame: PoseFrame) -> PoseFrame:
        if self._restricted_to is None:
            return frame
        bodies = []
        for body in frame.bodies:
            if body.tracking_id != self._restricted_to and body.is_tracked:
                body = Body(body.tracking_id, BodyTrackingState.POSITION_ONLY, body.joints)
            bodies.append(body)
        return PoseFrame(frame.frame_id, bodies, timestamp=frame.timestamp)

    def start(self, callback: Callable[[PoseFrame], None]):
        """Push every frame to ``callback`` on the calling thread until stopped."""
        self._running = True
        while self._running:
            pushed = 0
            for frame in self._iter_frames():
                if not self._running:
                    break
                tick = time.perf_counter()
                callback(self._apply_restriction(frame))
                self._frames_pushed += 1
                pushed += 1
                if self._interval:
                    remaining = self._interval - (time.perf_counter() - tick)
                    if remaining > 0:
                        time.sleep(remaining)
            if not self._loop:
                break
            if pushed == 0 and self._running:
                logger.warning("Nothing to play back, not looping an empty recording")
                break
        self._running = False
        logger.info("Playback finished after %d frames", self._frames_pushed)

    def stop(self):
        self._running = False

    @property
    def seated_mode(self) -> bool:
        return self._seated_mode

    @property
    def frames_pushed(self) -> int:
        return self._frames_pushed


class ReplayPoseSource(_PlaybackSource):
    """Replays a JSON Lines recording."""

    def __init__(self, path, fps: float = 30.0, loop: bool = False, seated_mode: bool = False):
        super().__init__(fps=fps, loop=loop, seated_mode=seated_mode)
        self._path = Path(path)
        if not self._path.is_file():
            raise FileNotFoundError(f"Recording not found: {self._path}")
        logger.info("ReplayPoseSource: %s (fps=%s, loop=%s, seated=%s)",
                    self._path, fps, loop, seated_mode)

    def _iter_frames(self):
        return read_frames(self._path)


class SequencePoseSource(_PlaybackSource):
    """Plays back an in-memory list of frames."""

    def __init__(self, frames: Iterable[PoseFrame], fps: float = 0.0, loop: bool = False):
        super().__init__(fps=fps, loop=loop)
        self._frames = list(frames)

    def _iter_frames(self):
        return iter(self._frames)
