"""
Logging setup and the intent event log.
"""

import os
import time
import logging
import logging.handlers


def setup_logging(level="INFO", log_file=None, max_size_mb=10, backup_count=3):
    """Configure console (and optional rotating file) logging for the application."""
    console_format = "%(asctime)s  %(levelname)-5s  %(message)s"
    file_format = "%(asctime)s [%(levelname)-7s] %(name)-25s | %(message)s"
    date_format = "%H:%M:%S"

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    root_logger.handlers.clear()

    console = logging.StreamHandler()
    console.setLevel(getattr(logging, level.upper(), logging.INFO))
    console.setFormatter(logging.Formatter(console_format, datefmt=date_format))
    root_logger.addHandler(console)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_size_mb * 1024 * 1024,
            backupCount=backup_count,
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(file_format, datefmt=date_format))
        root_logger.addHandler(file_handler)

    return root_logger


class IntentLogger:
    """Logs intent changes and keeps them in memory for the session report.

    Subscribe ``on_intent`` to Events.INTENT_DETECTED. Repeats of the
    same intent on consecutive frames are counted, not re-logged.
    """

    def __init__(self, max_history: int = 1000):
        self.logger = logging.getLogger("intent_events")
        self._history = []
        self._max_history = max_history
        self._counts = {}
        self._current = None

    def on_intent(self, intent, label="", frame_id=None, **kwargs):
        self._counts[intent.value] = self._counts.get(intent.value, 0) + 1
        if intent is self._current:
            return
        self._current = intent
        self._history.append({
            "timestamp": time.time(),
            "intent": intent.value,
            "frame_id": frame_id,
        })
        if len(self._history) > self._max_history:
            self._history = self._history[-self._max_history:]
        self.logger.info("Intent: %-13s | frame %s", label or intent.value, frame_id)

    def on_flying_changed(self, flying, **kwargs):
        self.logger.info("Flying: %s", "ON" if flying else "OFF")

    def on_subject_locked(self, tracking_id, **kwargs):
        self.logger.info("Subject: %d", tracking_id)

    def on_subject_lost(self, tracking_id, **kwargs):
        self._current = None
        self.logger.info("Subject lost: %d", tracking_id)

    def get_history(self, last_n=None):
        if last_n:
            return self._history[-last_n:]
        return self._history.copy()

    @property
    def counts(self) -> dict:
        return dict(self._counts)

    def print_summary(self):
        self.logger.info("Intent frames: %s", ", ".join(
            f"{name}={count}" for name, count in sorted(self._counts.items())
        ) or "none")
