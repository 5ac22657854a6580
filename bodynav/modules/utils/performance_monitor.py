"""
Frame-rate and per-stage latency tracking with rolling windows.

Key delivery runs on the frame path, so the report flags frames whose
total latency exceeds the configured budget.
"""

import time
import threading
import logging
from collections import deque
from contextlib import contextmanager

logger = logging.getLogger(__name__)


class PerformanceMonitor:
    """Tracks FPS, per-stage latency and over-budget frames."""

    def __init__(self, window_size=100, frame_budget_ms=33.0):
        self._window_size = window_size
        self._frame_budget_ms = frame_budget_ms
        self._lock = threading.Lock()

        self._frame_times = deque(maxlen=window_size)
        self._last_frame_time = None

        self._stage_times = {}
        for name in ("tracking", "classification", "dispatch", "total"):
            self._stage_times[name] = deque(maxlen=window_size)

        self._frame_count = 0
        self._slow_frames = 0
        self._start_time = time.time()

    @contextmanager
    def measure(self, stage_name: str):
        """Context manager to measure a pipeline stage's duration."""
        start = time.perf_counter()
        try:
            yield
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            with self._lock:
                if stage_name not in self._stage_times:
                    self._stage_times[stage_name] = deque(maxlen=self._window_size)
                self._stage_times[stage_name].append(elapsed_ms)
                if stage_name == "total" and elapsed_ms > self._frame_budget_ms:
                    self._slow_frames += 1
            if stage_name == "total" and elapsed_ms > self._frame_budget_ms:
                logger.debug("Frame over budget: %.1fms", elapsed_ms)

    def tick(self):
        """Call once per frame to track FPS."""
        now = time.perf_counter()
        with self._lock:
            if self._last_frame_time is not None:
                self._frame_times.append(now - self._last_frame_time)
            self._last_frame_time = now
            self._frame_count += 1

    @property
    def fps(self) -> float:
        """Current frames per second (rolling average)."""
        with self._lock:
            if len(self._frame_times) < 2:
                return 0.0
            avg_interval = sum(self._frame_times) / len(self._frame_times)
            return 1.0 / avg_interval if avg_interval > 0 else 0.0

    def get_stage_latency(self, stage_name: str) -> float:
        """Average latency for a stage in ms."""
        with self._lock:
            times = self._stage_times.get(stage_name, [])
            if not times:
                return 0.0
            return sum(times) / len(times)

    def get_all_latencies(self) -> dict:
        with self._lock:
            return {
                name: (sum(times) / len(times) if times else 0.0)
                for name, times in self._stage_times.items()
            }

    def get_report(self) -> dict:
        uptime = time.time() - self._start_time
        latencies = self.get_all_latencies()
        return {
            "fps": round(self.fps, 1),
            "total_frames": self._frame_count,
            "slow_frames": self._slow_frames,
            "uptime_seconds": round(uptime, 1),
            "latencies_ms": {k: round(v, 2) for k, v in latencies.items()},
        }

    def print_report(self):
        report = self.get_report()
        logger.info("=" * 60)
        logger.info("PERFORMANCE REPORT")
        logger.info("=" * 60)
        logger.info("FPS:            %.1f", report["fps"])
        logger.info("Total Frames:   %d", report["total_frames"])
        logger.info("Slow Frames:    %d (> %.0f ms)", report["slow_frames"], self._frame_budget_ms)
        logger.info("Uptime:         %.1fs", report["uptime_seconds"])
        logger.info("-" * 40)
        logger.info("Stage Latencies (avg ms):")
        for stage, latency in report["latencies_ms"].items():
            logger.info("  %-18s %7.2f ms", stage, latency)
        logger.info("=" * 60)

    def reset(self):
        with self._lock:
            self._frame_times.clear()
            self._last_frame_time = None
            for times in self._stage_times.values():
                times.clear()
            self._frame_count = 0
            self._slow_frames = 0
            self._start_time = time.time()
