"""Qt timer-driven animation backend.

Plays committed animations on a PreciseTimer. Every tick evaluates each
attached animation tree at the current media time, emits the presented
values, and fires the completion block of every transaction that has ended.
The timer only runs while a transaction is pending.
"""

from __future__ import annotations

import time
from typing import Any, Optional

from PySide6.QtCore import QCoreApplication, QObject, QTimer, Qt, Signal

from keyframekit.constants.timing import (
    PLAYBACK_MAX_DELTA_S, PLAYBACK_MAX_TICK_FPS, PLAYBACK_MIN_TICK_FPS,
    PLAYBACK_TICK_FPS, PERF_SLOW_TICK_THRESHOLD_MS,
)
from keyframekit.logging.logger import get_logger, is_perf_metrics_enabled, is_verbose_logging

from ..base import AnimationBackend, BackendCapabilities, Transaction, evaluate_animation

logger = get_logger(__name__)


class PlaybackSignals(QObject):
    """Signals emitted by QtAnimationBackend while playing."""

    # target, key_path, value
    frame_presented = Signal(object, str, object)
    # transaction id
    transaction_completed = Signal(str)


class QtAnimationBackend(AnimationBackend):
    """Backend that presents keyframes from a QTimer on the Qt event loop."""

    def __init__(self, tick_fps: int = PLAYBACK_TICK_FPS) -> None:
        super().__init__()

        self.signals = PlaybackSignals()
        self.frame_presented = self.signals.frame_presented
        self.transaction_completed = self.signals.transaction_completed

        self.fps = self._clamp_fps(tick_fps)
        self._epoch = time.perf_counter()
        self._timer: Optional[QTimer] = None
        self._last_tick: Optional[float] = None

        # `[PERF] [PLAYBACK]` summary for one continuous run of the timer
        self._profile_start_ts: Optional[float] = None
        self._profile_frame_count = 0
        self._profile_max_dt = 0.0

    @staticmethod
    def _clamp_fps(fps: Any) -> int:
        try:
            return max(PLAYBACK_MIN_TICK_FPS, min(PLAYBACK_MAX_TICK_FPS, int(fps)))
        except (TypeError, ValueError):
            return PLAYBACK_TICK_FPS

    def initialize(self) -> None:  # type: ignore[override]
        if QCoreApplication.instance() is None:
            raise RuntimeError("Qt playback requires a QCoreApplication")
        self._timer = QTimer(self.signals)
        self._timer.setTimerType(Qt.TimerType.PreciseTimer)
        self._timer.setInterval(max(1, int(1000 / self.fps)))
        self._timer.timeout.connect(self._tick)
        logger.info("Qt animation backend initialized (fps=%d)", self.fps)

    def shutdown(self) -> None:  # type: ignore[override]
        if self._timer is not None:
            self._timer.stop()
            self._timer.deleteLater()
            self._timer = None
        self._drop_all()
        logger.info("Shutting down Qt animation backend")

    def media_time(self) -> float:  # type: ignore[override]
        return time.perf_counter() - self._epoch

    def _build_capabilities(self) -> BackendCapabilities:  # type: ignore[override]
        return BackendCapabilities(name="qt", realtime=True, presents_frames=True)

    def set_tick_fps(self, fps: int) -> None:
        """Change the tick rate, restarting the timer if it is running."""
        new_fps = self._clamp_fps(fps)
        if new_fps == self.fps:
            return
        self.fps = new_fps
        if self._timer is None:
            return
        was_active = self._timer.isActive()
        if was_active:
            self._timer.stop()
        self._timer.setInterval(max(1, int(1000 / self.fps)))
        if was_active:
            self._timer.start()
        logger.info("Qt animation backend tick rate set to %d", self.fps)

    def is_running(self) -> bool:
        return self._timer is not None and self._timer.isActive()

    def _on_commit(self, transaction: Transaction) -> None:  # type: ignore[override]
        if self._timer is None:
            raise RuntimeError("QtAnimationBackend.initialize() was not called")
        if not self._timer.isActive():
            now = self.media_time()
            self._last_tick = now
            self._profile_start_ts = now
            self._profile_frame_count = 0
            self._profile_max_dt = 0.0
            self._timer.start()
            logger.debug("Playback timer started")

    def _tick(self) -> None:
        _tick_start = time.perf_counter()
        now = self.media_time()

        if self._last_tick is not None:
            dt = now - self._last_tick
            self._profile_max_dt = max(self._profile_max_dt, dt)
            if dt > PLAYBACK_MAX_DELTA_S and is_perf_metrics_enabled():
                logger.warning("[PERF] [PLAYBACK] Tick stall: %.1fms since last tick", dt * 1000.0)
        self._last_tick = now
        self._profile_frame_count += 1

        for attached in list(self._attached):
            for key_path, value in evaluate_animation(attached.animation, now - attached.start_time):
                self.frame_presented.emit(attached.target, key_path, value)

        due = [
            t.id for t in self._transactions.values()
            if not t.completed and t.end_time is not None and now >= t.end_time
        ]
        self._fire_due(now)
        for transaction_id in due:
            self.transaction_completed.emit(transaction_id)

        if not self._transactions and self._timer is not None:
            self._timer.stop()
            self._log_profile_summary(now)

        _elapsed_ms = (time.perf_counter() - _tick_start) * 1000.0
        if _elapsed_ms > PERF_SLOW_TICK_THRESHOLD_MS and is_perf_metrics_enabled():
            logger.warning("[PERF] [PLAYBACK] Slow tick: %.2fms (%d attached)",
                           _elapsed_ms, len(self._attached))
        elif is_verbose_logging():
            logger.debug("Tick at %.3f: %d attached", now, len(self._attached))

    def _log_profile_summary(self, now: float) -> None:
        if self._profile_start_ts is None or not is_perf_metrics_enabled():
            logger.debug("Playback timer stopped")
            return
        elapsed = max(now - self._profile_start_ts, 1e-9)
        logger.info(
            "[PERF] [PLAYBACK] Timer run: %.3fs, %d ticks, avg_fps=%.1f, max_dt=%.1fms",
            elapsed, self._profile_frame_count, self._profile_frame_count / elapsed,
            self._profile_max_dt * 1000.0,
        )
        self._profile_start_ts = None
