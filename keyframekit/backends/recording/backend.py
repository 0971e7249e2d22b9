"""Deterministic in-memory backend with a manual media clock."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List

from keyframekit.animation.types import TimedAnimation
from keyframekit.logging.logger import get_logger

from ..base import AnimationBackend, BackendCapabilities, Transaction

logger = get_logger(__name__)


@dataclass(frozen=True)
class Submission:
    """One add_animation() call as it was committed."""

    transaction_id: str
    target: Any
    animation: TimedAnimation
    media_time: float


class RecordingAnimationBackend(AnimationBackend):
    """
    Backend that records submissions and only moves time when told to.

    Completion blocks fire from advance(), never from commit(), so callers
    observe the same asynchronous completion as with a real backend. A
    zero-length transaction completes on the next advance(), including
    advance(0).
    """

    def __init__(self, start_time: float = 0.0) -> None:
        super().__init__()
        self._clock = float(start_time)
        self.submissions: List[Submission] = []
        self.removals: List[Any] = []

    def initialize(self) -> None:  # type: ignore[override]
        logger.info("Using recording animation backend (t=%.3f)", self._clock)

    def shutdown(self) -> None:  # type: ignore[override]
        self._drop_all()
        logger.info("Shutting down recording animation backend")

    def media_time(self) -> float:  # type: ignore[override]
        return self._clock

    def _on_commit(self, transaction: Transaction) -> None:  # type: ignore[override]
        for target, animation in transaction.pending:
            self.submissions.append(
                Submission(transaction.id, target, animation, transaction.start_time)
            )

    def _build_capabilities(self) -> BackendCapabilities:  # type: ignore[override]
        return BackendCapabilities(name="recording", realtime=False, presents_frames=False)

    def remove_all_animations(self, target: Any) -> int:  # type: ignore[override]
        self.removals.append(target)
        return super().remove_all_animations(target)

    def advance(self, seconds: float) -> int:
        """
        Move the media clock forward and fire completions that became due.

        Returns:
            Number of transactions completed by this call
        """
        if seconds < 0:
            raise ValueError(f"Cannot move the media clock backwards ({seconds})")
        self._clock += seconds
        return self._fire_due(self._clock)

    def run_until_idle(self) -> int:
        """Advance straight to the latest pending transaction end."""
        completed = 0
        while self._transactions:
            latest = max(t.end_time for t in self._transactions.values())
            completed += self.advance(max(0.0, latest - self._clock))
        return completed
