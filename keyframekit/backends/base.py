"""Animation backend abstractions.

A backend is the sink the playback dispatcher hands composed animations to.
It groups submissions into transactions, anchors each transaction to its
media clock at commit, and calls the transaction's completion block once
every animation in it has ended. Concrete backends only provide the clock and
decide when to check for completion; the transaction bookkeeping and the
animation-tree evaluation live here.
"""
from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from keyframekit.animation.types import AnimationGroup, KeyframeAnimation, TimedAnimation
from keyframekit.animation.values import copy_value
from keyframekit.logging.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class BackendCapabilities:
    """Describes what a backend does with submitted animations."""

    name: str
    realtime: bool                       # Driven by a wall clock
    presents_frames: bool                # Emits presented values while playing


@dataclass(eq=False)
class AttachedAnimation:
    """An animation attached to a target, anchored at a media time."""

    target: Any
    animation: TimedAnimation
    start_time: float
    transaction_id: str


@dataclass(eq=False)
class Transaction:
    """Animations submitted together with one completion block."""

    id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    completion: Optional[Callable[[], None]] = None
    pending: List[Tuple[Any, TimedAnimation]] = field(default_factory=list)
    start_time: Optional[float] = None
    end_time: Optional[float] = None
    completed: bool = False

    @property
    def committed(self) -> bool:
        return self.start_time is not None


def _iteration_time(animation: TimedAnimation, local: float) -> float:
    """Map parent-relative time after begin_time to time inside one pass."""
    duration = animation.duration
    if duration <= 0:
        return 0.0
    period = duration * (2.0 if animation.autoreverses else 1.0)
    active = animation.active_duration()
    if local >= active:
        # Hold the state at the end of the final pass.
        position = active % period
        if position == 0.0:
            position = period
    else:
        position = local % period
    if animation.autoreverses and position > duration:
        return period - position
    return min(position, duration)


def _keyframe_value(animation: KeyframeAnimation, inner: float) -> Any:
    values = animation.values
    if len(values) == 1 or animation.duration <= 0:
        return copy_value(values[0])
    position = inner / animation.duration * (len(values) - 1)
    index = min(int(round(position)), len(values) - 1)
    return copy_value(values[index])


def evaluate_animation(animation: TimedAnimation, parent_time: float) -> List[Tuple[str, Any]]:
    """
    Evaluate an animation tree at a parent-relative time.

    Keyframe values are spread evenly over the animation's duration and the
    nearest sample is presented. Before begin_time nothing is presented;
    after the active duration the final state is held if fill_forward is set.

    Returns:
        (key_path, value) pairs in tree order; later pairs win for a key path
    """
    local = parent_time - animation.begin_time
    if local < 0:
        return []
    if local >= animation.active_duration() and not animation.fill_forward:
        return []

    inner = _iteration_time(animation, local)

    if isinstance(animation, KeyframeAnimation):
        return [(animation.key_path, _keyframe_value(animation, inner))]

    if isinstance(animation, AnimationGroup):
        presented: List[Tuple[str, Any]] = []
        for child in animation.animations:
            presented.extend(evaluate_animation(child, inner))
        return presented

    return []


class AnimationBackend(ABC):
    """Abstract animation backend (recording, Qt timer, ...)."""

    def __init__(self) -> None:
        self._capabilities: Optional[BackendCapabilities] = None
        self._open: Optional[Transaction] = None
        self._transactions: Dict[str, Transaction] = {}
        self._attached: List[AttachedAnimation] = []

    @abstractmethod
    def initialize(self) -> None:
        """Prepare clocks/timers. Called once by the registry."""

    @abstractmethod
    def shutdown(self) -> None:
        """Stop playback and drop every attached animation."""

    @abstractmethod
    def media_time(self) -> float:
        """Current media time in seconds."""

    @abstractmethod
    def _on_commit(self, transaction: Transaction) -> None:
        """Schedule completion checks for a freshly committed transaction."""

    @abstractmethod
    def _build_capabilities(self) -> BackendCapabilities:
        """Populate capability metadata for this backend."""

    def get_capabilities(self) -> BackendCapabilities:
        """Return backend capability metadata (cached after first build)."""
        if self._capabilities is None:
            self._capabilities = self._build_capabilities()
        return self._capabilities

    # Transactions

    def begin_transaction(self) -> str:
        """Open a transaction; returns its id."""
        if self._open is not None:
            raise RuntimeError(f"Transaction {self._open.id} is already open")
        self._open = Transaction()
        logger.debug("Transaction %s opened", self._open.id)
        return self._open.id

    def set_completion_block(self, completion: Callable[[], None]) -> None:
        """Set the open transaction's completion block."""
        self._require_open().completion = completion

    def add_animation(self, target: Any, animation: TimedAnimation) -> None:
        """Queue an animation on `target` in the open transaction."""
        self._require_open().pending.append((target, animation))

    def commit(self) -> str:
        """Anchor the open transaction at the current media time and start it."""
        transaction = self._require_open()
        self._open = None

        now = self.media_time()
        transaction.start_time = now
        longest = 0.0
        for target, animation in transaction.pending:
            self._attached.append(AttachedAnimation(target, animation, now, transaction.id))
            longest = max(longest, animation.end_time())
        transaction.end_time = now + longest
        self._transactions[transaction.id] = transaction

        logger.debug("Transaction %s committed: %d animation(s), ends at %.3f",
                     transaction.id, len(transaction.pending), transaction.end_time)
        self._on_commit(transaction)
        return transaction.id

    def _require_open(self) -> Transaction:
        if self._open is None:
            raise RuntimeError("No open transaction; call begin_transaction() first")
        return self._open

    # Attached animations

    def remove_all_animations(self, target: Any) -> int:
        """Detach every animation on `target`; returns how many were removed."""
        before = len(self._attached)
        self._attached = [a for a in self._attached if a.target is not target]
        removed = before - len(self._attached)
        if removed:
            logger.debug("Removed %d animation(s) from %r", removed, target)
        return removed

    def animations_for(self, target: Any) -> List[TimedAnimation]:
        """Animations currently attached to `target`, oldest first."""
        return [a.animation for a in self._attached if a.target is target]

    def presentation(self, target: Any, at: Optional[float] = None) -> Dict[str, Any]:
        """
        Values the backend presents for `target` at media time `at` (default now).

        Animations committed later override earlier ones on the same key path.
        """
        now = self.media_time() if at is None else at
        presented: Dict[str, Any] = {}
        for attached in self._attached:
            if attached.target is not target:
                continue
            for key_path, value in evaluate_animation(attached.animation, now - attached.start_time):
                presented[key_path] = value
        return presented

    def pending_transactions(self) -> List[str]:
        """Ids of committed transactions whose completion has not fired."""
        return [t.id for t in self._transactions.values() if not t.completed]

    # Completion

    def _fire_due(self, now: float) -> int:
        """Complete every transaction that has ended by `now`; returns the count."""
        due = [
            t for t in list(self._transactions.values())
            if not t.completed and t.end_time is not None and now >= t.end_time
        ]
        for transaction in due:
            self._complete(transaction)
        return len(due)

    def _complete(self, transaction: Transaction) -> None:
        if transaction.completed:
            return
        transaction.completed = True
        self._transactions.pop(transaction.id, None)
        logger.debug("Transaction %s completed", transaction.id)
        if transaction.completion is None:
            return
        try:
            transaction.completion()
        except Exception as e:
            logger.error("Error in completion block for transaction %s: %s",
                         transaction.id, e, exc_info=True)

    def _drop_all(self) -> None:
        self._open = None
        self._transactions.clear()
        self._attached.clear()
