"""
Playback dispatcher.

Composes a chain/animate call, submits every per-object timeline to the
backend inside one transaction with one completion block, and finalizes the
batch when the backend reports completion: snapshots are applied to the real
objects (unless the batch reverses), backend animations are removed from
every touched object, and the caller's completion callback runs exactly once.
"""
import uuid
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from keyframekit.animation.composer import AnimationComposer, ChainStep, Composition
from keyframekit.animation.errors import AnimationInFlightError
from keyframekit.animation.types import (
    AnimationDescriptor, CompletionCallback, Timeline, TimelineState,
)
from keyframekit.constants.timing import DEFAULT_REPEAT_COUNT
from keyframekit.events import EventSystem, EventType
from keyframekit.logging.logger import get_logger, set_perf_metrics_enabled
from keyframekit.settings.settings_manager import (
    OVERLAP_LAST_WRITER_WINS, OVERLAP_POLICIES, OVERLAP_REJECT, SettingsManager,
)

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from keyframekit.backends.base import AnimationBackend

logger = get_logger(__name__)


@dataclass(eq=False)
class PlaybackBatch:
    """Handle for one submitted chain/animate call."""
    composition: Composition
    completion: Optional[CompletionCallback] = None
    id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    transaction_id: Optional[str] = None
    media_start: Optional[float] = None
    state: TimelineState = TimelineState.PENDING
    completion_signals: int = 0

    @property
    def timelines(self) -> List[Timeline]:
        return self.composition.timelines

    @property
    def targets(self) -> List[Any]:
        return self.composition.targets

    @property
    def total_duration(self) -> float:
        return self.composition.total_duration

    @property
    def reverses(self) -> bool:
        return self.composition.reverses

    @property
    def repeat_count(self) -> float:
        return self.composition.repeat_count

    @property
    def is_finalized(self) -> bool:
        return self.state is TimelineState.FINALIZED


class PlaybackDispatcher:
    """
    Submits composed timelines to a backend and finalizes them.

    Args:
        backend: Animation backend receiving the transactions
        event_system: Optional bus for batch lifecycle events
        settings: Optional settings (reads 'playback.overlap_policy')
    """

    def __init__(self, backend: "AnimationBackend",
                 event_system: Optional[EventSystem] = None,
                 settings: Optional[SettingsManager] = None):
        self._backend = backend
        self._events = event_system
        self._settings = settings
        self._in_flight: Dict[int, PlaybackBatch] = {}

        if settings is not None:
            set_perf_metrics_enabled(settings.get_bool("logging.perf_metrics", True))
            settings.settings_changed.connect(self._on_setting_changed)

        logger.info("PlaybackDispatcher initialized (backend=%s, overlap=%s)",
                    type(backend).__name__, self.overlap_policy)

    def _on_setting_changed(self, key: str, value: Any) -> None:
        if key == "logging.perf_metrics":
            set_perf_metrics_enabled(SettingsManager.to_bool(value, True))
        elif key == "playback.tick_fps":
            set_tick_fps = getattr(self._backend, "set_tick_fps", None)
            if set_tick_fps is not None:
                set_tick_fps(value)
        self._publish(EventType.SETTINGS_CHANGED, key=key, value=value)

    @property
    def backend(self) -> "AnimationBackend":
        return self._backend

    @property
    def overlap_policy(self) -> str:
        if self._settings is None:
            return OVERLAP_LAST_WRITER_WINS
        policy = self._settings.get_str("playback.overlap_policy", OVERLAP_LAST_WRITER_WINS).lower()
        if policy not in OVERLAP_POLICIES:
            logger.warning("Unknown overlap policy '%s'; using %s", policy, OVERLAP_LAST_WRITER_WINS)
            return OVERLAP_LAST_WRITER_WINS
        return policy

    def in_flight_batch(self, target: Any) -> Optional[PlaybackBatch]:
        """The unfinished batch that last claimed `target`, if any."""
        return self._in_flight.get(id(target))

    def chain(self, *steps: ChainStep, reverses: bool = False,
              repeat_count: float = DEFAULT_REPEAT_COUNT,
              completion: Optional[CompletionCallback] = None) -> PlaybackBatch:
        """
        Play steps back to back.

        Each step is a descriptor or a sequence of descriptors played
        together. `reverses` and `repeat_count` apply to each object's whole
        timeline.
        """
        composition = AnimationComposer().compose_chain(steps, reverses, repeat_count)
        return self._submit(composition, completion)

    def animate(self, descriptor: AnimationDescriptor, reverses: bool = False,
                repeat_count: float = DEFAULT_REPEAT_COUNT,
                completion: Optional[CompletionCallback] = None) -> PlaybackBatch:
        """Play a single descriptor."""
        composition = AnimationComposer().compose_single(descriptor, reverses, repeat_count)
        return self._submit(composition, completion)

    def _check_overlap(self, batch: PlaybackBatch) -> None:
        policy = self.overlap_policy
        for target in batch.targets:
            owner = self._in_flight.get(id(target))
            if owner is None:
                continue
            if policy == OVERLAP_REJECT:
                raise AnimationInFlightError(target, owner.id)
            logger.warning("%r is still animating in batch %s; batch %s takes over",
                           target, owner.id, batch.id)
            self._publish(EventType.BATCH_OVERLAP, batch_id=batch.id,
                          previous_batch_id=owner.id, target=target)

    def _submit(self, composition: Composition,
                completion: Optional[CompletionCallback]) -> PlaybackBatch:
        batch = PlaybackBatch(composition=composition, completion=completion)
        self._check_overlap(batch)

        backend = self._backend
        backend.begin_transaction()
        backend.set_completion_block(lambda: self._finalize(batch))
        for timeline in batch.timelines:
            backend.add_animation(timeline.target, timeline.animation)
        batch.media_start = backend.media_time()
        batch.transaction_id = backend.commit()

        batch.state = TimelineState.PLAYING
        for timeline in batch.timelines:
            timeline.state = TimelineState.PLAYING
            self._in_flight[id(timeline.target)] = batch

        logger.debug("Batch %s submitted: %d object(s), %.3fs, reverses=%s, repeat=%s",
                     batch.id, len(batch.timelines), batch.total_duration,
                     batch.reverses, batch.repeat_count)
        self._publish(EventType.BATCH_SUBMITTED, batch_id=batch.id, targets=batch.targets,
                      total_duration=batch.total_duration, reverses=batch.reverses)
        return batch

    def _finalize(self, batch: PlaybackBatch) -> None:
        batch.completion_signals += 1
        if batch.state in (TimelineState.COMPLETED, TimelineState.FINALIZED):
            logger.warning("Ignoring repeated completion for batch %s (%d signals)",
                           batch.id, batch.completion_signals)
            return

        batch.state = TimelineState.COMPLETED
        for timeline in batch.timelines:
            timeline.state = TimelineState.COMPLETED
        self._publish(EventType.BATCH_COMPLETED, batch_id=batch.id, targets=batch.targets,
                      total_duration=batch.total_duration, reverses=batch.reverses)

        failure: Optional[Exception] = None
        for timeline in batch.timelines:
            try:
                if not batch.reverses:
                    timeline.snapshot.apply_to(timeline.target)
            except Exception as e:
                logger.error("Failed to apply end state to %r in batch %s: %s",
                             timeline.target, batch.id, e, exc_info=True)
                if failure is None:
                    failure = e
            finally:
                self._backend.remove_all_animations(timeline.target)
                timeline.state = TimelineState.FINALIZED
                if self._in_flight.get(id(timeline.target)) is batch:
                    del self._in_flight[id(timeline.target)]

        batch.state = TimelineState.FINALIZED
        logger.debug("Batch %s finalized (applied=%s)", batch.id, not batch.reverses)
        self._publish(EventType.BATCH_FINALIZED, batch_id=batch.id, targets=batch.targets,
                      total_duration=batch.total_duration, reverses=batch.reverses)

        if batch.completion is not None:
            batch.completion()

        # Every target is cleaned up and the caller notified before reporting
        if failure is not None:
            raise failure

    def _publish(self, event_type: str, **data) -> None:
        if self._events is None:
            return
        self._events.publish(event_type, data=data, source="keyframekit.dispatcher")


_default_dispatcher: Optional[PlaybackDispatcher] = None


def get_dispatcher() -> PlaybackDispatcher:
    """Return the module-level dispatcher, creating it from settings on first use."""
    global _default_dispatcher
    if _default_dispatcher is None:
        from keyframekit.backends import create_backend_from_settings

        settings = SettingsManager()
        events = EventSystem()
        result = create_backend_from_settings(settings, event_system=events)
        _default_dispatcher = PlaybackDispatcher(result.backend, events, settings)
    return _default_dispatcher


def set_dispatcher(dispatcher: Optional[PlaybackDispatcher]) -> None:
    """Replace (or with None, reset) the module-level dispatcher."""
    global _default_dispatcher
    _default_dispatcher = dispatcher


def chain(*steps: ChainStep, reverses: bool = False,
          repeat_count: float = DEFAULT_REPEAT_COUNT,
          completion: Optional[CompletionCallback] = None) -> PlaybackBatch:
    """Chain on the module-level dispatcher."""
    return get_dispatcher().chain(*steps, reverses=reverses,
                                  repeat_count=repeat_count, completion=completion)


def animate(descriptor: AnimationDescriptor, reverses: bool = False,
            repeat_count: float = DEFAULT_REPEAT_COUNT,
            completion: Optional[CompletionCallback] = None) -> PlaybackBatch:
    """Animate on the module-level dispatcher."""
    return get_dispatcher().animate(descriptor, reverses=reverses,
                                    repeat_count=repeat_count, completion=completion)
