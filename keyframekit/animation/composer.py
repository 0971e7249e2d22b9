"""
Animation composer.

Turns the descriptors of one chain/animate call into one timeline per target
object. Segments on the same object play back to back; a multi-descriptor
step plays its members together. The composer owns the call's snapshot map,
so every descriptor touching an object reads and advances the same snapshot.

Nothing here talks to a backend: every composition error surfaces before the
dispatcher opens a transaction.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence, Union

from keyframekit.animation.errors import GroupDurationMismatchError
from keyframekit.animation.sampler import build_animation
from keyframekit.animation.snapshot import ObjectStateSnapshot
from keyframekit.animation.types import (
    AnimationDescriptor, AnimationGroup, TimedAnimation, Timeline,
)
from keyframekit.logging.logger import get_logger

logger = get_logger(__name__)

ChainStep = Union[AnimationDescriptor, Sequence[AnimationDescriptor]]


@dataclass
class Composition:
    """Result of composing one call: a timeline per target."""
    timelines: List[Timeline] = field(default_factory=list)
    reverses: bool = False
    repeat_count: float = 1.0

    @property
    def total_duration(self) -> float:
        """Time until the last timeline stops changing, repeats included."""
        if not self.timelines:
            return 0.0
        return max(t.animation.end_time() for t in self.timelines)

    @property
    def targets(self) -> List[Any]:
        return [t.target for t in self.timelines]


def _normalize_step(step: ChainStep, index: int) -> List[AnimationDescriptor]:
    if isinstance(step, AnimationDescriptor):
        return [step]
    try:
        members = list(step)
    except TypeError:
        raise ValueError(
            f"Chain step {index} is not a descriptor or a sequence of descriptors"
        ) from None
    if not members:
        raise ValueError(f"Chain step {index} is empty")
    for member in members:
        if not isinstance(member, AnimationDescriptor):
            raise ValueError(
                f"Chain step {index} contains {type(member).__name__}, expected AnimationDescriptor"
            )
    return members


def _check_repeat(repeat_count: float) -> float:
    if repeat_count <= 0:
        raise ValueError(f"repeat_count must be > 0 (got {repeat_count})")
    return float(repeat_count)


class AnimationComposer:
    """
    Builds per-object timelines for a single call.

    Create one composer per chain/animate call; it is not reusable across
    calls because its snapshots describe that call's end state.
    """

    def __init__(self):
        self._snapshots: Dict[int, ObjectStateSnapshot] = {}
        self._targets: Dict[int, Any] = {}

    def snapshot_for(self, target: Any) -> ObjectStateSnapshot:
        """Return the call's snapshot for `target`, capturing it on first use."""
        key = id(target)
        snapshot = self._snapshots.get(key)
        if snapshot is None:
            snapshot = ObjectStateSnapshot.capture(target)
            self._snapshots[key] = snapshot
            self._targets[key] = target
        return snapshot

    @property
    def snapshots(self) -> Dict[int, ObjectStateSnapshot]:
        return dict(self._snapshots)

    def compose_chain(self, steps: Sequence[ChainStep], reverses: bool = False,
                      repeat_count: float = 1.0) -> Composition:
        """
        Compose sequential steps.

        A single descriptor becomes one segment starting at the running total
        plus its delay; the total then moves to that segment's end. A
        sequence of descriptors becomes one group per object, all starting at
        the running total plus the member's delay, and the total advances by
        the shared delay + duration. Each object's segments are wrapped in a
        top-level group spanning the whole chain, which carries
        `reverses` and `repeat_count`.

        Raises:
            ValueError: Empty step or non-positive repeat_count
            GroupDurationMismatchError: Group members disagree on delay + duration
        """
        repeat_count = _check_repeat(repeat_count)
        normalized = [_normalize_step(step, i) for i, step in enumerate(steps)]

        segments: Dict[int, List[TimedAnimation]] = {}
        cumulative = 0.0

        for index, members in enumerate(normalized):
            if len(members) == 1:
                desc = members[0]
                anim = build_animation(desc, self.snapshot_for(desc.target), set_delay=True)
                anim.begin_time += cumulative
                cumulative = anim.begin_time + anim.duration
                segments.setdefault(id(desc.target), []).append(anim)
                logger.debug("Chain step %d: %s at %.3fs for %.3fs",
                             index, desc.property.name, anim.begin_time, anim.duration)
                continue

            segment_duration = members[0].segment_duration
            for member_index, desc in enumerate(members):
                if desc.segment_duration != segment_duration:
                    raise GroupDurationMismatchError(
                        segment_duration, desc.segment_duration, member_index
                    )

            groups: Dict[int, AnimationGroup] = {}
            for desc in members:
                key = id(desc.target)
                group = groups.get(key)
                if group is None:
                    group = AnimationGroup(
                        duration=desc.duration,
                        begin_time=cumulative + desc.delay,
                    )
                    groups[key] = group
                group.animations.append(
                    build_animation(desc, self.snapshot_for(desc.target), set_delay=False)
                )

            for key, group in groups.items():
                segments.setdefault(key, []).append(group)

            logger.debug("Chain step %d: group of %d across %d object(s) at %.3fs",
                         index, len(members), len(groups), cumulative)
            cumulative += segment_duration

        composition = Composition(reverses=reverses, repeat_count=repeat_count)
        for key, animations in segments.items():
            chained = AnimationGroup(
                duration=cumulative,
                begin_time=0.0,
                repeat_count=repeat_count,
                autoreverses=reverses,
                animations=animations,
            )
            composition.timelines.append(
                Timeline(self._targets[key], self._snapshots[key], chained)
            )

        logger.debug("Composed chain: %d step(s), %d object(s), %.3fs",
                     len(normalized), len(composition.timelines), cumulative)
        return composition

    def compose_single(self, desc: AnimationDescriptor, reverses: bool = False,
                       repeat_count: float = 1.0) -> Composition:
        """
        Compose one descriptor.

        The animation begins after the descriptor's delay and carries
        `reverses` and `repeat_count` itself. FRAME becomes an origin + size
        group.
        """
        repeat_count = _check_repeat(repeat_count)
        if not isinstance(desc, AnimationDescriptor):
            raise ValueError(f"Expected AnimationDescriptor, got {type(desc).__name__}")

        snapshot = self.snapshot_for(desc.target)
        anim = build_animation(desc, snapshot, set_delay=True)
        anim.autoreverses = reverses
        anim.repeat_count = repeat_count

        composition = Composition(reverses=reverses, repeat_count=repeat_count)
        composition.timelines.append(Timeline(desc.target, snapshot, anim))
        logger.debug("Composed single %s: begin %.3fs, duration %.3fs",
                     desc.property.name, anim.begin_time, anim.duration)
        return composition
