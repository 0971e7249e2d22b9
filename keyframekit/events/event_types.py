"""
Event type definitions for animation lifecycle notifications.
"""
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Optional


@dataclass
class Event:
    """Base event class."""
    event_type: str
    data: Any = None
    source: Any = None
    id: str = field(default_factory=lambda: uuid.uuid4().hex[:8])
    timestamp: float = field(default_factory=time.time)
    is_handled: bool = False

    def mark_handled(self):
        """Stop delivery to lower-priority subscribers."""
        self.is_handled = True


@dataclass
class Subscription:
    """Subscription to an event type."""
    callback: Callable[[Event], None]
    event_type: str
    priority: int = 0
    filter_fn: Optional[Callable[[Event], bool]] = None
    id: str = field(default_factory=lambda: uuid.uuid4().hex[:8])
    active: bool = True

    def __call__(self, event: Event) -> None:
        """Call the subscription callback if filter passes."""
        if self.filter_fn is None or self.filter_fn(event):
            self.callback(event)

    def __lt__(self, other: 'Subscription') -> bool:
        """Sort by priority (higher first)."""
        return self.priority > other.priority


class EventType:
    """Event type constants."""
    # Batch lifecycle (data: batch_id, targets, total_duration, reverses)
    BATCH_SUBMITTED = "animation.batch.submitted"
    BATCH_COMPLETED = "animation.batch.completed"
    BATCH_FINALIZED = "animation.batch.finalized"

    # Overlapping submissions on the same target
    BATCH_OVERLAP = "animation.batch.overlap"

    # Backend selection
    BACKEND_SELECTED = "animation.backend.selected"
    BACKEND_FALLBACK = "animation.backend.fallback"

    # Settings
    SETTINGS_CHANGED = "settings.changed"
