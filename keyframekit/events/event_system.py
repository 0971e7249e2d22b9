"""
Publish-subscribe event bus for animation lifecycle notifications.

The dispatcher publishes batch submission/completion/finalization events and
the backend factory publishes backend selection events. Subscribers are called
synchronously on the publishing thread in priority order.
"""
from collections import defaultdict, deque
from typing import Any, Callable, Deque, Dict, List, Optional
import threading

from keyframekit.logging.logger import get_logger
from keyframekit.events.event_types import Event, Subscription

logger = get_logger(__name__)


class EventSystem:
    """
    Event bus with priority-ordered subscriptions and a bounded history.

    Thread-safe: subscription bookkeeping is guarded by an RLock. Handlers are
    invoked after the subscriber list has been copied so a handler may
    subscribe or unsubscribe without deadlocking.
    """

    def __init__(self, max_history: int = 1000):
        self._subscriptions: Dict[str, List[Subscription]] = defaultdict(list)
        self._subscription_map: Dict[str, Subscription] = {}
        self._event_history: Deque[Event] = deque(maxlen=max_history)
        self._lock = threading.RLock()

        logger.debug("EventSystem initialized (history=%d)", max_history)

    def subscribe(
        self,
        event_type: str,
        callback: Callable[[Event], None],
        priority: int = 50,
        filter_fn: Optional[Callable[[Event], bool]] = None,
    ) -> str:
        """
        Subscribe to events of a specific type.

        Args:
            event_type: Type of event to subscribe to
            callback: Function to call when event is published
            priority: Priority (higher = called earlier), default 50
            filter_fn: Optional filter function

        Returns:
            str: Subscription ID for unsubscribing

        Raises:
            ValueError: If callback is not callable or event_type is empty
        """
        if not callable(callback):
            raise ValueError("Callback must be callable")

        if not isinstance(event_type, str) or not event_type.strip():
            raise ValueError("event_type must be a non-empty string")

        subscription = Subscription(callback, event_type, priority, filter_fn)

        with self._lock:
            self._subscriptions[event_type].append(subscription)
            self._subscription_map[subscription.id] = subscription
            self._subscriptions[event_type].sort()

        logger.debug("New subscription: %s for %s (priority=%d)", subscription.id, event_type, priority)
        return subscription.id

    def unsubscribe(self, subscription_id: str) -> None:
        """Remove a subscription by the ID returned from subscribe()."""
        with self._lock:
            subscription = self._subscription_map.pop(subscription_id, None)
            if subscription is None:
                logger.warning("Unsubscribe called with unknown id: %s", subscription_id)
                return

            subscription.active = False
            remaining = [
                s for s in self._subscriptions.get(subscription.event_type, [])
                if s.id != subscription_id
            ]
            if remaining:
                self._subscriptions[subscription.event_type] = remaining
            else:
                self._subscriptions.pop(subscription.event_type, None)

        logger.debug("Unsubscribed: %s", subscription_id)

    def publish(self, event_type: str, data: Any = None, source: Any = None) -> Event:
        """
        Publish an event to all subscribers.

        Handler exceptions are logged and do not stop delivery to the
        remaining subscribers.

        Returns:
            Event: The published event object
        """
        if not isinstance(event_type, str) or not event_type.strip():
            raise ValueError("event_type must be a non-empty string")

        event = Event(event_type, data, source)

        with self._lock:
            matching = list(self._subscriptions.get(event_type, []))
            self._event_history.append(event)

        if not matching:
            logger.debug("No subscribers for event: %s", event_type)
            return event

        logger.debug("Publishing event: %s, subscribers=%d", event_type, len(matching))
        for subscription in matching:
            if event.is_handled:
                break
            if not subscription.active:
                continue
            try:
                subscription(event)
            except Exception as e:
                logger.error("Error in event handler for %s: %s", event_type, e, exc_info=True)

        return event

    def get_event_history(self, limit: int = 100, event_type: Optional[str] = None) -> List[Event]:
        """Return up to `limit` recent events, optionally of one type."""
        with self._lock:
            events = list(self._event_history)
        if event_type is not None:
            events = [e for e in events if e.event_type == event_type]
        return events[-limit:]

    def clear(self) -> None:
        """Clear all subscriptions and history."""
        with self._lock:
            self._subscriptions.clear()
            self._subscription_map.clear()
            self._event_history.clear()

        logger.debug("EventSystem cleared")

    def get_subscription_count(self) -> int:
        """Get total number of active subscriptions."""
        with self._lock:
            return len(self._subscription_map)

    def get_subscriptions_for_type(self, event_type: str) -> int:
        """Get number of subscriptions for a specific event type."""
        with self._lock:
            return len(self._subscriptions.get(event_type, []))
