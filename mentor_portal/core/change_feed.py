"""
In-process change feed.

Services publish a ChangeEvent after each committed write; listeners subscribe
by table name plus equality filters on the row (e.g. ``mentor_id=7``).
Delivery is best effort: callbacks run synchronously on the publishing thread,
each matching subscriber sees an event at most once, and nothing is replayed
to subscribers that join later.
"""
import itertools
import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)


class ChangeType(str, Enum):
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


@dataclass
class ChangeEvent:
    table: str
    change_type: ChangeType
    record: Dict[str, Any]
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class Subscription:
    id: int
    table: str
    callback: Callable[[ChangeEvent], None]
    filters: Dict[str, Any] = field(default_factory=dict)
    change_types: tuple = ()

    def matches(self, event: ChangeEvent) -> bool:
        if event.table != self.table:
            return False
        if self.change_types and event.change_type not in self.change_types:
            return False
        return all(event.record.get(column) == value for column, value in self.filters.items())


class ChangeFeed:
    """Table-level pub/sub shared by every service in the process."""

    def __init__(self):
        self._subscriptions: Dict[int, Subscription] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def subscribe(
        self,
        table: str,
        callback: Callable[[ChangeEvent], None],
        change_types: tuple = (),
        **filters: Any,
    ) -> Subscription:
        with self._lock:
            subscription = Subscription(
                id=next(self._ids),
                table=table,
                callback=callback,
                filters=filters,
                change_types=tuple(change_types),
            )
            self._subscriptions[subscription.id] = subscription
        logger.debug(f"Subscription {subscription.id} on {table} with filters {filters}")
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        with self._lock:
            self._subscriptions.pop(subscription.id, None)

    def publish(self, table: str, change_type: ChangeType, record: Dict[str, Any]) -> int:
        """Delivers the event to every matching subscriber; returns how many were notified."""
        event = ChangeEvent(table=table, change_type=change_type, record=record)
        with self._lock:
            targets: List[Subscription] = [s for s in self._subscriptions.values() if s.matches(event)]

        delivered = 0
        for subscription in targets:
            try:
                subscription.callback(event)
                delivered += 1
            except Exception as e:
                # A broken listener must not fail the write that already committed
                logger.warning(f"Change listener {subscription.id} on {table} failed: {e}")
        return delivered

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)
