# access_control/events/bus.py
"""
In-process publish/subscribe channel for cache invalidation events.

There is exactly one logical listener per event class, so the bus keeps at
most one active subscription per class and delivers each event to that one
subscriber. Delivery is best-effort: an event published while no subscriber
is registered, or while the subscriber's bounded queue is full, is dropped.
The assignment store was already written by the mutation, so only the
derived cache can end up stale.

The bus is not thread-safe: publish and subscribe from the event loop that
runs the listeners.
"""

import asyncio
import logging
from typing import Dict, Iterable, Optional

from ..monitoring.prometheus_metrics import prometheus_metrics
from ..schemas.rbac import RoleEventType
from .role_events import RoleEvent, RoleEventOverflowError

logger = logging.getLogger(__name__)

# Errors beyond this backlog are only logged; the listener already knows it is behind.
MAX_PENDING_ERRORS = 100


class Subscription:
    """One subscriber's event queue and error queue."""

    def __init__(self, bus: "RoleEventBus", event_type: RoleEventType, max_queue_size: int):
        self._bus = bus
        self.event_type = event_type
        self.events: "asyncio.Queue[RoleEvent]" = asyncio.Queue(maxsize=max_queue_size)
        # ``None`` on this queue means the subscription was closed.
        self.errors: "asyncio.Queue[Optional[BaseException]]" = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def unsubscribe(self) -> None:
        """Detach from the bus. Only the first call has an effect."""
        if self._closed:
            return
        self._closed = True
        self._bus._remove(self)
        self.errors.put_nowait(None)

    def report_error(self, exc: BaseException) -> None:
        if self._closed:
            return
        if self.errors.qsize() >= MAX_PENDING_ERRORS:
            logger.warning(f"[ROLE-EVENTS] Error backlog full for {self.event_type.value}: {exc}")
            return
        self.errors.put_nowait(exc)

    async def join(self) -> None:
        """Wait until every queued event has been marked done."""
        await self.events.join()


class RoleEventBus:
    """Routes role events to the single subscriber of their event class."""

    def __init__(self, max_queue_size: int = 1000):
        if max_queue_size <= 0:
            raise ValueError("max_queue_size must be positive")
        self.max_queue_size = max_queue_size
        self._subscriptions: Dict[RoleEventType, Subscription] = {}

    def subscribe(self, event_type: RoleEventType) -> Subscription:
        """
        Register the subscriber for an event class.

        A newer subscription replaces (and closes) the previous one.
        """
        existing = self._subscriptions.get(event_type)
        if existing is not None:
            logger.warning(
                f"[ROLE-EVENTS] Replacing existing {event_type.value} subscription"
            )
            existing.unsubscribe()
        subscription = Subscription(self, event_type, self.max_queue_size)
        self._subscriptions[event_type] = subscription
        logger.info(f"[ROLE-EVENTS] Subscribed {event_type.value} listener")
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        subscription.unsubscribe()

    def subscription(self, event_type: RoleEventType) -> Optional[Subscription]:
        return self._subscriptions.get(event_type)

    def _remove(self, subscription: Subscription) -> None:
        if self._subscriptions.get(subscription.event_type) is subscription:
            del self._subscriptions[subscription.event_type]

    def publish(self, event: RoleEvent) -> bool:
        """
        Hand an event to its subscriber without waiting.

        Returns True when the event was queued, False when it was dropped.
        """
        subscription = self._subscriptions.get(event.event_type)
        if subscription is None or subscription.closed:
            logger.debug(
                f"[ROLE-EVENTS] No {event.event_type.value} subscriber, dropping event for role {event.role_id}"
            )
            prometheus_metrics.record_role_event(event.event_type.value, "dropped")
            return False
        try:
            subscription.events.put_nowait(event)
        except asyncio.QueueFull:
            logger.warning(
                f"[ROLE-EVENTS] {event.event_type.value} queue full, dropping event for role {event.role_id}"
            )
            prometheus_metrics.record_role_event(event.event_type.value, "dropped")
            subscription.report_error(RoleEventOverflowError(event))
            return False
        return True

    def publish_role_change(
        self,
        role_id: str,
        event_types: Iterable[RoleEventType],
        *,
        user_id: Optional[str] = None,
        user_ids: Iterable[str] = (),
    ) -> int:
        """Publish one event per affected event class; return how many were queued."""
        captured = tuple(user_ids)
        queued = 0
        for event_type in event_types:
            event = RoleEvent(
                role_id=role_id, event_type=event_type, user_id=user_id, user_ids=captured
            )
            if self.publish(event):
                queued += 1
        return queued
