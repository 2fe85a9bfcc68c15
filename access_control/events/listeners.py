# access_control/events/listeners.py
"""
Cache invalidation listeners.

One listener per event class consumes its subscription sequentially:
events are handled strictly in publish order, while the access and action
listeners run independently of each other. A failed recomputation is
logged and the loop moves on; the cache stays stale until the next event
for that user.
"""

from abc import ABC, abstractmethod
import asyncio
import logging
from typing import List, Optional

from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.role_repository import RoleRepository
from ..schemas.rbac import RoleEventType
from ..services.access_list_service import AccessListService
from .bus import RoleEventBus, Subscription
from .role_events import RoleEvent

logger = logging.getLogger(__name__)


class RoleEventListener(ABC):
    """Receive loop shared by the access and action listeners."""

    event_type: RoleEventType

    def __init__(self, bus: RoleEventBus, roles: RoleRepository, resolver: AccessListService):
        self.bus = bus
        self.roles = roles
        self.resolver = resolver
        self._subscription: Optional[Subscription] = None
        self._task: Optional["asyncio.Task[None]"] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> "asyncio.Task[None]":
        """Subscribe and spawn the receive loop; events published after this returns are seen."""
        if self.running:
            raise RuntimeError(f"{self.event_type.value} listener already running")
        subscription = self.bus.subscribe(self.event_type)
        self._subscription = subscription
        self._task = asyncio.create_task(
            self._run(subscription), name=f"role-events-{self.event_type.value}"
        )
        logger.info(f"[ROLE-EVENTS] {self.event_type.value} listener started")
        return self._task

    async def stop(self) -> None:
        subscription, task = self._subscription, self._task
        self._subscription = None
        self._task = None
        if subscription is not None:
            subscription.unsubscribe()
        if task is not None:
            await task
        logger.info(f"[ROLE-EVENTS] {self.event_type.value} listener stopped")

    async def wait_idle(self) -> None:
        """Block until every event queued so far has been handled."""
        if self._subscription is not None:
            await self._subscription.join()

    async def _run(self, subscription: Subscription) -> None:
        closed = False
        while not closed:
            event_get = asyncio.ensure_future(subscription.events.get())
            error_get = asyncio.ensure_future(subscription.errors.get())
            try:
                done, _pending = await asyncio.wait(
                    {event_get, error_get}, return_when=asyncio.FIRST_COMPLETED
                )
            except asyncio.CancelledError:
                event_get.cancel()
                error_get.cancel()
                raise

            if event_get in done:
                await self._process(subscription, event_get.result())
            else:
                event_get.cancel()

            # The error get may have completed while the event was being handled.
            if error_get.done():
                error = error_get.result()
                if error is None:
                    closed = True
                else:
                    logger.error(
                        f"[ROLE-EVENTS] {self.event_type.value} subscription error: {error}"
                    )
            else:
                error_get.cancel()

        self._drain(subscription)

    async def _process(self, subscription: Subscription, event: RoleEvent) -> None:
        try:
            await self.handle_event(event)
        except Exception as exc:
            logger.error(
                f"[ROLE-EVENTS] Failed to process {event.to_dict()}: {exc}",
                exc_info=True,
            )
            prometheus_metrics.record_role_event(self.event_type.value, "failed")
        finally:
            subscription.events.task_done()

    def _drain(self, subscription: Subscription) -> None:
        # Unblock anyone waiting in wait_idle() after the loop exits.
        while not subscription.events.empty():
            event = subscription.events.get_nowait()
            logger.warning(
                f"[ROLE-EVENTS] Listener stopped before handling event for role {event.role_id}"
            )
            prometheus_metrics.record_role_event(self.event_type.value, "dropped")
            subscription.events.task_done()

    async def targets(self, event: RoleEvent) -> List[str]:
        """Users whose cache this event may have made stale."""
        users = set(await self.roles.users_by_role(event.role_id))
        users.update(event.user_ids)
        if event.user_id:
            users.add(event.user_id)
        return sorted(users)

    async def handle_event(self, event: RoleEvent) -> None:
        targets = await self.targets(event)
        failures = 0
        for user_id in targets:
            try:
                if await self.roles.roles_by_user(user_id):
                    await self.refresh(user_id)
                else:
                    await self.teardown(user_id)
            except Exception as exc:
                failures += 1
                logger.error(
                    f"[ROLE-EVENTS] {self.event_type.value} refresh for user {user_id} (role {event.role_id}) failed: {exc}"
                )
        outcome = "failed" if failures else "processed"
        prometheus_metrics.record_role_event(self.event_type.value, outcome)
        logger.debug(
            f"[ROLE-EVENTS] {self.event_type.value} event for role {event.role_id}: {len(targets)} users, {failures} failures"
        )

    @abstractmethod
    async def refresh(self, user_id: str) -> None:
        ...

    @abstractmethod
    async def teardown(self, user_id: str) -> None:
        ...


class AccessListener(RoleEventListener):
    """Keeps the cached access trees current."""

    event_type = RoleEventType.ACCESS

    async def refresh(self, user_id: str) -> None:
        await self.resolver.resolve_access(user_id)

    async def teardown(self, user_id: str) -> None:
        await self.resolver.clear_access(user_id)
        logger.info(f"[ROLE-EVENTS] User {user_id} lost every role, access cache removed")


class ActionListener(RoleEventListener):
    """Keeps the cached action lists and the permission set current."""

    event_type = RoleEventType.ACTION

    async def refresh(self, user_id: str) -> None:
        await self.resolver.resolve_actions(user_id)

    async def teardown(self, user_id: str) -> None:
        await self.resolver.clear_actions(user_id)
        logger.info(f"[ROLE-EVENTS] User {user_id} lost every role, action cache removed")
