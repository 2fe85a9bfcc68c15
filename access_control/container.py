# access_control/container.py
"""
Explicit wiring of the engine.

One ``AccessControl`` instance owns the store client, the event bus and the
two invalidation listeners; everything that publishes or reads receives it
(or one of its services) explicitly instead of reaching for a global.
"""

from dataclasses import dataclass, field
import logging
from typing import Any, List

from .core.config import Settings
from .core.keys import KeySpace
from .events.bus import RoleEventBus
from .events.listeners import AccessListener, ActionListener, RoleEventListener
from .repositories.factory import Repositories, RepositoryFactory
from .services.access_list_service import AccessListService
from .services.authorization_service import AuthorizationService
from .services.role_service import RoleService
from .services.template_service import TemplateService
from .services.token_service import TokenService
from .utils.postman_parser import PostmanParser

logger = logging.getLogger(__name__)


@dataclass
class AccessControl:
    settings: Settings
    redis: Any
    repositories: Repositories
    event_bus: RoleEventBus
    access_lists: AccessListService
    roles: RoleService
    authorization: AuthorizationService
    tokens: TokenService
    templates: TemplateService
    listeners: List[RoleEventListener] = field(default_factory=list)

    @classmethod
    def build(cls, settings: Settings, redis: Any) -> "AccessControl":
        keys = KeySpace(settings.key_prefix)
        repositories = RepositoryFactory.create_all(redis, keys)
        event_bus = RoleEventBus(settings.role_event_queue_size)
        access_lists = AccessListService(
            repositories.templates,
            repositories.roles,
            repositories.assignments,
            repositories.cache,
        )
        return cls(
            settings=settings,
            redis=redis,
            repositories=repositories,
            event_bus=event_bus,
            access_lists=access_lists,
            roles=RoleService(repositories, event_bus),
            authorization=AuthorizationService(repositories, event_bus),
            tokens=TokenService(settings, repositories.sessions, repositories.users),
            templates=TemplateService(
                repositories.templates,
                settings.template_dir,
                PostmanParser(use_description=True),
            ),
            listeners=[
                AccessListener(event_bus, repositories.roles, access_lists),
                ActionListener(event_bus, repositories.roles, access_lists),
            ],
        )

    def start_listeners(self) -> None:
        for listener in self.listeners:
            if not listener.running:
                listener.start()

    async def stop_listeners(self) -> None:
        for listener in self.listeners:
            await listener.stop()

    async def wait_idle(self) -> None:
        """Wait until both listeners have handled every queued event."""
        for listener in self.listeners:
            await listener.wait_idle()
