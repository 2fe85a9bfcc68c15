from .bus import RoleEventBus, Subscription
from .listeners import AccessListener, ActionListener, RoleEventListener
from .role_events import RoleEvent, RoleEventOverflowError

__all__ = [
    "AccessListener",
    "ActionListener",
    "RoleEvent",
    "RoleEventBus",
    "RoleEventListener",
    "RoleEventOverflowError",
    "Subscription",
]
