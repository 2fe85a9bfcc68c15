# access_control/events/role_events.py
"""Cache invalidation events raised by role and assignment mutations."""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from ..schemas.rbac import RoleEventType


@dataclass(frozen=True)
class RoleEvent:
    """
    A role mutation that may have made cached access lists stale.

    ``user_id`` names the user directly involved (role assignment changes);
    ``user_ids`` carries the users that held a role at the moment it was
    deleted, since the reverse index is gone by the time a listener runs.
    """

    role_id: str
    event_type: RoleEventType
    user_id: Optional[str] = None
    user_ids: Tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "role_id": self.role_id,
            "event_type": self.event_type.value,
            "user_id": self.user_id,
            "user_ids": list(self.user_ids),
        }


class RoleEventOverflowError(RuntimeError):
    """Reported on a subscription's error queue when an event had to be dropped."""

    def __init__(self, event: RoleEvent):
        self.event = event
        super().__init__(
            f"{event.event_type.value} queue full, dropped event for role {event.role_id}"
        )
