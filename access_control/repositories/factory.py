# access_control/repositories/factory.py
"""
Repository Factory for the access-control engine

Provides centralized creation of repository instances so that every
repository shares the same client and key namespace.
"""

from dataclasses import dataclass
from typing import Any

from ..core.keys import KeySpace
from .access_cache_repository import AccessCacheRepository
from .assignment_repository import AssignmentRepository
from .role_repository import RoleRepository
from .session_repository import SessionRepository
from .template_repository import TemplateRepository
from .user_repository import UserRepository


@dataclass(frozen=True)
class Repositories:
    """Every repository bound to one client and one key namespace."""

    templates: TemplateRepository
    roles: RoleRepository
    assignments: AssignmentRepository
    users: UserRepository
    cache: AccessCacheRepository
    sessions: SessionRepository


class RepositoryFactory:
    """
    Factory class for creating repository instances.

    Centralizes repository creation to ensure consistent initialization
    and makes it easy to swap implementations if needed.
    """

    @staticmethod
    def create_template_repository(redis: Any, keys: KeySpace) -> TemplateRepository:
        return TemplateRepository(redis, keys)

    @staticmethod
    def create_role_repository(redis: Any, keys: KeySpace) -> RoleRepository:
        return RoleRepository(redis, keys)

    @staticmethod
    def create_assignment_repository(redis: Any, keys: KeySpace) -> AssignmentRepository:
        return AssignmentRepository(redis, keys)

    @staticmethod
    def create_user_repository(redis: Any, keys: KeySpace) -> UserRepository:
        return UserRepository(redis, keys)

    @staticmethod
    def create_access_cache_repository(redis: Any, keys: KeySpace) -> AccessCacheRepository:
        return AccessCacheRepository(redis, keys)

    @staticmethod
    def create_session_repository(redis: Any, keys: KeySpace) -> SessionRepository:
        return SessionRepository(redis, keys)

    @classmethod
    def create_all(cls, redis: Any, keys: KeySpace) -> Repositories:
        """Create the full repository set for one store client."""
        return Repositories(
            templates=cls.create_template_repository(redis, keys),
            roles=cls.create_role_repository(redis, keys),
            assignments=cls.create_assignment_repository(redis, keys),
            users=cls.create_user_repository(redis, keys),
            cache=cls.create_access_cache_repository(redis, keys),
            sessions=cls.create_session_repository(redis, keys),
        )
