"""
Repository layer for the access-control engine.

Every repository wraps the shared async Redis client and a KeySpace.
"""

from .access_cache_repository import AccessCacheRepository
from .assignment_repository import AssignmentRepository
from .base_repository import RedisRepository
from .factory import Repositories, RepositoryFactory
from .role_repository import RoleRepository
from .session_repository import SessionRepository
from .template_repository import TemplateRepository
from .user_repository import UserRepository

__all__ = [
    "AccessCacheRepository",
    "AssignmentRepository",
    "RedisRepository",
    "Repositories",
    "RepositoryFactory",
    "RoleRepository",
    "SessionRepository",
    "TemplateRepository",
    "UserRepository",
]
