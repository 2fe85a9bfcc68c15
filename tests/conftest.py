# tests/conftest.py
"""
Pytest configuration.

Sets a test environment BEFORE any package import so that Settings never
requires a real secret, and provides an in-memory store for every test.
"""

import os

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("CI", "1")

from typing import List

import pytest

from access_control.container import AccessControl
from access_control.core.config import Settings
from access_control.core.keys import KeySpace
from access_control.repositories.factory import Repositories, RepositoryFactory
from access_control.schemas.template import TemplateModule
from tests.helpers.fake_redis import FakeRedis
from tests.helpers.templates import BANK_TEMPLATE, CRM_TEMPLATE


@pytest.fixture
def settings() -> Settings:
    return Settings(
        environment="test",
        secret_key="test-secret-key-not-for-production",
        key_prefix="rbac",
        access_token_expire_minutes=600,
        refresh_token_expire_minutes=1200,
        role_event_queue_size=100,
    )


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def keys() -> KeySpace:
    return KeySpace("rbac")


@pytest.fixture
def repositories(fake_redis: FakeRedis, keys: KeySpace) -> Repositories:
    return RepositoryFactory.create_all(fake_redis, keys)


@pytest.fixture
def template_modules() -> List[TemplateModule]:
    return [
        TemplateModule.model_validate(BANK_TEMPLATE),
        TemplateModule.model_validate(CRM_TEMPLATE),
    ]


@pytest.fixture
def engine(settings: Settings, fake_redis: FakeRedis) -> AccessControl:
    """Fully wired engine on the fake store; listeners are not started."""
    return AccessControl.build(settings, fake_redis)
