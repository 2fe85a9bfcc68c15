"""Fixtures for route tests: a live app on the fake store."""

import json
from pathlib import Path
from typing import Iterator

from fastapi.testclient import TestClient
import pytest

from access_control.core.config import Settings
from access_control.main import create_app
from tests.helpers.fake_redis import FakeRedis
from tests.helpers.templates import BANK_TEMPLATE, CRM_TEMPLATE


@pytest.fixture
def app_settings(settings: Settings, tmp_path: Path) -> Settings:
    (tmp_path / "bank.json").write_text(json.dumps(BANK_TEMPLATE), encoding="utf-8")
    (tmp_path / "crm.json").write_text(json.dumps(CRM_TEMPLATE), encoding="utf-8")
    return settings.model_copy(update={"template_dir": tmp_path})


@pytest.fixture
def client(app_settings: Settings, fake_redis: FakeRedis) -> Iterator[TestClient]:
    """Client whose lifespan seeds the template and runs the listeners."""
    app = create_app(app_settings, redis_client=fake_redis)
    with TestClient(app) as test_client:
        yield test_client

