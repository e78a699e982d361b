from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from udf_proxy.config import Settings
from udf_proxy.main import create_app

from fakes import UPSTREAM, FakeSession


@pytest.fixture
def settings() -> Settings:
    return Settings(api_base_url=UPSTREAM, upstream_timeout=2.5)


@pytest.fixture
def upstream() -> FakeSession:
    return FakeSession()


@pytest.fixture
def client(settings, upstream) -> TestClient:
    return TestClient(create_app(settings, session=upstream))
