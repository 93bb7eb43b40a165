"""Pytest configuration and fixtures."""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from url_cleaner import create_app
from url_cleaner.config import Settings
from url_cleaner.services import URLCleanerService
from url_cleaner.storage import InMemoryURLStore, SQLiteURLStore


class FakeClock:
    """Clock that advances one second per reading."""

    def __init__(self, start=None, step=timedelta(seconds=1)):
        self.current = start or datetime(2024, 1, 1, tzinfo=timezone.utc)
        self.step = step

    def __call__(self):
        value = self.current
        self.current = self.current + self.step
        return value


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture(params=["memory", "sqlite"])
def store(request, clock, tmp_path):
    """Every store backend, each with a deterministic clock."""
    if request.param == "sqlite":
        backend = SQLiteURLStore(tmp_path / "urls.db", clock=clock)
        yield backend
        backend.close()
    else:
        yield InMemoryURLStore(clock=clock)


@pytest.fixture
def settings():
    return Settings(default_page_size=50, max_page_size=10000, export_page_size=10000)


@pytest.fixture
def service(store, settings):
    return URLCleanerService(store, settings)


@pytest.fixture
def client(store, settings):
    app = create_app(settings=settings, store=store)
    with TestClient(app) as test_client:
        yield test_client
