from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from cityweather.api import deps
from cityweather.core.config import Settings
from cityweather.db.kv import InMemoryKeyValueStorage
from cityweather.factory import create_app
from cityweather.repositories.store import KeyValueWeatherStore
from tests.fakes import FakeOpenWeatherClient, make_payload


class SteppingClock:
    """Returns a time one minute later on every call."""

    def __init__(self, start: datetime) -> None:
        self._next = start

    def __call__(self) -> datetime:
        now = self._next
        self._next = now + timedelta(minutes=1)
        return now


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        _env_file=None,
        env="test",
        debug=True,
        docs_enabled=False,
        cors_origins=["http://localhost"],
        trusted_hosts=["testserver", "localhost"],
        storage_backend="memory",
        max_history_entries=50,
        openweather_api_key="test-key",
        weather_timeout_seconds=1.0,
    )


@pytest.fixture()
def clock() -> SteppingClock:
    return SteppingClock(datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture()
def storage() -> InMemoryKeyValueStorage:
    return InMemoryKeyValueStorage()


@pytest.fixture()
def store(storage: InMemoryKeyValueStorage, clock: SteppingClock) -> KeyValueWeatherStore:
    return KeyValueWeatherStore(storage=storage, clock=clock)


@pytest.fixture()
def weather_client() -> FakeOpenWeatherClient:
    return FakeOpenWeatherClient(
        {
            "Paris": make_payload("Paris", "FR", temp=293.15, description="clear sky"),
            "London": make_payload("London", "GB", temp=283.15, description="light rain", icon="10d"),
            "New York": make_payload("New York", "US", temp=278.15, description="broken clouds", icon="04n"),
        }
    )


@pytest.fixture()
def client(
    settings: Settings,
    store: KeyValueWeatherStore,
    weather_client: FakeOpenWeatherClient,
) -> TestClient:
    app = create_app(settings)
    app.dependency_overrides[deps.get_weather_store] = lambda: store
    app.dependency_overrides[deps.get_openweather_client] = lambda: weather_client
    with TestClient(app) as client:
        yield client
