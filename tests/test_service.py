from __future__ import annotations

import asyncio
import json
from datetime import datetime

import pytest

from cityweather.core.errors import CityValidationError, RecordNotFoundError, StorageWriteError
from cityweather.db.kv import InMemoryKeyValueStorage
from cityweather.models.weather import City, WeatherSnapshot
from cityweather.repositories.store import HISTORY_KEY, KeyValueWeatherStore
from cityweather.services.weather import CityWeatherService
from cityweather.utils.formatters import format_date
from tests.fakes import FailingWriteStorage, FakeOpenWeatherClient, make_payload


def _service(store, weather_client) -> CityWeatherService:
    return CityWeatherService(
        store=store, client=weather_client, clock=lambda: datetime(2024, 2, 29, 9, 5)
    )


def test_add_city_saves_city_then_history(
    store: KeyValueWeatherStore, weather_client: FakeOpenWeatherClient
) -> None:
    result = asyncio.run(_service(store, weather_client).add_city("london"))

    assert result.city == City("London", "GB")
    assert result.cities == [City("London", "GB")]
    assert [e.data.city_name for e in result.history] == ["London"]
    assert weather_client.requested == ["London"]


def test_add_city_validation_runs_first(
    store: KeyValueWeatherStore, weather_client: FakeOpenWeatherClient
) -> None:
    with pytest.raises(CityValidationError, match="cannot be empty"):
        asyncio.run(_service(store, weather_client).add_city("  "))
    assert weather_client.requested == []


def test_add_city_surfaces_write_failures(clock, weather_client: FakeOpenWeatherClient) -> None:
    store = KeyValueWeatherStore(storage=FailingWriteStorage(), clock=clock)

    with pytest.raises(StorageWriteError):
        asyncio.run(_service(store, weather_client).add_city("Paris"))


def test_refresh_formats_last_updated(
    store: KeyValueWeatherStore, weather_client: FakeOpenWeatherClient
) -> None:
    async def scenario():
        await store.save_city(City("Paris", "FR"))
        return await _service(store, weather_client).refresh_city("Paris")

    display = asyncio.run(scenario())

    assert display.last_updated == "29.02.2024. - 09:05"
    assert display.temperature == 20
    assert display.description == "Clear sky"


def test_display_defaults_for_sparse_payload(
    store: KeyValueWeatherStore, weather_client: FakeOpenWeatherClient
) -> None:
    service = _service(store, weather_client)
    display = service.display(WeatherSnapshot({"name": "Nowhere", "main": {}}), last_updated="")

    assert display.description == "N/A"
    assert display.icon_code == "01d"
    assert display.temperature is None
    assert display.humidity is None


def test_refresh_requires_saved_city(
    store: KeyValueWeatherStore, weather_client: FakeOpenWeatherClient
) -> None:
    async def scenario():
        with pytest.raises(RecordNotFoundError):
            await _service(store, weather_client).refresh_city("Paris")
        return await store.get_historical_data("Paris")

    assert asyncio.run(scenario()) == []
    assert weather_client.requested == []


def test_history_entry_shows_stored_snapshot(
    store: KeyValueWeatherStore, weather_client: FakeOpenWeatherClient
) -> None:
    service = _service(store, weather_client)

    async def scenario():
        added = await service.add_city("Paris")
        timestamp = added.history[0].timestamp
        return timestamp, await service.history_entry("Paris", timestamp)

    timestamp, display = asyncio.run(scenario())
    assert timestamp == "2024-01-01T12:00:00.000Z"
    assert display.is_historical is True
    assert display.temperature == 20
    assert display.last_updated == format_date(timestamp)


def test_history_entry_unknown_timestamp(
    store: KeyValueWeatherStore, weather_client: FakeOpenWeatherClient
) -> None:
    with pytest.raises(RecordNotFoundError):
        asyncio.run(_service(store, weather_client).history_entry("Paris", "2024-01-01T12:00:00.000Z"))


def test_history_items_format_weather_text(
    store: KeyValueWeatherStore, weather_client: FakeOpenWeatherClient
) -> None:
    service = _service(store, weather_client)

    async def scenario():
        await service.add_city("New York")
        return await service.history("New York")

    (item,) = asyncio.run(scenario())
    assert item.weather_text == "Broken clouds, 5°C"
    assert item.description == "Broken clouds"
    assert item.temperature == 5


def test_history_skips_entries_with_bad_timestamps(
    clock, weather_client: FakeOpenWeatherClient
) -> None:
    raw = json.dumps(
        {
            "Paris": [
                {"timestamp": "yesterday", "data": make_payload("Paris")},
                {"timestamp": "2024-01-01T12:00:00.000Z", "data": make_payload("Paris")},
            ]
        }
    )
    store = KeyValueWeatherStore(storage=InMemoryKeyValueStorage({HISTORY_KEY: raw}), clock=clock)

    items = asyncio.run(_service(store, weather_client).history("Paris"))
    assert [i.timestamp for i in items] == ["2024-01-01T12:00:00.000Z"]
    assert items[0].weather_text == "Clear sky, 20°C"
