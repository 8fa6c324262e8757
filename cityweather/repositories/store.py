from __future__ import annotations

import json
import logging
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

from cityweather.core.errors import StorageWriteError
from cityweather.db.base import KeyValueStorage
from cityweather.models.weather import City, HistoricalEntry, WeatherSnapshot, float_or_none
from cityweather.repositories.serial import KeySerializer
from cityweather.utils.formatters import parse_timestamp

logger = logging.getLogger(__name__)

CITIES_KEY = "saved_cities"
HISTORY_KEY = "weather_history"
MAX_HISTORY_ENTRIES = 50


def to_iso_timestamp(dt: datetime) -> str:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


class KeyValueWeatherStore:
    """City list and per-city weather history on top of a key-value storage.

    Each call reads the whole collection, changes it, and writes the whole
    collection back. Calls touching the same key are queued through a
    ``KeySerializer`` so overlapping read-modify-write cycles cannot lose
    updates. Cities and history live under separate keys and are never
    updated together.

    All histories share one document, so every ``save_weather_data`` rewrites
    every city's history.
    """

    def __init__(
        self,
        *,
        storage: KeyValueStorage,
        max_history_entries: int = MAX_HISTORY_ENTRIES,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._storage = storage
        self._max_history_entries = max(int(max_history_entries), 1)
        self._clock = clock
        self._serializer = KeySerializer()

    async def get_cities(self) -> list[City]:
        async with self._serializer.hold(CITIES_KEY):
            return await self._load_cities()

    async def save_city(self, city: City) -> list[City]:
        async with self._serializer.hold(CITIES_KEY):
            cities = await self._load_cities()
            if any(existing.same_place(city) for existing in cities):
                return cities

            updated = [*cities, city]
            await self._write(CITIES_KEY, [_encode_city(c) for c in updated], "Failed to save city")
            logger.info("Saved city %s, %s", city.name, city.country)
            return updated

    async def remove_city(self, city_name: str) -> list[City]:
        # Exact, case-sensitive match; save_city compares names ignoring case.
        async with self._serializer.hold(CITIES_KEY):
            cities = await self._load_cities()
            filtered = [c for c in cities if c.name != city_name]
            await self._write(
                CITIES_KEY, [_encode_city(c) for c in filtered], "Failed to remove city"
            )
            logger.info("Removed %d city record(s) named %s", len(cities) - len(filtered), city_name)
            return filtered

    async def get_historical_data(self, city_name: str) -> list[HistoricalEntry]:
        async with self._serializer.hold(HISTORY_KEY):
            history = await self._load_history()
            return _decode_entries(history.get(city_name))

    async def save_weather_data(
        self, city_name: str, snapshot: WeatherSnapshot
    ) -> list[HistoricalEntry]:
        async with self._serializer.hold(HISTORY_KEY):
            history = await self._load_history()
            existing = history.get(city_name)
            entries: list[Any] = existing if isinstance(existing, list) else []

            entry = HistoricalEntry(timestamp=to_iso_timestamp(self._clock()), data=snapshot)
            entries.insert(0, _encode_entry(entry))
            del entries[self._max_history_entries :]
            history[city_name] = entries

            await self._write(HISTORY_KEY, history, "Failed to save weather data")
            logger.debug("Stored weather entry for %s (%d kept)", city_name, len(entries))
            return _decode_entries(entries)

    async def _load_cities(self) -> list[City]:
        data = await self._read(CITIES_KEY)
        if not isinstance(data, list):
            return []
        cities: list[City] = []
        for item in data:
            city = _decode_city(item)
            if city is not None:
                cities.append(city)
        return cities

    async def _load_history(self) -> dict[str, Any]:
        data = await self._read(HISTORY_KEY)
        if not isinstance(data, dict):
            return {}
        return data

    async def _read(self, key: str) -> Any:
        try:
            raw = await self._storage.get(key)
        except Exception:
            logger.warning("Could not read %s, treating it as empty", key, exc_info=True)
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning("Stored %s is not valid JSON, treating it as empty", key)
            return None

    async def _write(self, key: str, data: Any, message: str) -> None:
        try:
            await self._storage.set(key, json.dumps(data))
        except Exception as e:
            logger.error("%s: %s", message, e)
            raise StorageWriteError(message) from e


def _encode_city(city: City) -> dict[str, Any]:
    data: dict[str, Any] = {"name": city.name, "country": city.country}
    if city.lat is not None:
        data["lat"] = city.lat
    if city.lon is not None:
        data["lon"] = city.lon
    return data


def _decode_city(item: Any) -> City | None:
    if not isinstance(item, dict):
        return None
    name = item.get("name")
    country = item.get("country")
    if not isinstance(name, str) or not isinstance(country, str):
        return None
    return City(
        name=name,
        country=country,
        lat=float_or_none(item.get("lat")),
        lon=float_or_none(item.get("lon")),
    )


def _encode_entry(entry: HistoricalEntry) -> dict[str, Any]:
    return {"timestamp": entry.timestamp, "data": entry.data.payload}


def _decode_entries(items: Any) -> list[HistoricalEntry]:
    if not isinstance(items, list):
        return []
    entries: list[HistoricalEntry] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        timestamp = item.get("timestamp")
        data = item.get("data")
        if not isinstance(timestamp, str) or not isinstance(data, dict):
            continue
        try:
            parse_timestamp(timestamp)
        except ValueError:
            logger.warning("Skipping history entry with bad timestamp %r", timestamp)
            continue
        entries.append(HistoricalEntry(timestamp=timestamp, data=WeatherSnapshot(data)))
    return entries
