from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from cityweather.clients.openweather import OpenWeatherClient
from cityweather.core.errors import CityValidationError, RecordNotFoundError
from cityweather.models.weather import City, HistoricalEntry, WeatherSnapshot
from cityweather.repositories.base import WeatherStore
from cityweather.utils.formatters import capitalize_first, format_date, format_historical_date
from cityweather.utils.helpers import kelvin_to_celsius, validate_city_name

logger = logging.getLogger(__name__)

DEFAULT_ICON_CODE = "01d"


@dataclass(frozen=True)
class CityAddResult:
    city: City
    cities: list[City]
    history: list[HistoricalEntry]


@dataclass(frozen=True)
class WeatherDisplay:
    city: str
    temperature: int | None
    feels_like: int | None
    description: str
    humidity: float | None
    wind_speed: float | None
    pressure: float | None
    icon_code: str
    icon_url: str
    last_updated: str
    is_historical: bool = False


@dataclass(frozen=True)
class HistoryItem:
    timestamp: str
    date_text: str
    description: str
    weather_text: str
    temperature: int | None
    icon_code: str


class CityWeatherService:
    def __init__(
        self,
        *,
        store: WeatherStore,
        client: OpenWeatherClient,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._store = store
        self._client = client
        self._clock = clock

    async def list_cities(self) -> list[City]:
        return await self._store.get_cities()

    async def add_city(self, raw_name: str) -> CityAddResult:
        validation = validate_city_name(raw_name)
        if not validation.is_valid:
            raise CityValidationError(validation.error or "Invalid city name")

        snapshot = await self._client.get_current_weather(capitalize_first(raw_name.strip()))
        # The provider's spelling wins over what the user typed.
        city = City(name=snapshot.city_name, country=snapshot.country)

        cities = await self._store.save_city(city)
        history = await self._store.save_weather_data(city.name, snapshot)
        logger.info("Added %s, %s (%d saved cities)", city.name, city.country, len(cities))
        return CityAddResult(city=city, cities=cities, history=history)

    async def remove_city(self, city_name: str) -> list[City]:
        return await self._store.remove_city(city_name)

    async def refresh_city(self, city_name: str) -> WeatherDisplay:
        await self._saved_city(city_name)
        snapshot = await self._client.get_current_weather(city_name)
        await self._store.save_weather_data(city_name, snapshot)
        return self.display(snapshot, last_updated=format_date(self._clock()))

    async def history(self, city_name: str) -> list[HistoryItem]:
        entries = await self._store.get_historical_data(city_name)
        return [self._history_item(entry) for entry in entries]

    async def history_entry(self, city_name: str, timestamp: str) -> WeatherDisplay:
        for entry in await self._store.get_historical_data(city_name):
            if entry.timestamp == timestamp:
                return self.display(
                    entry.data, last_updated=format_date(entry.timestamp), is_historical=True
                )
        raise RecordNotFoundError(f"No weather entry for {city_name} at {timestamp}")

    def display(
        self, snapshot: WeatherSnapshot, *, last_updated: str, is_historical: bool = False
    ) -> WeatherDisplay:
        conditions = snapshot.conditions
        icon_code = (conditions[0].icon if conditions else "") or DEFAULT_ICON_CODE
        return WeatherDisplay(
            city=snapshot.city_name,
            temperature=_celsius_or_none(snapshot.temperature),
            feels_like=_celsius_or_none(snapshot.feels_like),
            description=_description(snapshot),
            humidity=snapshot.humidity,
            wind_speed=snapshot.wind_speed,
            pressure=snapshot.pressure,
            icon_code=icon_code,
            icon_url=self._client.icon_url(icon_code),
            last_updated=last_updated,
            is_historical=is_historical,
        )

    async def _saved_city(self, city_name: str) -> City:
        # Same exact-name match as removal.
        for city in await self._store.get_cities():
            if city.name == city_name:
                return city
        raise RecordNotFoundError(f"City {city_name} is not saved")

    @staticmethod
    def _history_item(entry: HistoricalEntry) -> HistoryItem:
        conditions = entry.data.conditions
        description = _description(entry.data)
        temperature = _celsius_or_none(entry.data.temperature)
        return HistoryItem(
            timestamp=entry.timestamp,
            date_text=format_historical_date(entry.timestamp),
            description=description,
            weather_text=description if temperature is None else f"{description}, {temperature}°C",
            temperature=temperature,
            icon_code=(conditions[0].icon if conditions else "") or DEFAULT_ICON_CODE,
        )


def _description(snapshot: WeatherSnapshot) -> str:
    conditions = snapshot.conditions
    if not conditions or not conditions[0].description:
        return "N/A"
    return capitalize_first(conditions[0].description)


def _celsius_or_none(kelvin: float | None) -> int | None:
    if kelvin is None:
        return None
    return kelvin_to_celsius(kelvin)
