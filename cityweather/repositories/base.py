from __future__ import annotations

from typing import Protocol

from cityweather.models.weather import City, HistoricalEntry, WeatherSnapshot


class WeatherStore(Protocol):
    async def get_cities(self) -> list[City]: ...

    async def save_city(self, city: City) -> list[City]: ...

    async def remove_city(self, city_name: str) -> list[City]: ...

    async def get_historical_data(self, city_name: str) -> list[HistoricalEntry]: ...

    async def save_weather_data(
        self, city_name: str, snapshot: WeatherSnapshot
    ) -> list[HistoricalEntry]: ...
