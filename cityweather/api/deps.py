from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from cityweather.clients.openweather import OpenWeatherClient
from cityweather.repositories.base import WeatherStore
from cityweather.services.weather import CityWeatherService


def get_weather_store(request: Request) -> WeatherStore:
    return request.app.state.weather_store


def get_openweather_client(request: Request) -> OpenWeatherClient:
    return request.app.state.openweather_client


def get_city_weather_service(
    store: Annotated[WeatherStore, Depends(get_weather_store)],
    client: Annotated[OpenWeatherClient, Depends(get_openweather_client)],
) -> CityWeatherService:
    return CityWeatherService(store=store, client=client)
