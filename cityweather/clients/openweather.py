from __future__ import annotations

import logging
from typing import Any

import httpx

from cityweather.core.errors import WeatherErrorKind, WeatherProviderError
from cityweather.models.weather import WeatherSnapshot

logger = logging.getLogger(__name__)

OPENWEATHER_BASE_URL = "https://api.openweathermap.org/data/2.5"
OPENWEATHER_ICON_URL = "https://openweathermap.org/img/w"

_STATUS_KINDS: dict[int, WeatherErrorKind] = {
    404: WeatherErrorKind.NOT_FOUND,
    401: WeatherErrorKind.UNAUTHORIZED,
    429: WeatherErrorKind.RATE_LIMITED,
}


def weather_icon_url(icon_code: str, base_url: str = OPENWEATHER_ICON_URL) -> str:
    return f"{base_url.rstrip('/')}/{icon_code}.png"


class OpenWeatherClient:
    def __init__(
        self,
        *,
        api_key: str,
        timeout_seconds: float,
        base_url: str = OPENWEATHER_BASE_URL,
        icon_url: str = OPENWEATHER_ICON_URL,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._icon_url = icon_url
        self._client = httpx.AsyncClient(
            timeout=timeout_seconds,
            headers={"Accept": "application/json"},
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    def icon_url(self, icon_code: str) -> str:
        return weather_icon_url(icon_code, self._icon_url)

    async def get_current_weather(self, city_name: str) -> WeatherSnapshot:
        try:
            resp = await self._client.get(
                f"{self._base_url}/weather",
                params={"q": city_name, "appid": self._api_key},
            )
        except httpx.TransportError as e:
            logger.warning("Weather request for %r failed: %s", city_name, e)
            raise WeatherProviderError(WeatherErrorKind.NETWORK) from e

        if resp.is_error:
            kind = _STATUS_KINDS.get(resp.status_code, WeatherErrorKind.GENERIC)
            logger.warning(
                "Weather request for %r returned HTTP %s", city_name, resp.status_code
            )
            raise WeatherProviderError(kind)

        try:
            payload = resp.json()
        except ValueError as e:
            raise WeatherProviderError(WeatherErrorKind.GENERIC) from e

        self._check_payload(payload)
        return WeatherSnapshot(payload)

    @staticmethod
    def _check_payload(payload: Any) -> None:
        if not isinstance(payload, dict):
            raise WeatherProviderError(WeatherErrorKind.GENERIC)
        name = payload.get("name")
        sys_block = payload.get("sys")
        if not isinstance(name, str) or not name:
            raise WeatherProviderError(WeatherErrorKind.GENERIC, "Weather response has no city name")
        if not isinstance(sys_block, dict) or not isinstance(sys_block.get("country"), str):
            raise WeatherProviderError(WeatherErrorKind.GENERIC, "Weather response has no country")
        if not isinstance(payload.get("main"), dict):
            raise WeatherProviderError(WeatherErrorKind.GENERIC, "Weather response has no 'main' block")
