from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


@dataclass(frozen=True)
class City:
    name: str
    country: str
    lat: float | None = None
    lon: float | None = None

    def same_place(self, other: City) -> bool:
        return self.name.lower() == other.name.lower() and self.country == other.country


@dataclass(frozen=True)
class WeatherCondition:
    id: int | None
    main: str
    description: str
    icon: str


@dataclass(frozen=True)
class WeatherSnapshot:
    """Current-conditions payload from the provider, kept exactly as received.

    Only ``payload`` is persisted; the properties below are read-only views
    over the OpenWeatherMap shape (``main``, ``wind``, ``weather``, ``sys``).
    """

    payload: dict[str, Any] = field(default_factory=dict)

    @property
    def city_name(self) -> str:
        return str(self.payload.get("name", ""))

    @property
    def country(self) -> str:
        return str(_section(self.payload, "sys").get("country", ""))

    @property
    def temperature(self) -> float | None:
        return float_or_none(_section(self.payload, "main").get("temp"))

    @property
    def feels_like(self) -> float | None:
        return float_or_none(_section(self.payload, "main").get("feels_like"))

    @property
    def humidity(self) -> float | None:
        return float_or_none(_section(self.payload, "main").get("humidity"))

    @property
    def pressure(self) -> float | None:
        return float_or_none(_section(self.payload, "main").get("pressure"))

    @property
    def wind_speed(self) -> float | None:
        return float_or_none(_section(self.payload, "wind").get("speed"))

    @property
    def conditions(self) -> list[WeatherCondition]:
        raw = self.payload.get("weather")
        if not isinstance(raw, list):
            return []
        conditions: list[WeatherCondition] = []
        for item in raw:
            if not isinstance(item, dict):
                continue
            conditions.append(
                WeatherCondition(
                    id=item.get("id") if isinstance(item.get("id"), int) else None,
                    main=str(item.get("main", "")),
                    description=str(item.get("description", "")),
                    icon=str(item.get("icon", "")),
                )
            )
        return conditions

    @property
    def observed_at(self) -> datetime | None:
        dt = self.payload.get("dt")
        if not isinstance(dt, (int, float)):
            return None
        return datetime.fromtimestamp(dt, tz=timezone.utc)


@dataclass(frozen=True)
class HistoricalEntry:
    timestamp: str
    data: WeatherSnapshot


def _section(payload: dict[str, Any], key: str) -> dict[str, Any]:
    value = payload.get(key)
    return value if isinstance(value, dict) else {}


def float_or_none(v: Any) -> float | None:
    try:
        if v is None:
            return None
        return float(v)
    except Exception:
        return None
