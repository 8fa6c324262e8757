from __future__ import annotations

from pydantic import BaseModel, Field


class CityCreate(BaseModel):
    name: str = Field(max_length=128)


class CityRead(BaseModel):
    name: str = Field(min_length=1, max_length=128)
    country: str
    lat: float | None = None
    lon: float | None = None


class CityAddResponse(BaseModel):
    city: CityRead
    cities: list[CityRead] = Field(default_factory=list)
    history_length: int = Field(ge=0)


class WeatherDisplayRead(BaseModel):
    city: str
    temperature: int | None = None
    feels_like: int | None = None
    description: str
    humidity: float | None = None
    wind_speed: float | None = None
    pressure: float | None = None
    icon_code: str
    icon_url: str
    last_updated: str
    is_historical: bool = False


class HistoryItemRead(BaseModel):
    timestamp: str
    date_text: str
    description: str
    weather_text: str
    temperature: int | None = None
    icon_code: str
