from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from cityweather.api.deps import get_city_weather_service
from cityweather.core.errors import (
    CityValidationError,
    RecordNotFoundError,
    StorageWriteError,
    WeatherErrorKind,
    WeatherProviderError,
)
from cityweather.schemas.weather import (
    CityAddResponse,
    CityCreate,
    CityRead,
    HistoryItemRead,
    WeatherDisplayRead,
)
from cityweather.services.weather import CityWeatherService

router = APIRouter(prefix="/cities")

Service = Annotated[CityWeatherService, Depends(get_city_weather_service)]

PROVIDER_STATUS: dict[WeatherErrorKind, int] = {
    WeatherErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    WeatherErrorKind.UNAUTHORIZED: status.HTTP_502_BAD_GATEWAY,
    WeatherErrorKind.RATE_LIMITED: status.HTTP_429_TOO_MANY_REQUESTS,
    WeatherErrorKind.NETWORK: status.HTTP_503_SERVICE_UNAVAILABLE,
    WeatherErrorKind.GENERIC: status.HTTP_502_BAD_GATEWAY,
}


def _provider_error(e: WeatherProviderError) -> HTTPException:
    return HTTPException(status_code=PROVIDER_STATUS[e.kind], detail=e.message)


def _storage_error(e: StorageWriteError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))


def _not_found(e: RecordNotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.get("", response_model=list[CityRead])
async def list_cities(service: Service) -> list[CityRead]:
    cities = await service.list_cities()
    return [CityRead.model_validate(c.__dict__) for c in cities]


@router.post("", response_model=CityAddResponse, status_code=status.HTTP_201_CREATED)
async def add_city(payload: CityCreate, service: Service) -> CityAddResponse:
    try:
        result = await service.add_city(payload.name)
    except CityValidationError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    except WeatherProviderError as e:
        raise _provider_error(e) from e
    except StorageWriteError as e:
        raise _storage_error(e) from e
    return CityAddResponse(
        city=CityRead.model_validate(result.city.__dict__),
        cities=[CityRead.model_validate(c.__dict__) for c in result.cities],
        history_length=len(result.history),
    )


@router.delete("/{city_name}", response_model=list[CityRead])
async def remove_city(city_name: str, service: Service) -> list[CityRead]:
    try:
        cities = await service.remove_city(city_name)
    except StorageWriteError as e:
        raise _storage_error(e) from e
    return [CityRead.model_validate(c.__dict__) for c in cities]


@router.get("/{city_name}/weather", response_model=WeatherDisplayRead)
async def city_weather(city_name: str, service: Service) -> WeatherDisplayRead:
    try:
        display = await service.refresh_city(city_name)
    except RecordNotFoundError as e:
        raise _not_found(e) from e
    except WeatherProviderError as e:
        raise _provider_error(e) from e
    except StorageWriteError as e:
        raise _storage_error(e) from e
    return WeatherDisplayRead.model_validate(display.__dict__)


@router.get("/{city_name}/history", response_model=list[HistoryItemRead])
async def city_history(city_name: str, service: Service) -> list[HistoryItemRead]:
    items = await service.history(city_name)
    return [HistoryItemRead.model_validate(i.__dict__) for i in items]


@router.get("/{city_name}/history/{timestamp}", response_model=WeatherDisplayRead)
async def city_history_entry(
    city_name: str, timestamp: str, service: Service
) -> WeatherDisplayRead:
    try:
        display = await service.history_entry(city_name, timestamp)
    except RecordNotFoundError as e:
        raise _not_found(e) from e
    return WeatherDisplayRead.model_validate(display.__dict__)
