from __future__ import annotations

from enum import Enum


class StorageWriteError(RuntimeError):
    """Raised when a write round-trip to the backing key-value storage fails."""


class CityValidationError(ValueError):
    """Raised by the service layer when a city name is rejected before lookup."""


class RecordNotFoundError(LookupError):
    """Raised when a saved city or a stored history entry does not exist."""


class WeatherErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    UNAUTHORIZED = "unauthorized"
    RATE_LIMITED = "rate_limited"
    NETWORK = "network"
    GENERIC = "generic"


ERROR_MESSAGES: dict[WeatherErrorKind, str] = {
    WeatherErrorKind.NOT_FOUND: "City not found",
    WeatherErrorKind.UNAUTHORIZED: "Invalid API key",
    WeatherErrorKind.RATE_LIMITED: "Too many requests. Please try again later.",
    WeatherErrorKind.NETWORK: "Network error. Please check your connection.",
    WeatherErrorKind.GENERIC: "Failed to fetch weather data",
}


class WeatherProviderError(Exception):
    def __init__(self, kind: WeatherErrorKind, message: str | None = None) -> None:
        self.kind = kind
        self.message = message or ERROR_MESSAGES[kind]
        super().__init__(self.message)
