from __future__ import annotations

import math
import re
from dataclasses import dataclass

KELVIN_OFFSET = 273.15
CITY_NAME_PATTERN = re.compile(r"[A-Za-z\s\-']+")


@dataclass(frozen=True)
class CityNameValidation:
    is_valid: bool
    error: str | None = None


def validate_city_name(city_name: str) -> CityNameValidation:
    """Check a user-typed city name before it is sent to the weather provider.

    Rules apply in order and the first failure is reported. Never raises.
    """
    if not city_name.strip():
        return CityNameValidation(False, "City name cannot be empty")

    if len(city_name) < 2:
        return CityNameValidation(False, "City name must be at least 2 characters long")

    if not CITY_NAME_PATTERN.fullmatch(city_name):
        return CityNameValidation(
            False, "City name can only contain letters, spaces, hyphens, and apostrophes"
        )

    return CityNameValidation(True)


def kelvin_to_celsius(kelvin: float) -> int:
    # Halves round up (20.5 -> 21, -0.5 -> 0), not to even.
    return math.floor(kelvin - KELVIN_OFFSET + 0.5)
