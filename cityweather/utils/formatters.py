from __future__ import annotations

import re
from datetime import datetime, timezone

_WORD_START = re.compile(r"(?<!\S)\S")


def capitalize_first(value: str) -> str:
    if not value:
        return ""
    return value[0].upper() + value[1:]


def capitalize_words(value: str) -> str:
    return _WORD_START.sub(lambda m: m.group(0).upper(), value)


def format_date(value: str | datetime) -> str:
    """``DD.MM.YYYY. - HH:mm`` in local time, used for "last updated" labels."""
    return _to_local(value).strftime("%d.%m.%Y. - %H:%M")


def format_historical_date(value: str | datetime) -> str:
    """``DD.MM.YYYY - HH:mm`` in local time, used for history rows."""
    return _to_local(value).strftime("%d.%m.%Y - %H:%M")


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 string; raises ``ValueError`` if it is not one.

    Date-only strings ("2024-12-31") mean midnight UTC. Date-time strings
    without an offset are left naive and read as local time.
    """
    # Example: "2026-01-30T22:00:00.000Z"
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if "T" not in value and " " not in value:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _to_local(value: str | datetime) -> datetime:
    if isinstance(value, str):
        value = parse_timestamp(value)
    if value.tzinfo is None:
        return value
    return value.astimezone()
