from __future__ import annotations

from datetime import datetime, timezone

import pytest

from cityweather.utils.formatters import (
    capitalize_first,
    capitalize_words,
    format_date,
    format_historical_date,
    parse_timestamp,
)


@pytest.mark.parametrize(
    ("value", "expected"),
    [("", ""), ("clear sky", "Clear sky"), ("a", "A"), ("hELLO", "HELLO"), (" x", " x")],
)
def test_capitalize_first(value: str, expected: str) -> None:
    assert capitalize_first(value) == expected


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("", ""),
        ("light rain", "Light Rain"),
        ("new  york", "New  York"),
        ("o'brien mcDONALD", "O'brien McDONALD"),
        ("stratford-upon-avon", "Stratford-upon-avon"),
    ],
)
def test_capitalize_words(value: str, expected: str) -> None:
    assert capitalize_words(value) == expected


def test_format_date_has_trailing_period_after_year() -> None:
    assert format_date(datetime(2024, 3, 5, 7, 4)) == "05.03.2024. - 07:04"


def test_format_historical_date_has_no_trailing_period() -> None:
    assert format_historical_date(datetime(2024, 3, 5, 17, 45)) == "05.03.2024 - 17:45"


def test_formatters_accept_naive_iso_strings() -> None:
    assert format_date("2024-12-31T23:59:00") == "31.12.2024. - 23:59"
    assert format_historical_date("2024-12-31T23:59:00") == "31.12.2024 - 23:59"


def test_aware_values_render_in_local_time() -> None:
    value = datetime(2024, 6, 1, 8, 30, tzinfo=timezone.utc)
    expected = value.astimezone().strftime("%d.%m.%Y - %H:%M")
    assert format_historical_date("2024-06-01T08:30:00.000Z") == expected
    assert format_historical_date(value) == expected


def test_date_only_strings_mean_utc_midnight() -> None:
    assert parse_timestamp("2024-12-31") == datetime(2024, 12, 31, tzinfo=timezone.utc)
    expected = datetime(2024, 12, 31, tzinfo=timezone.utc).astimezone().strftime("%d.%m.%Y - %H:%M")
    assert format_historical_date("2024-12-31") == expected


@pytest.mark.parametrize("value", ["yesterday", "", "31.12.2024"])
def test_parse_timestamp_rejects_non_iso(value: str) -> None:
    with pytest.raises(ValueError):
        parse_timestamp(value)
