"""Tests for card payload formatters."""

from datetime import date

from weatherdash.ingest.fetchers import FetchState, FetchStatus
from weatherdash.reporting.formatters import (
    format_date_label,
    format_forecast_card,
    format_weather,
    format_weather_card,
    icon_url,
    uv_severity,
)


class TestIconUrl:
    def test_forecast_size(self):
        assert icon_url("10d") == "https://openweathermap.org/img/wn/10d.png"

    def test_large_size(self):
        assert icon_url("10d", large=True) == "https://openweathermap.org/img/wn/10d@2x.png"

    def test_custom_base(self):
        assert icon_url("01n", base_url="https://cdn.example.com/icons/") == (
            "https://cdn.example.com/icons/01n.png"
        )

    def test_missing_code(self):
        assert icon_url("") is None


class TestLabels:
    def test_date_label(self):
        assert format_date_label(date(2026, 3, 2)) == "Mon, Mar 2"

    def test_uv_severity(self):
        assert uv_severity(None) is None
        assert uv_severity(2.0) == "low"
        assert uv_severity(3.0) == "low"
        assert uv_severity(5.5) == "moderate"
        assert uv_severity(8.1) == "high"


class TestCards:
    def test_weather_values(self, weather):
        data = format_weather(weather)
        assert data["temperature"] == 21
        assert data["feels_like"] == 21
        assert data["visibility_km"] == 10.0
        assert data["uv_severity"] == "moderate"
        assert data["icon_url"].endswith("01d@2x.png")

    def test_weather_card_error_state(self, london):
        state = FetchState(status=FetchStatus.ERROR, error="Failed to fetch weather data")
        card = format_weather_card(london, state, is_favorite=True)
        assert card["title"] == "London, GB"
        assert card["status"] == "error"
        assert card["weather"] is None
        assert card["is_favorite"] is True

    def test_forecast_card(self, london, forecast_factory):
        days = forecast_factory(date(2026, 3, 2), [10.6, 11.2])
        card = format_forecast_card(london, FetchState(status=FetchStatus.SUCCESS, data=days))
        assert card["title"] == "5-Day Forecast - London"
        assert [d["temperature_max"] for d in card["days"]] == [11, 11]
        assert card["days"][0]["icon_url"].endswith("04d.png")

    def test_loading_forecast_card_has_no_days(self, london):
        card = format_forecast_card(london, FetchState())
        assert card["status"] == "loading"
        assert card["days"] == []
