"""Shared test fixtures."""

from datetime import date, timedelta
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
import yaml

from weatherdash.ingest.api_client import WeatherApiClient
from weatherdash.models.city import City, Preferences
from weatherdash.models.weather import CurrentWeather, ForecastDay

BASE_URL = "https://test-weather.example.com/api"


class RecordingSleep:
    """Stand-in for asyncio.sleep that records requested delays."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def make_forecast(start: date, highs: list[float]) -> list[ForecastDay]:
    return [
        ForecastDay(
            forecast_date=start + timedelta(days=i),
            temperature_max=high,
            temperature_min=high - 8,
            weather_main="Clouds",
            weather_description="broken clouds",
            weather_icon="04d",
        )
        for i, high in enumerate(highs)
    ]


def forecast_payload(start: date, highs: list[float]) -> list[dict]:
    return [
        {
            "forecast_date": (start + timedelta(days=i)).isoformat(),
            "temperature_max": high,
            "temperature_min": high - 8,
            "weather_main": "Clear",
            "weather_description": "clear sky",
            "weather_icon": "01d",
        }
        for i, high in enumerate(highs)
    ]


WEATHER_PAYLOAD = {
    "temperature": 21.4,
    "feels_like": 20.6,
    "humidity": 55,
    "wind_speed": 3.6,
    "pressure": 1014,
    "visibility": 10000,
    "uv_index": 4.2,
    "weather_main": "Clear",
    "weather_description": "clear sky",
    "weather_icon": "01d",
}


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def london() -> City:
    return City(id=1, name="London", country_code="GB")


@pytest.fixture
def paris() -> City:
    return City(id=2, name="Paris", country_code="FR")


@pytest.fixture
def weather() -> CurrentWeather:
    return CurrentWeather(
        city_id=1,
        temperature=21.4,
        feels_like=20.6,
        humidity=55,
        wind_speed=3.6,
        pressure=1014,
        visibility=10000,
        uv_index=4.2,
        weather_main="Clear",
        weather_description="clear sky",
        weather_icon="01d",
    )


@pytest.fixture
def api(weather: CurrentWeather) -> MagicMock:
    """API client double with every backend operation as an AsyncMock."""
    mock = MagicMock(spec=WeatherApiClient)
    mock.list_cities = AsyncMock(return_value=[])
    mock.create_city = AsyncMock()
    mock.delete_city = AsyncMock(return_value=None)
    mock.get_city_weather = AsyncMock(return_value=weather)
    mock.get_city_forecast = AsyncMock(return_value=[])
    mock.get_preferences = AsyncMock(return_value=Preferences(id=1))
    mock.update_preferences = AsyncMock(return_value={})
    mock.add_favorite_city = AsyncMock(return_value={})
    mock.remove_favorite_city = AsyncMock(return_value={})
    return mock


@pytest.fixture
def config_yaml_path(tmp_path: Path) -> Path:
    """Write a minimal valid config YAML and return its path."""
    data = {
        "api": {"base_url": "https://yaml.example.com/api", "timeout_seconds": 15},
        "fetch": {"aggregate_retry": {"max_retries": 1}},
    }
    path = tmp_path / "test_config.yaml"
    with open(path, "w") as f:
        yaml.dump(data, f)
    return path


@pytest.fixture
def forecast_factory():
    return make_forecast


@pytest.fixture
def forecast_json():
    return forecast_payload


@pytest.fixture
def weather_json() -> dict:
    return dict(WEATHER_PAYLOAD)
