"""Current conditions and daily forecast models."""

from dataclasses import dataclass
from datetime import date

from weatherdash.models.common import CityId


@dataclass(frozen=True)
class CurrentWeather:
    city_id: CityId
    temperature: float
    feels_like: float
    humidity: int
    wind_speed: float
    pressure: int
    visibility: int  # metres
    uv_index: float | None
    weather_main: str
    weather_description: str
    weather_icon: str


@dataclass(frozen=True)
class ForecastDay:
    forecast_date: date
    temperature_max: float
    temperature_min: float
    weather_main: str
    weather_description: str
    weather_icon: str
