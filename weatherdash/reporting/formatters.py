"""Card payload formatters for the dashboard surface."""

from datetime import date

from weatherdash.config.defaults import DEFAULT_ICON_BASE_URL
from weatherdash.ingest.fetchers import FetchState
from weatherdash.models.city import City
from weatherdash.models.weather import CurrentWeather, ForecastDay


def icon_url(icon_code: str, large: bool = False, base_url: str = DEFAULT_ICON_BASE_URL) -> str | None:
    """Icon CDN URL for a weather icon code. Current conditions use the @2x size."""
    if not icon_code:
        return None
    suffix = "@2x" if large else ""
    return f"{base_url.rstrip('/')}/{icon_code}{suffix}.png"


def format_date_label(d: date) -> str:
    """Short label like "Mon, Jan 5"."""
    return f"{d:%a}, {d:%b} {d.day}"


def uv_severity(uv_index: float | None) -> str | None:
    if uv_index is None:
        return None
    if uv_index > 6:
        return "high"
    if uv_index > 3:
        return "moderate"
    return "low"


def format_weather(w: CurrentWeather, icon_base_url: str = DEFAULT_ICON_BASE_URL) -> dict:
    return {
        "temperature": round(w.temperature),
        "feels_like": round(w.feels_like),
        "humidity_pct": w.humidity,
        "wind_speed_ms": w.wind_speed,
        "pressure_hpa": w.pressure,
        "visibility_km": round(w.visibility / 1000, 1),
        "uv_index": w.uv_index,
        "uv_severity": uv_severity(w.uv_index),
        "weather_main": w.weather_main,
        "weather_description": w.weather_description,
        "icon_url": icon_url(w.weather_icon, large=True, base_url=icon_base_url),
    }


def format_forecast_day(day: ForecastDay, icon_base_url: str = DEFAULT_ICON_BASE_URL) -> dict:
    return {
        "date": day.forecast_date.isoformat(),
        "label": format_date_label(day.forecast_date),
        "temperature_max": round(day.temperature_max),
        "temperature_min": round(day.temperature_min),
        "weather_main": day.weather_main,
        "weather_description": day.weather_description,
        "icon_url": icon_url(day.weather_icon, base_url=icon_base_url),
    }


def format_weather_card(
    city: City,
    state: FetchState[CurrentWeather],
    is_favorite: bool,
    icon_base_url: str = DEFAULT_ICON_BASE_URL,
) -> dict:
    return {
        "city": {"id": city.id, "name": city.name, "country_code": city.country_code},
        "title": f"{city.name}, {city.country_code}",
        "is_favorite": is_favorite,
        "status": str(state.status),
        "error": state.error,
        "weather": format_weather(state.data, icon_base_url)
        if state.data is not None else None,
    }


def format_forecast_card(
    city: City,
    state: FetchState[list[ForecastDay]],
    icon_base_url: str = DEFAULT_ICON_BASE_URL,
) -> dict:
    return {
        "city": {"id": city.id, "name": city.name, "country_code": city.country_code},
        "title": f"5-Day Forecast - {city.name}",
        "status": str(state.status),
        "error": state.error,
        "days": [format_forecast_day(d, icon_base_url) for d in state.data or []],
    }
