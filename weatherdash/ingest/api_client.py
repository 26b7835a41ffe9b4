"""Async client for the weather/preferences REST backend."""

import logging
from datetime import date
from typing import Any

import httpx

from weatherdash.config.defaults import DEFAULT_API_BASE_URL, DEFAULT_TIMEOUT_SECONDS
from weatherdash.config.schema import ApiConfig
from weatherdash.models.city import City, Preferences
from weatherdash.models.common import CityId, ErrorKind, TemperatureUnit
from weatherdash.models.weather import CurrentWeather, ForecastDay

logger = logging.getLogger(__name__)


class ApiClientError(Exception):
    """Raised for any failed backend call, classified by ``kind``."""

    def __init__(
        self,
        message: str,
        kind: ErrorKind,
        status_code: int | None = None,
        detail: str | None = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.status_code = status_code
        self.detail = detail


def classify_status(status_code: int) -> ErrorKind:
    if status_code == 404:
        return ErrorKind.NOT_FOUND
    if status_code >= 500:
        return ErrorKind.SERVER
    return ErrorKind.CLIENT


class WeatherApiClient:
    """Thin typed wrapper: one coroutine per backend operation.

    No retry and no caching here. Callers decide what to do with an
    ``ApiClientError``.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    @classmethod
    def from_config(cls, config: ApiConfig) -> "WeatherApiClient":
        return cls(base_url=config.base_url, timeout=config.timeout_seconds)

    def _headers(self) -> dict[str, str]:
        return {"Content-Type": "application/json"}

    async def _request(
        self,
        method: str,
        endpoint: str,
        data: dict | None = None,
        params: dict | None = None,
    ) -> Any:
        url = f"{self.base_url}{endpoint}"
        try:
            async with httpx.AsyncClient(
                headers=self._headers(), timeout=self.timeout
            ) as client:
                resp = await client.request(method, url, json=data, params=params)
        except httpx.TimeoutException as e:
            logger.error("API request timed out: %s %s -> %s", method, endpoint, e)
            raise ApiClientError(f"Timed out: {e}", ErrorKind.TIMEOUT) from e
        except httpx.RequestError as e:
            logger.error("API request failed: %s %s -> %s", method, endpoint, e)
            raise ApiClientError(f"Request failed: {e}", ErrorKind.CONNECTION) from e

        if resp.status_code >= 400:
            body = resp.text
            logger.error("API %d: %s %s -> %s", resp.status_code, method, endpoint, body)
            raise ApiClientError(
                f"HTTP {resp.status_code}: {body}",
                classify_status(resp.status_code),
                status_code=resp.status_code,
                detail=_error_detail(resp),
            )

        if resp.status_code == 204 or not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as e:
            logger.error("API returned non-JSON body: %s %s", method, endpoint)
            raise ApiClientError(
                f"Invalid JSON from {endpoint}", ErrorKind.INVALID_PAYLOAD,
                status_code=resp.status_code,
            ) from e

    # --- Cities ---

    async def list_cities(self) -> list[City]:
        raw = await self._request("GET", "/cities/")
        return _parse_list(raw, _parse_city, "/cities/")

    async def create_city(self, name: str, country_code: str) -> City:
        raw = await self._request(
            "POST", "/cities/", {"name": name, "country_code": country_code}
        )
        return _parse_one(raw, _parse_city, "/cities/")

    async def delete_city(self, city_id: CityId) -> None:
        await self._request("DELETE", f"/cities/{city_id}/")

    async def get_city_weather(self, city_id: CityId) -> CurrentWeather:
        endpoint = f"/cities/{city_id}/weather/"
        raw = await self._request("GET", endpoint)
        return _parse_one(raw, lambda r: _parse_weather(r, city_id), endpoint)

    async def get_city_forecast(self, city_id: CityId) -> list[ForecastDay]:
        """Fetch the 5-day forecast for one city, ordered by date ascending."""
        endpoint = f"/cities/{city_id}/forecast/"
        raw = await self._request("GET", endpoint)
        days = _parse_list(raw, _parse_forecast_day, endpoint)
        return sorted(days, key=lambda d: d.forecast_date)

    # --- Bulk weather/forecast listings ---

    async def list_weather(self, city_id: CityId | None = None) -> list[CurrentWeather]:
        params = {"city_id": city_id} if city_id is not None else None
        raw = await self._request("GET", "/weather/", params=params)
        return _parse_list(
            raw, lambda r: _parse_weather(r, r.get("city", city_id)), "/weather/"
        )

    async def list_forecasts(self, city_id: CityId | None = None) -> list[ForecastDay]:
        params = {"city_id": city_id} if city_id is not None else None
        raw = await self._request("GET", "/forecast/", params=params)
        return _parse_list(raw, _parse_forecast_day, "/forecast/")

    # --- Preferences ---

    async def get_preferences(self) -> Preferences | None:
        """Return the active preferences record (first element), if any."""
        raw = await self._request("GET", "/preferences/")
        records = _parse_list(raw, _parse_preferences, "/preferences/")
        return records[0] if records else None

    async def update_preferences(self, **fields: Any) -> dict:
        return await self._request("POST", "/preferences/", fields) or {}

    async def add_favorite_city(self, city_id: CityId) -> dict:
        return await self._request(
            "POST", "/preferences/add_favorite_city/", {"city_id": city_id}
        ) or {}

    async def remove_favorite_city(self, city_id: CityId) -> dict:
        return await self._request(
            "POST", "/preferences/remove_favorite_city/", {"city_id": city_id}
        ) or {}


def _error_detail(resp: httpx.Response) -> str | None:
    try:
        body = resp.json()
    except ValueError:
        return None
    if isinstance(body, dict) and body.get("detail"):
        return str(body["detail"])
    return None


def _parse_one(raw: Any, parser, endpoint: str):
    try:
        return parser(raw)
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        logger.error("Malformed payload from %s: %s", endpoint, e)
        raise ApiClientError(
            f"Malformed payload from {endpoint}: {e}", ErrorKind.INVALID_PAYLOAD
        ) from e


def _parse_list(raw: Any, parser, endpoint: str) -> list:
    if not isinstance(raw, list):
        logger.error("Expected a list from %s, got %s", endpoint, type(raw).__name__)
        raise ApiClientError(
            f"Expected a list from {endpoint}", ErrorKind.INVALID_PAYLOAD
        )
    return [_parse_one(item, parser, endpoint) for item in raw]


def _parse_city(raw: dict) -> City:
    return City(
        id=raw["id"],
        name=raw["name"],
        country_code=raw.get("country_code", ""),
    )


def _parse_preferences(raw: dict) -> Preferences:
    return Preferences(
        id=raw.get("id"),
        temperature_unit=TemperatureUnit(raw.get("temperature_unit") or "C"),
        favorite_cities=[_parse_city(c) for c in raw.get("favorite_cities") or []],
    )


def _parse_weather(raw: dict, city_id: CityId) -> CurrentWeather:
    uv = raw.get("uv_index")
    return CurrentWeather(
        city_id=city_id,
        temperature=float(raw["temperature"]),
        feels_like=float(raw.get("feels_like", raw["temperature"])),
        humidity=int(raw.get("humidity", 0)),
        wind_speed=float(raw.get("wind_speed", 0.0)),
        pressure=int(raw.get("pressure", 0)),
        visibility=int(raw.get("visibility", 0)),
        uv_index=float(uv) if uv is not None else None,
        weather_main=raw.get("weather_main", ""),
        weather_description=raw.get("weather_description", ""),
        weather_icon=raw.get("weather_icon", ""),
    )


def _parse_forecast_day(raw: dict) -> ForecastDay:
    # Backend dates may carry a time component; keep the calendar date.
    return ForecastDay(
        forecast_date=date.fromisoformat(str(raw["forecast_date"])[:10]),
        temperature_max=float(raw["temperature_max"]),
        temperature_min=float(raw["temperature_min"]),
        weather_main=raw.get("weather_main", ""),
        weather_description=raw.get("weather_description", ""),
        weather_icon=raw.get("weather_icon", ""),
    )
