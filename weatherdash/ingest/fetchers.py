"""Per-card fetchers: each owns the fetch lifecycle for a single city."""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import StrEnum
from typing import Generic, TypeVar

from weatherdash.config.schema import FetchConfig, RetryConfig
from weatherdash.ingest.api_client import ApiClientError, WeatherApiClient
from weatherdash.ingest.retry import SleepFn, call_with_retry
from weatherdash.models.city import City
from weatherdash.models.common import ErrorKind, same_city_id
from weatherdash.models.weather import CurrentWeather, ForecastDay

logger = logging.getLogger(__name__)

T = TypeVar("T")

WEATHER_ERROR = "Failed to fetch weather data"

FORECAST_ERRORS: dict[ErrorKind, str] = {
    ErrorKind.TIMEOUT: "Request timed out. Please try again.",
    ErrorKind.NOT_FOUND: "Forecast data not found for this city.",
    ErrorKind.SERVER: "Server error. Please try again later.",
}
FORECAST_GENERIC_ERROR = "Failed to fetch forecast data. Please check your connection."


class FetchStatus(StrEnum):
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class FetchState(Generic[T]):
    status: FetchStatus = FetchStatus.LOADING
    data: T | None = None
    error: str | None = None

    @property
    def loading(self) -> bool:
        return self.status == FetchStatus.LOADING


def describe_forecast_error(error: ApiClientError) -> str:
    return FORECAST_ERRORS.get(error.kind, FORECAST_GENERIC_ERROR)


class CityFetcher(ABC, Generic[T]):
    """Loading -> Success | Error state machine keyed by city identity.

    Outcomes of a fetch are applied only if no newer ``load()`` started in
    the meantime, so a response for a previous city never lands on the
    current one.
    """

    kind = "data"

    def __init__(self, api: WeatherApiClient, city: City):
        self.api = api
        self.city = city
        self.state: FetchState[T] = FetchState()
        self._generation = 0

    def set_city(self, city: City) -> bool:
        """Retarget to ``city``. Returns True if a reload is needed."""
        changed = not same_city_id(city.id, self.city.id)
        self.city = city
        if changed:
            self._generation += 1
            self.state = FetchState()
        return changed

    async def load(self) -> FetchState[T]:
        self._generation += 1
        generation = self._generation
        city = self.city
        self.state = FetchState()
        try:
            data = await self._fetch(city)
        except ApiClientError as e:
            if generation != self._generation:
                logger.debug("Discarding stale failure for city %s", city.id)
                return self.state
            logger.error("%s fetch failed for city %s: %s", self.kind, city.id, e)
            self.state = FetchState(status=FetchStatus.ERROR, error=self._describe(e))
            return self.state
        if generation != self._generation:
            logger.debug("Discarding stale %s for city %s", self.kind, city.id)
            return self.state
        self.state = FetchState(status=FetchStatus.SUCCESS, data=data)
        return self.state

    async def retry(self) -> FetchState[T]:
        """Manual re-fetch; the retry counter starts again from zero."""
        return await self.load()

    @abstractmethod
    async def _fetch(self, city: City) -> T:
        ...

    @abstractmethod
    def _describe(self, error: ApiClientError) -> str:
        ...


class WeatherFetcher(CityFetcher[CurrentWeather]):
    """Current conditions for one city: single attempt, no retry."""

    kind = "weather"

    async def _fetch(self, city: City) -> CurrentWeather:
        return await self.api.get_city_weather(city.id)

    def _describe(self, error: ApiClientError) -> str:
        return WEATHER_ERROR


class ForecastFetcher(CityFetcher[list[ForecastDay]]):
    """5-day forecast for one city, retrying timeouts with backoff."""

    kind = "forecast"

    def __init__(
        self,
        api: WeatherApiClient,
        city: City,
        policy: RetryConfig | None = None,
        sleep: SleepFn = asyncio.sleep,
    ):
        super().__init__(api, city)
        self.policy = policy or FetchConfig().forecast_retry
        self._sleep = sleep

    async def _fetch(self, city: City) -> list[ForecastDay]:
        return await call_with_retry(
            lambda: self.api.get_city_forecast(city.id),
            self.policy,
            sleep=self._sleep,
            label=f"forecast for city {city.id}",
        )

    def _describe(self, error: ApiClientError) -> str:
        return describe_forecast_error(error)
