"""Multi-city forecast aggregation for the trend chart."""

import asyncio
import logging
from datetime import datetime
from typing import Any

from weatherdash.config.schema import FetchConfig, RetryConfig
from weatherdash.ingest.api_client import WeatherApiClient
from weatherdash.ingest.retry import SleepFn, call_with_retry
from weatherdash.models.city import City
from weatherdash.models.common import utc_now
from weatherdash.models.weather import ForecastDay

logger = logging.getLogger(__name__)

ChartRow = dict[str, Any]


def merge_forecast_series(
    forecasts: list[tuple[City, list[ForecastDay]]],
) -> list[ChartRow]:
    """Merge per-city forecasts into one row per calendar date.

    Rows are sorted by date ascending. Every row carries a key for every
    city; a city with no entry for that date gets None.
    """
    dates = sorted({day.forecast_date for _, days in forecasts for day in days})

    rows: list[ChartRow] = []
    for d in dates:
        row: ChartRow = {"date": d.isoformat()}
        for city, days in forecasts:
            match = next((day for day in days if day.forecast_date == d), None)
            row[city.name] = match.temperature_max if match is not None else None
        rows.append(row)
    return rows


class ForecastAggregator:
    """Fetches every city's forecast in parallel and publishes the merged series.

    A failed pass leaves the previously published series in place.
    """

    def __init__(
        self,
        api: WeatherApiClient,
        policy: RetryConfig | None = None,
        sleep: SleepFn = asyncio.sleep,
    ):
        self.api = api
        self.policy = policy or FetchConfig().aggregate_retry
        self._sleep = sleep
        self.series: list[ChartRow] = []
        self.cities: list[str] = []
        self.last_updated: datetime | None = None
        self._members: frozenset[str] | None = None
        self._generation = 0

    async def sync(self, cities: list[City]) -> bool:
        """Refresh only if city membership changed and the list is non-empty."""
        members = _membership(c.id for c in cities)
        if members == self._members:
            return False
        self._members = members
        if not cities:
            # Passes still in flight belong to a city set that is gone.
            self._generation += 1
            return False
        return await self.refresh(cities)

    async def refresh(self, cities: list[City]) -> bool:
        """Run one full pass. Returns True if a new series was published."""
        if not cities:
            return False
        self._generation += 1
        generation = self._generation
        try:
            results = await asyncio.gather(
                *(self._fetch(city) for city in cities)
            )
        except Exception:
            logger.exception(
                "Forecast aggregation failed for %d cities; keeping previous chart",
                len(cities),
            )
            return False

        if generation != self._generation:
            logger.info(
                "Discarding superseded forecast chart pass for %d cities", len(cities)
            )
            return False

        self.series = merge_forecast_series(list(zip(cities, results)))
        self.cities = [c.name for c in cities]
        self.last_updated = utc_now()
        logger.info(
            "Published forecast chart: %d cities, %d dates",
            len(cities), len(self.series),
        )
        return True

    async def _fetch(self, city: City) -> list[ForecastDay]:
        return await call_with_retry(
            lambda: self.api.get_city_forecast(city.id),
            self.policy,
            sleep=self._sleep,
            label=f"chart forecast for city {city.id}",
        )


def _membership(ids) -> frozenset[str]:
    return frozenset(str(i) for i in ids)


def chart_payload(aggregator: ForecastAggregator) -> dict:
    return {
        "cities": list(aggregator.cities),
        "series": list(aggregator.series),
        "last_updated": aggregator.last_updated.isoformat()
        if aggregator.last_updated else None,
    }
