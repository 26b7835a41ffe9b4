"""Dashboard controller: sole owner of the city list and preferences.

Card fetchers and the chart aggregator only read city identity; every
mutation goes through the methods here and then through the API client.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import StrEnum

from weatherdash.aggregate.forecast_aggregator import ForecastAggregator, chart_payload
from weatherdash.config.schema import DashboardConfig
from weatherdash.ingest.api_client import ApiClientError, WeatherApiClient
from weatherdash.ingest.fetchers import CityFetcher, ForecastFetcher, WeatherFetcher
from weatherdash.ingest.retry import SleepFn
from weatherdash.models.city import City, Preferences
from weatherdash.models.common import CityId, TemperatureUnit, same_city_id
from weatherdash.reporting.formatters import format_forecast_card, format_weather_card

logger = logging.getLogger(__name__)


class CityValidationError(ValueError):
    """Add-city input rejected before any request is made."""


class NotificationVariant(StrEnum):
    DEFAULT = "default"
    DESTRUCTIVE = "destructive"


@dataclass(frozen=True)
class Notification:
    title: str
    description: str
    variant: NotificationVariant = NotificationVariant.DEFAULT


def validate_city_input(name: str, country_code: str) -> tuple[str, str]:
    """Return the cleaned (name, COUNTRY_CODE) pair or raise CityValidationError."""
    name = (name or "").strip()
    code = (country_code or "").strip().upper()
    if not name:
        raise CityValidationError("City name is required.")
    if len(code) != 2:
        raise CityValidationError("Country code must be exactly 2 letters.")
    return name, code


class DashboardController:
    def __init__(
        self,
        api: WeatherApiClient,
        config: DashboardConfig | None = None,
        sleep: SleepFn = asyncio.sleep,
    ):
        self.api = api
        self.config = config or DashboardConfig()
        self._sleep = sleep
        self.cities: list[City] = []
        self.preferences: Preferences | None = None
        self.loading = True
        self.notifications: list[Notification] = []
        self.aggregator = ForecastAggregator(
            api, self.config.fetch.aggregate_retry, sleep=sleep
        )
        self.weather_cards: dict[str, WeatherFetcher] = {}
        self.favorite_cards: dict[str, WeatherFetcher] = {}
        self.forecast_cards: dict[str, ForecastFetcher] = {}

    # --- Loading ---

    async def load(self) -> None:
        """Initial load: cities and preferences concurrently, then cards and chart."""
        self.loading = True
        try:
            cities, preferences = await asyncio.gather(
                self.api.list_cities(), self._preferences_or_none()
            )
        except ApiClientError as e:
            logger.error("Failed to fetch initial data: %s", e)
            self._notify_error("Failed to load weather data. Please check your connection.")
            return
        finally:
            self.loading = False

        self.cities = _unique_by_id(cities)
        self.preferences = preferences
        logger.info(
            "Loaded %d cities, %d favorites",
            len(self.cities), len(self.favorite_cities),
        )
        await self._sync_views()

    async def _preferences_or_none(self) -> Preferences | None:
        try:
            return await self.api.get_preferences()
        except ApiClientError as e:
            logger.warning("Preferences unavailable, continuing without: %s", e)
            return None

    # --- Cities ---

    async def add_city(self, name: str, country_code: str) -> City | None:
        try:
            name, code = validate_city_input(name, country_code)
        except CityValidationError as e:
            logger.info("Rejected add-city input %r/%r: %s", name, country_code, e)
            self._notify_error(str(e))
            return None

        try:
            city = await self.api.create_city(name, code)
        except ApiClientError as e:
            logger.error("Failed to add city %s, %s: %s", name, code, e)
            self._notify_error(e.detail or "Failed to add city. Please try again.")
            return None

        if self._find_city(city.id) is None:
            self.cities = [*self.cities, city]
        self._notify("Success", f"{city.name} has been added to your weather dashboard.")
        await self._sync_views()
        return city

    async def remove_city(self, city_id: CityId) -> bool:
        city_id = self._resolve_id(city_id)
        try:
            await self.api.delete_city(city_id)
        except ApiClientError as e:
            logger.error("Failed to remove city %s: %s", city_id, e)
            self._notify_error("Failed to remove city. Please try again.")
            return False

        # Favorites referencing this city are left for the backend to reconcile.
        self.cities = [c for c in self.cities if not same_city_id(c.id, city_id)]
        self._notify("Success", "City has been removed from your dashboard.")
        await self._sync_views()
        return True

    # --- Favorites & preferences ---

    @property
    def favorite_cities(self) -> list[City]:
        return list(self.preferences.favorite_cities) if self.preferences else []

    def is_favorite(self, city_id: CityId) -> bool:
        return self.preferences is not None and self.preferences.has_favorite(city_id)

    async def toggle_favorite(self, city_id: CityId) -> bool:
        city_id = self._resolve_id(city_id)
        was_favorite = self.is_favorite(city_id)
        try:
            if was_favorite:
                await self.api.remove_favorite_city(city_id)
            else:
                await self.api.add_favorite_city(city_id)
            self.preferences = await self.api.get_preferences()
        except ApiClientError as e:
            logger.error("Failed to toggle favorite for city %s: %s", city_id, e)
            self._notify_error("Failed to update favorites. Please try again.")
            return False

        if was_favorite:
            self._notify("Removed from favorites", "City has been removed from your favorites.")
        else:
            self._notify("Added to favorites", "City has been added to your favorites.")
        await self._sync_favorite_cards()
        return True

    async def update_temperature_unit(self, unit: TemperatureUnit | str) -> bool:
        try:
            unit = TemperatureUnit(unit)
        except ValueError:
            self._notify_error(f"Unsupported temperature unit: {unit}")
            return False
        try:
            await self.api.update_preferences(temperature_unit=str(unit))
            self.preferences = await self.api.get_preferences()
        except ApiClientError as e:
            logger.error("Failed to update preferences: %s", e)
            self._notify_error("Failed to update preferences. Please try again.")
            return False
        self._notify("Preferences updated", f"Temperatures are now shown in °{unit}.")
        return True

    @property
    def temperature_unit(self) -> TemperatureUnit:
        if self.preferences is None:
            return TemperatureUnit.CELSIUS
        return self.preferences.temperature_unit

    # --- Manual retries ---

    async def retry_weather(self, city_id: CityId) -> bool:
        """Retry every weather card showing this city: main list and favorites."""
        key = str(city_id)
        fetchers = [
            cards[key] for cards in (self.weather_cards, self.favorite_cards) if key in cards
        ]
        if not fetchers:
            return False
        await asyncio.gather(*(f.retry() for f in fetchers))
        return True

    async def retry_forecast(self, city_id: CityId) -> bool:
        fetcher = self.forecast_cards.get(str(city_id))
        if fetcher is None:
            return False
        await fetcher.retry()
        return True

    # --- Card and chart synchronisation ---

    async def _sync_views(self) -> None:
        await asyncio.gather(
            self._sync_city_cards(),
            self._sync_favorite_cards(),
            self.aggregator.sync(self.cities),
        )

    async def _sync_city_cards(self) -> None:
        limit = self.config.display.forecast_card_limit
        pending = _reconcile(
            self.weather_cards, self.cities, lambda c: WeatherFetcher(self.api, c)
        )
        pending += _reconcile(
            self.forecast_cards,
            self.cities[:limit],
            lambda c: ForecastFetcher(
                self.api, c, self.config.fetch.forecast_retry, sleep=self._sleep
            ),
        )
        await asyncio.gather(*(f.load() for f in pending))

    async def _sync_favorite_cards(self) -> None:
        pending = _reconcile(
            self.favorite_cards,
            self.favorite_cities,
            lambda c: WeatherFetcher(self.api, c),
        )
        await asyncio.gather(*(f.load() for f in pending))

    # --- Notifications ---

    def _notify(self, title: str, description: str) -> None:
        logger.info("%s: %s", title, description)
        self.notifications.append(Notification(title, description))

    def _notify_error(self, description: str) -> None:
        self.notifications.append(
            Notification("Error", description, NotificationVariant.DESTRUCTIVE)
        )

    def drain_notifications(self) -> list[Notification]:
        drained, self.notifications = self.notifications, []
        return drained

    # --- Read-only view ---

    def _find_city(self, city_id: CityId) -> City | None:
        return next((c for c in self.cities if same_city_id(c.id, city_id)), None)

    def _resolve_id(self, city_id: CityId) -> CityId:
        """Map a path-style id back to the id the backend handed out."""
        for c in [*self.cities, *self.favorite_cities]:
            if same_city_id(c.id, city_id):
                return c.id
        return city_id

    def snapshot(self) -> dict:
        icons = self.config.display.icon_base_url
        return {
            "loading": self.loading,
            "temperature_unit": str(self.temperature_unit),
            "cities": [
                format_weather_card(
                    c, self.weather_cards[str(c.id)].state, self.is_favorite(c.id), icons
                )
                for c in self.cities
                if str(c.id) in self.weather_cards
            ],
            "favorites": [
                format_weather_card(c, self.favorite_cards[str(c.id)].state, True, icons)
                for c in self.favorite_cities
                if str(c.id) in self.favorite_cards
            ],
            "forecasts": [
                format_forecast_card(c, self.forecast_cards[str(c.id)].state, icons)
                for c in self.cities
                if str(c.id) in self.forecast_cards
            ],
            "chart": chart_payload(self.aggregator),
            "notifications": [
                {"title": n.title, "description": n.description, "variant": str(n.variant)}
                for n in self.notifications
            ],
        }


def _unique_by_id(cities: list[City]) -> list[City]:
    seen: set[str] = set()
    unique = []
    for c in cities:
        if str(c.id) not in seen:
            seen.add(str(c.id))
            unique.append(c)
    return unique


def _reconcile(
    cards: dict[str, CityFetcher],
    cities: list[City],
    factory,
) -> list[CityFetcher]:
    """Create cards for new cities, drop cards for departed ones.

    Returns the newly created cards, which still need a first load.
    """
    wanted = {str(c.id): c for c in cities}
    for key in list(cards):
        if key not in wanted:
            del cards[key]
    created = []
    for key, city in wanted.items():
        if key not in cards:
            cards[key] = factory(city)
            created.append(cards[key])
    return created
