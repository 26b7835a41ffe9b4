"""City and user preference models."""

from dataclasses import dataclass, field

from weatherdash.models.common import CityId, TemperatureUnit, same_city_id


@dataclass(frozen=True)
class City:
    id: CityId
    name: str
    country_code: str


@dataclass(frozen=True)
class Preferences:
    id: CityId | None
    temperature_unit: TemperatureUnit = TemperatureUnit.CELSIUS
    favorite_cities: list[City] = field(default_factory=list)

    def has_favorite(self, city_id: CityId) -> bool:
        return any(same_city_id(c.id, city_id) for c in self.favorite_cities)
