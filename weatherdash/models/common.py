"""Common types and helpers shared across models."""

from datetime import UTC, datetime
from enum import StrEnum
from typing import TypeAlias

CityId: TypeAlias = int | str


class ErrorKind(StrEnum):
    TIMEOUT = "timeout"
    NOT_FOUND = "not_found"
    SERVER = "server"
    CLIENT = "client"
    CONNECTION = "connection"
    INVALID_PAYLOAD = "invalid_payload"


class TemperatureUnit(StrEnum):
    CELSIUS = "C"
    FAHRENHEIT = "F"


def same_city_id(a: CityId, b: CityId) -> bool:
    """Compare ids by string form; path parameters arrive as strings."""
    return str(a) == str(b)


def utc_now() -> datetime:
    return datetime.now(UTC)
