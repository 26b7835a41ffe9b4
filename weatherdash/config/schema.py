"""Pydantic v2 configuration schema with strict validation."""

from pydantic import BaseModel, Field

from weatherdash.config import defaults
from weatherdash.models.common import ErrorKind


class ApiConfig(BaseModel):
    model_config = {"extra": "forbid"}

    base_url: str = defaults.DEFAULT_API_BASE_URL
    timeout_seconds: float = Field(default=defaults.DEFAULT_TIMEOUT_SECONDS, gt=0.0)


class RetryConfig(BaseModel):
    model_config = {"extra": "forbid"}

    max_retries: int = Field(default=0, ge=0, le=10)
    base_delay_seconds: float = Field(default=1.0, ge=0.0)
    retry_on: list[ErrorKind] = [ErrorKind.TIMEOUT]

    def delay_for(self, attempt: int) -> float:
        """Exponential backoff delay before retry number ``attempt + 1``."""
        return self.base_delay_seconds * (2**attempt)

    def should_retry(self, kind: ErrorKind, attempt: int) -> bool:
        return kind in self.retry_on and attempt < self.max_retries


class FetchConfig(BaseModel):
    model_config = {"extra": "forbid"}

    forecast_retry: RetryConfig = RetryConfig(
        max_retries=defaults.FORECAST_MAX_RETRIES,
        base_delay_seconds=defaults.FORECAST_BASE_DELAY_SECONDS,
    )
    aggregate_retry: RetryConfig = RetryConfig(
        max_retries=defaults.AGGREGATE_MAX_RETRIES,
    )


class DisplayConfig(BaseModel):
    model_config = {"extra": "forbid"}

    icon_base_url: str = defaults.DEFAULT_ICON_BASE_URL
    forecast_card_limit: int = Field(default=defaults.FORECAST_CARD_LIMIT, ge=0)


class DashboardConfig(BaseModel):
    model_config = {"extra": "forbid"}

    api: ApiConfig = ApiConfig()
    fetch: FetchConfig = FetchConfig()
    display: DisplayConfig = DisplayConfig()
    log_level: str = "INFO"
