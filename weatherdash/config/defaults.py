"""Default endpoints and fetch policy constants."""

DEFAULT_API_BASE_URL = "https://liveweathertrack.onrender.com/api"
DEFAULT_ICON_BASE_URL = "https://openweathermap.org/img/wn"
API_BASE_URL_ENV = "WEATHERDASH_API_BASE_URL"

DEFAULT_TIMEOUT_SECONDS = 40.0

# Forecast cards retry timeouts twice: immediately, +1s, +2s.
FORECAST_MAX_RETRIES = 2
FORECAST_BASE_DELAY_SECONDS = 1.0

# The chart pass is fire-once unless configured otherwise.
AGGREGATE_MAX_RETRIES = 0

FORECAST_CARD_LIMIT = 4
