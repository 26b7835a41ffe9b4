"""Weather Dashboard: FastAPI surface over the dashboard controller."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from weatherdash.aggregate.forecast_aggregator import chart_payload
from weatherdash.config.loader import config_hash, load_config
from weatherdash.config.schema import DashboardConfig
from weatherdash.controller.dashboard_controller import DashboardController, Notification
from weatherdash.ingest.api_client import WeatherApiClient
from weatherdash.models.common import TemperatureUnit

logger = logging.getLogger(__name__)


class AddCityRequest(BaseModel):
    name: str
    country_code: str


class PreferencesRequest(BaseModel):
    temperature_unit: TemperatureUnit


def _notifications(controller: DashboardController) -> list[dict]:
    return [_notification_json(n) for n in controller.drain_notifications()]


def _notification_json(n: Notification) -> dict:
    return {"title": n.title, "description": n.description, "variant": str(n.variant)}


def create_app(
    config: DashboardConfig | None = None,
    controller: DashboardController | None = None,
) -> FastAPI:
    config = config or load_config()
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if controller is None:
        controller = DashboardController(WeatherApiClient.from_config(config.api), config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "Loading dashboard from %s (config %s)", config.api.base_url, config_hash(config)
        )
        await controller.load()
        yield

    app = FastAPI(title="Weather Dashboard", version="0.1.0", lifespan=lifespan)
    app.state.controller = controller
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── Read endpoints ──────────────────────────────────────────────

    @app.get("/api/dashboard")
    async def get_dashboard():
        """Full dashboard view: cards, favorites, forecasts, chart."""
        return controller.snapshot()

    @app.get("/api/chart")
    async def get_chart():
        """Merged multi-city max-temperature series."""
        return chart_payload(controller.aggregator)

    @app.get("/api/notifications")
    async def get_notifications():
        return _notifications(controller)

    # ── Actions ─────────────────────────────────────────────────────

    @app.post("/api/cities")
    async def add_city(body: AddCityRequest):
        city = await controller.add_city(body.name, body.country_code)
        return {
            "ok": city is not None,
            "city": city,
            "notifications": _notifications(controller),
        }

    @app.delete("/api/cities/{city_id}")
    async def remove_city(city_id: str):
        ok = await controller.remove_city(city_id)
        return {"ok": ok, "notifications": _notifications(controller)}

    @app.post("/api/cities/{city_id}/favorite")
    async def toggle_favorite(city_id: str):
        ok = await controller.toggle_favorite(city_id)
        return {
            "ok": ok,
            "is_favorite": controller.is_favorite(city_id),
            "notifications": _notifications(controller),
        }

    @app.post("/api/cities/{city_id}/weather/retry")
    async def retry_weather(city_id: str):
        if not await controller.retry_weather(city_id):
            raise HTTPException(404, f"No weather card for city {city_id}")
        return controller.snapshot()

    @app.post("/api/cities/{city_id}/forecast/retry")
    async def retry_forecast(city_id: str):
        if not await controller.retry_forecast(city_id):
            raise HTTPException(404, f"No forecast card for city {city_id}")
        return controller.snapshot()

    @app.put("/api/preferences")
    async def update_preferences(body: PreferencesRequest):
        ok = await controller.update_temperature_unit(body.temperature_unit)
        return {
            "ok": ok,
            "temperature_unit": str(controller.temperature_unit),
            "notifications": _notifications(controller),
        }

    return app
