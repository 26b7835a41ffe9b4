"""YAML config loader with environment override of the API base address."""

import hashlib
import logging
import os
from pathlib import Path

import yaml

from weatherdash.config.defaults import API_BASE_URL_ENV
from weatherdash.config.schema import DashboardConfig

logger = logging.getLogger(__name__)


def load_config(path: str | Path | None = None) -> DashboardConfig:
    """Load and validate config from an optional YAML file.

    ``WEATHERDASH_API_BASE_URL`` overrides ``api.base_url`` when set.
    """
    raw: dict = {}
    if path is not None:
        with open(Path(path)) as f:
            raw = yaml.safe_load(f) or {}

    config = DashboardConfig(**raw)
    return apply_env_overrides(config)


def apply_env_overrides(config: DashboardConfig) -> DashboardConfig:
    base_url = os.environ.get(API_BASE_URL_ENV, "").strip()
    if not base_url:
        return config
    logger.info("Using API base URL from %s: %s", API_BASE_URL_ENV, base_url)
    return config.model_copy(
        update={"api": config.api.model_copy(update={"base_url": base_url})}
    )


def config_hash(config: DashboardConfig) -> str:
    """Compute a deterministic SHA256 hash of the config."""
    data = config.model_dump_json(indent=None)
    return hashlib.sha256(data.encode()).hexdigest()[:16]
