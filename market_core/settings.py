from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import List, Mapping, Optional

from dotenv import load_dotenv

from market_core.catalog import DEFAULT_TREND_METRIC, METRICS_BY_KEY
from market_core.data import DEFAULT_DATA_SOURCE, DEFAULT_TIMEOUT


DEFAULT_CORS_ORIGINS = ["http://localhost:3000", "http://127.0.0.1:3000"]


@dataclass(frozen=True)
class DashboardSettings:
    data_source: str = DEFAULT_DATA_SOURCE
    request_timeout: float = DEFAULT_TIMEOUT
    default_metric: str = DEFAULT_TREND_METRIC
    log_level: str = "INFO"
    cors_origins: List[str] = field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))


def load_settings(env: Optional[Mapping[str, str]] = None, dotenv_path: Optional[str] = None) -> DashboardSettings:
    """Read MARKET_* settings; a .env file fills in variables not already set."""
    if env is None:
        load_dotenv(dotenv_path)
        env = os.environ

    data_source = (env.get("MARKET_DATA_SOURCE") or "").strip() or DEFAULT_DATA_SOURCE

    timeout = env.get("MARKET_DATA_TIMEOUT", DEFAULT_TIMEOUT)
    try:
        timeout = float(timeout)
    except (TypeError, ValueError):
        timeout = DEFAULT_TIMEOUT
    if timeout <= 0:
        timeout = DEFAULT_TIMEOUT

    default_metric = (env.get("MARKET_DEFAULT_METRIC") or "").strip()
    if default_metric not in METRICS_BY_KEY:
        default_metric = DEFAULT_TREND_METRIC

    log_level = (env.get("MARKET_LOG_LEVEL") or "INFO").strip().upper()
    if not isinstance(logging.getLevelName(log_level), int):
        log_level = "INFO"

    origins = [o.strip() for o in (env.get("MARKET_API_CORS_ORIGINS") or "").split(",") if o.strip()]
    return DashboardSettings(
        data_source=data_source,
        request_timeout=timeout,
        default_metric=default_metric,
        log_level=log_level,
        cors_origins=origins or list(DEFAULT_CORS_ORIGINS),
    )


def configure_logging(settings: DashboardSettings) -> None:
    logging.basicConfig(level=settings.log_level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
