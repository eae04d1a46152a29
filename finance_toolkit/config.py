"""Environment-driven settings shared by the command line and web front ends."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

DEFAULT_RATES_URL = "https://api.exchangerate.host/latest?base=USD"
DEFAULT_RATE_CACHE_URL = "sqlite:///rate_cache.sqlite3"


@dataclass(frozen=True)
class Settings:
    rates_url: str = DEFAULT_RATES_URL
    rate_cache_url: str = DEFAULT_RATE_CACHE_URL
    fetch_timeout: float = 10.0
    max_extra_months: int = 1000
    log_level: str = "WARNING"
    secret_key: str = "dev-secret-key"


def _env_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        logging.getLogger(__name__).warning("Ignoring invalid %s=%r", name, raw)
        return default


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """Read settings from ``env`` (``os.environ`` by default)."""
    env = os.environ if env is None else env
    return Settings(
        rates_url=env.get("FINANCE_TOOLKIT_RATES_URL", DEFAULT_RATES_URL),
        rate_cache_url=env.get("FINANCE_TOOLKIT_RATE_CACHE_URL", DEFAULT_RATE_CACHE_URL),
        fetch_timeout=_env_float(env, "FINANCE_TOOLKIT_FETCH_TIMEOUT", 10.0),
        max_extra_months=int(_env_float(env, "FINANCE_TOOLKIT_MAX_EXTRA_MONTHS", 1000)),
        log_level=env.get("FINANCE_TOOLKIT_LOG_LEVEL", "WARNING").upper(),
        secret_key=env.get("FLASK_SECRET_KEY", "dev-secret-key"),
    )


def configure_logging(settings: Settings) -> None:
    level = getattr(logging, settings.log_level, logging.WARNING)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
