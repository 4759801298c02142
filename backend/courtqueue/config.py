"""Application configuration."""
import os
from functools import lru_cache

from .constants import DEFAULT_COURT_COUNT, STORAGE_PREFIX


def _int_env(name: str, default: int) -> int:
    try:
        return int(os.environ.get(name, default))
    except ValueError:
        return default


@lru_cache
def get_config():
    return type("Config", (), {
        "storage_dir": os.environ.get("COURTQUEUE_STORAGE_DIR", ""),
        "storage_prefix": os.environ.get("COURTQUEUE_STORAGE_PREFIX", STORAGE_PREFIX),
        "default_courts": _int_env("COURTQUEUE_DEFAULT_COURTS", DEFAULT_COURT_COUNT),
        "clock_refresh_seconds": _int_env("COURTQUEUE_CLOCK_REFRESH_SECONDS", 30),
        "debug": os.environ.get("DEBUG", "0").lower() in ("1", "true", "yes"),
        "allowed_origins": os.environ.get("ALLOWED_ORIGINS", "*").split(","),
    })()
