"""Runtime settings read from the environment (and ``.env`` when present)."""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from haulquote.rate_limiter import DEFAULT_MAX_REQUESTS, DEFAULT_WINDOW_MS

DEFAULT_ALLOWED_ORIGINS = "http://localhost:3000,http://127.0.0.1:3000"


class ConfigError(ValueError):
    """Raised when an environment variable holds an unusable value."""


@dataclass(frozen=True)
class Settings:
    allowed_origins: tuple[str, ...] = ()
    no_rate_limit_ips: tuple[str, ...] = ()
    rate_limit_window_ms: int = DEFAULT_WINDOW_MS
    rate_limit_max_requests: int = DEFAULT_MAX_REQUESTS


def _load_env() -> None:
    """Load .env file if present."""
    load_dotenv()


def parse_list(raw: Optional[str]) -> tuple[str, ...]:
    """Split a comma-separated value, dropping blanks."""
    if not raw:
        return ()
    return tuple(item.strip() for item in raw.split(",") if item.strip())


def _positive_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from None
    if value <= 0:
        raise ConfigError(f"{name} must be positive, got {value}")
    return value


def load_settings() -> Settings:
    """Build :class:`Settings` from ``ALLOWED_ORIGINS``, ``NO_RATE_LIMIT_IPS``,
    ``RATE_LIMIT_WINDOW_MS`` and ``RATE_LIMIT_MAX_REQUESTS``.
    """
    _load_env()
    return Settings(
        allowed_origins=parse_list(os.getenv("ALLOWED_ORIGINS", DEFAULT_ALLOWED_ORIGINS)),
        no_rate_limit_ips=parse_list(os.getenv("NO_RATE_LIMIT_IPS")),
        rate_limit_window_ms=_positive_int("RATE_LIMIT_WINDOW_MS", DEFAULT_WINDOW_MS),
        rate_limit_max_requests=_positive_int("RATE_LIMIT_MAX_REQUESTS", DEFAULT_MAX_REQUESTS),
    )
