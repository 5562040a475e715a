"""Haul Quote: freight pricing between fixed EVE Online stations."""

__version__ = "0.3.0"

from haulquote.pricing import PriceCalculationError, calculate_price
from haulquote.rate_limiter import RateLimiter, RateLimitResult
from haulquote.stations import DEFAULT_ROUTE_TABLE, RouteTable, Station

__all__ = [
    "PriceCalculationError", "calculate_price",
    "RateLimiter", "RateLimitResult",
    "DEFAULT_ROUTE_TABLE", "RouteTable", "Station",
]
