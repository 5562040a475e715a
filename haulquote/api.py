"""FastAPI server for Haul Quote freight pricing."""

import logging
from typing import Optional

from fastapi import APIRouter, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field
from starlette.middleware.base import BaseHTTPMiddleware

from haulquote import __version__
from haulquote.appraisal import appraise
from haulquote.config import Settings, load_settings
from haulquote.gate import PUBLIC_PREFIX, RequestGateMiddleware
from haulquote.pricing import (
    PriceCalculationError,
    calculate_price,
    get_all_stations,
    resolve_public_request,
)
from haulquote.rate_limiter import RateLimiter
from haulquote.stations import DEFAULT_ROUTE_TABLE, RouteTable

logger = logging.getLogger(__name__)

# ------------------------------------------------------------------
# Request bodies
# ------------------------------------------------------------------

class CalculatePriceRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    pickup_station_id: Optional[str] = Field(None, alias="pickupStationId")
    destination_station_id: Optional[str] = Field(None, alias="destinationStationId")
    volume: float
    collateral: float


class PublicCalculatePriceRequest(BaseModel):
    """Either a station id or a system id per side; station id wins."""

    model_config = ConfigDict(populate_by_name=True)

    pickup_station_id: Optional[str] = Field(None, alias="pickupStationId")
    pickup_system_id: Optional[int] = Field(None, alias="pickupSystemId")
    destination_station_id: Optional[str] = Field(None, alias="destinationStationId")
    destination_system_id: Optional[int] = Field(None, alias="destinationSystemId")
    volume: float
    collateral: float


class AppraisalRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    item_description: Optional[str] = Field(None, alias="itemDescription")
    estimated_value: float = Field(alias="estimatedValue")

# ------------------------------------------------------------------
# Error responses
# ------------------------------------------------------------------

def _error_response(status_code: int, error: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": error, "message": message, "statusCode": status_code},
    )


def _validation_error(message: str) -> JSONResponse:
    return _error_response(400, "Validation Error", message)


def _internal_error(message: str) -> JSONResponse:
    return _error_response(500, "Internal Server Error", message)


async def _request_validation_handler(request: Request,
                                      exc: RequestValidationError) -> JSONResponse:
    """Report malformed bodies with the same 400 shape as calculator errors."""
    errors = exc.errors()
    if not errors:
        return _validation_error("Invalid request body")
    first = errors[0]
    if first.get("type") == "json_invalid":
        return _validation_error("Invalid JSON body")
    field_path = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    message = first.get("msg", "Invalid value")
    return _validation_error(f"{field_path}: {message}" if field_path else message)


async def _unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last resort for failures outside a route's own error handling."""
    logger.error("Unhandled error on %s %s", request.method, request.url.path,
                 exc_info=exc)
    return _internal_error("An unexpected error occurred")

# ------------------------------------------------------------------
# Security headers middleware
# ------------------------------------------------------------------

class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        return response

# ------------------------------------------------------------------
# Internal endpoints (origin-gated)
# ------------------------------------------------------------------

internal_router = APIRouter(prefix="/api")


@internal_router.post("/calculate-price")
async def calculate(body: CalculatePriceRequest, request: Request):
    """Quote a delivery between two station ids."""
    try:
        return calculate_price(
            body.pickup_station_id,
            body.destination_station_id,
            body.volume,
            body.collateral,
            table=request.app.state.route_table,
        )
    except PriceCalculationError as exc:
        return _validation_error(str(exc))
    except Exception:
        logger.exception("Price calculation error")
        return _internal_error("An unexpected error occurred while calculating the price")


@internal_router.get("/calculate-price")
async def calculate_wrong_method() -> JSONResponse:
    return JSONResponse(
        status_code=405,
        content={"message": "Use POST method to calculate delivery price"},
    )


@internal_router.post("/appraisal")
async def appraisal(body: AppraisalRequest):
    """Estimate an item's value for collateral purposes."""
    try:
        return appraise(body.item_description, body.estimated_value)
    except PriceCalculationError as exc:
        return _validation_error(str(exc))
    except Exception:
        logger.exception("Appraisal error")
        return _internal_error("An unexpected error occurred during appraisal")


@internal_router.get("/appraisal")
async def appraisal_wrong_method() -> JSONResponse:
    return JSONResponse(
        status_code=405,
        content={"message": "Use POST method to request an appraisal"},
    )

# ------------------------------------------------------------------
# Public endpoints (rate-limited, CORS-open)
# ------------------------------------------------------------------

public_router = APIRouter()


@public_router.post("/calculate")
async def public_calculate(body: PublicCalculatePriceRequest, request: Request):
    """Quote a delivery; each side may be given as a station id or a system id."""
    table = request.app.state.route_table
    try:
        pickup, destination = resolve_public_request(
            pickup_station_id=body.pickup_station_id,
            pickup_system_id=body.pickup_system_id,
            destination_station_id=body.destination_station_id,
            destination_system_id=body.destination_system_id,
            table=table,
        )
        return calculate_price(pickup, destination, body.volume, body.collateral, table=table)
    except PriceCalculationError as exc:
        return _validation_error(str(exc))
    except Exception:
        logger.exception("Public price calculation error")
        return _internal_error("An unexpected error occurred while calculating the price")


@public_router.get("/stations")
async def public_stations(request: Request) -> list[dict]:
    """All stations that can be quoted."""
    return [s.to_dict() for s in get_all_stations(request.app.state.route_table)]

# ------------------------------------------------------------------
# App setup
# ------------------------------------------------------------------

def _public_app(table: RouteTable) -> FastAPI:
    public = FastAPI(
        title="Haul Quote Public API",
        description="Rate-limited freight quotes between EVE Online stations.",
        version=__version__,
    )
    public.state.route_table = table
    public.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )
    public.add_exception_handler(RequestValidationError, _request_validation_handler)
    public.add_exception_handler(Exception, _unexpected_error_handler)
    public.include_router(public_router)
    return public


def create_app(settings: Optional[Settings] = None,
               limiter: Optional[RateLimiter] = None,
               table: RouteTable = DEFAULT_ROUTE_TABLE) -> FastAPI:
    """Build the application around one explicitly owned rate limiter.

    Args:
        settings: Origin and rate-limit configuration. Read from the
            environment when omitted.
        limiter: Limiter shared by all public requests. Built from
            *settings* when omitted.
        table: Route table used for pricing.
    """
    settings = settings or load_settings()
    if limiter is None:
        limiter = RateLimiter(
            window_ms=settings.rate_limit_window_ms,
            max_requests=settings.rate_limit_max_requests,
        )

    app = FastAPI(
        title="Haul Quote API",
        description="Freight pricing between fixed EVE Online stations.",
        version=__version__,
    )
    app.state.settings = settings
    app.state.rate_limiter = limiter
    app.state.route_table = table

    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(Exception, _unexpected_error_handler)
    app.include_router(internal_router)
    app.mount(PUBLIC_PREFIX, _public_app(table))

    @app.get("/health")
    async def health() -> dict:
        """Health check."""
        return {"status": "ok"}

    app.add_middleware(
        RequestGateMiddleware,
        limiter=limiter,
        allowed_origins=settings.allowed_origins,
        exempt_identifiers=settings.no_rate_limit_ips,
    )
    app.add_middleware(SecurityHeadersMiddleware)
    return app


app = create_app()

# ------------------------------------------------------------------
# Runner: python -m haulquote.api
# ------------------------------------------------------------------

def run_server(host: str = "0.0.0.0", port: int = 8000, reload: bool = False) -> None:
    """Start the uvicorn server."""
    import uvicorn
    uvicorn.run("haulquote.api:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    run_server()
