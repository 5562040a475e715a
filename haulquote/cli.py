"""Command-line interface for Haul Quote."""

import logging
import sys

import click
from rich.console import Console

from haulquote.formatter import format_error, format_quote, format_stations
from haulquote.pricing import (
    PriceCalculationError,
    calculate_price,
    get_all_stations,
    resolve_station_from_system_id,
)

console = Console()


def _resolve(location: str) -> str:
    """All-digit arguments are solar system ids, anything else a station id."""
    if location.isdigit():
        return resolve_station_from_system_id(int(location))
    return location


@click.group()
def main() -> None:
    """Quote freight between fixed EVE Online stations."""


@main.command()
@click.argument("pickup")
@click.argument("destination")
@click.option("--volume", "-V", type=float, required=True, help="Cargo volume in m³.")
@click.option("--collateral", "-c", type=float, default=0.0, show_default=True,
              help="Collateral in ISK.")
def quote(pickup: str, destination: str, volume: float, collateral: float) -> None:
    """Price a delivery from PICKUP to DESTINATION.

    Each location is a station id or a solar system id.

    \b
    Examples:
        haulquote quote jita-iv-moon-4 saminer --volume 1000 --collateral 1000000
        haulquote quote 30000142 y-4u62 -V 12000
    """
    try:
        result = calculate_price(_resolve(pickup), _resolve(destination), volume, collateral)
    except PriceCalculationError as exc:
        console.print(format_error({"error": "validation_error", "message": str(exc)}))
        sys.exit(1)

    console.print(format_quote(result))


@main.command()
def stations() -> None:
    """List the stations that can be quoted."""
    console.print(format_stations(get_all_stations()))


@main.command()
@click.option("--host", default="0.0.0.0", show_default=True)
@click.option("--port", default=8000, show_default=True, type=int)
@click.option("--reload", is_flag=True, default=False, help="Restart on code changes.")
def serve(host: str, port: int, reload: bool) -> None:
    """Run the HTTP API with uvicorn."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(message)s",
        datefmt="%H:%M:%S",
    )
    from haulquote.api import run_server
    run_server(host=host, port=port, reload=reload)
