"""Freight price calculation over a fixed route table."""

from typing import Optional

from haulquote.stations import DEFAULT_ROUTE_TABLE, RouteTable, Station


class PriceCalculationError(Exception):
    """Raised for any invalid quote request (bad station, bounds, system id)."""


def get_station_by_id(station_id: str,
                      table: RouteTable = DEFAULT_ROUTE_TABLE) -> Optional[Station]:
    """Return the station with *station_id*, or ``None``."""
    for station in table.stations:
        if station.id == station_id:
            return station
    return None


def get_all_stations(table: RouteTable = DEFAULT_ROUTE_TABLE) -> list[Station]:
    return list(table.stations)


def get_max_values(table: RouteTable = DEFAULT_ROUTE_TABLE) -> dict:
    return {"maxVolume": table.max_volume, "maxCollateral": table.max_collateral}


def validate_calculation_request(pickup_station_id: str,
                                 destination_station_id: str,
                                 volume: float,
                                 collateral: float,
                                 table: RouteTable = DEFAULT_ROUTE_TABLE) -> None:
    """Check a quote request against the route table.

    Raises:
        PriceCalculationError: On the first failed check, in this order:
            missing station ids, volume bounds, collateral bounds,
            unknown pickup, unknown destination, route not offered.
    """
    if not pickup_station_id or not destination_station_id:
        raise PriceCalculationError("Pickup and destination stations are required")

    # NaN and inf fail both range checks.
    if not (0 < volume <= table.max_volume):
        raise PriceCalculationError(
            f"Volume must be between 0 and {table.max_volume:,} m³"
        )

    if not (0 <= collateral <= table.max_collateral):
        raise PriceCalculationError(
            f"Collateral must be between 0 and {table.max_collateral:,} ISK"
        )

    if get_station_by_id(pickup_station_id, table) is None:
        raise PriceCalculationError("Invalid pickup station")

    if get_station_by_id(destination_station_id, table) is None:
        raise PriceCalculationError("Invalid destination station")

    rates = table.price_matrix.get(pickup_station_id, {})
    if destination_station_id not in rates:
        raise PriceCalculationError("Price route not available")


def calculate_price(pickup_station_id: str,
                    destination_station_id: str,
                    volume: float,
                    collateral: float,
                    table: RouteTable = DEFAULT_ROUTE_TABLE) -> dict:
    """Quote a delivery between two stations.

    Args:
        pickup_station_id: Station the cargo is picked up from.
        destination_station_id: Station the cargo is delivered to.
        volume: Cargo volume in m³.
        collateral: Collateral in ISK.
        table: Route table to price against.

    Returns:
        ``{"basePrice", "collateralFee", "totalPrice", "pickupStation",
        "destinationStation", "volume", "collateral"}`` where the station
        fields are display names.

    Raises:
        PriceCalculationError: If the request fails validation.
    """
    validate_calculation_request(
        pickup_station_id, destination_station_id, volume, collateral, table,
    )

    pickup = get_station_by_id(pickup_station_id, table)
    destination = get_station_by_id(destination_station_id, table)

    rate = table.price_matrix[pickup_station_id][destination_station_id]
    base_price = rate * volume
    collateral_fee = collateral * table.collateral_percentage

    return {
        "basePrice": base_price,
        "collateralFee": collateral_fee,
        "totalPrice": base_price + collateral_fee,
        "pickupStation": pickup.name,
        "destinationStation": destination.name,
        "volume": volume,
        "collateral": collateral,
    }


def resolve_station_from_system_id(system_id: int,
                                   table: RouteTable = DEFAULT_ROUTE_TABLE) -> str:
    """Map a solar system id to the single station quoted in that system."""
    matches = [s for s in table.stations if s.system_id == system_id]

    if not matches:
        raise PriceCalculationError(f"No stations found in system with ID {system_id}")

    if len(matches) > 1:
        raise PriceCalculationError(
            f"Multiple stations found in system {matches[0].system}. "
            "Please specify station ID."
        )

    return matches[0].id


def _resolve_side(side: str, station_id: Optional[str], system_id: Optional[int],
                  table: RouteTable) -> str:
    if station_id:
        return station_id
    if system_id:
        return resolve_station_from_system_id(system_id, table)
    raise PriceCalculationError(f"Either {side}StationId or {side}SystemId is required")


def resolve_public_request(pickup_station_id: Optional[str] = None,
                           pickup_system_id: Optional[int] = None,
                           destination_station_id: Optional[str] = None,
                           destination_system_id: Optional[int] = None,
                           table: RouteTable = DEFAULT_ROUTE_TABLE) -> tuple[str, str]:
    """Turn a public request (station or system id per side) into station ids.

    A station id takes precedence over a system id on the same side.

    Returns:
        ``(pickup_station_id, destination_station_id)``.
    """
    pickup = _resolve_side("pickup", pickup_station_id, pickup_system_id, table)
    destination = _resolve_side(
        "destination", destination_station_id, destination_system_id, table,
    )
    return pickup, destination
