"""Unit tests for the freight price calculator."""

import pytest

from haulquote.pricing import (
    PriceCalculationError,
    calculate_price,
    get_all_stations,
    get_max_values,
    get_station_by_id,
    resolve_public_request,
    resolve_station_from_system_id,
)
from haulquote.stations import DEFAULT_ROUTE_TABLE, RouteTable, Station


JITA = "jita-iv-moon-4"
SAMINER = "saminer"
Y4U62 = "y-4u62"

TWIN_TABLE = RouteTable(
    stations=(
        Station("alpha", "Alpha I - Yard", "Alpha", 1),
        Station("alpha-2", "Alpha II - Depot", "Alpha", 1),
        Station("beta", "Beta I - Hub", "Beta", 2),
    ),
    price_matrix={"alpha": {"beta": 100}, "beta": {"alpha": 100}},
    max_volume=1_000,
    max_collateral=1_000_000,
    collateral_percentage=0.05,
    default_pickup_station="alpha",
    default_destination_station="beta",
)


# -- calculate_price ------------------------------------------------------- #

def test_calculate_price_example():
    """300 ISK/m³ × 1000 m³ plus 1% of 1,000,000 collateral."""
    quote = calculate_price(JITA, SAMINER, 1000, 1_000_000)

    assert quote["basePrice"] == 300_000
    assert quote["collateralFee"] == 10_000
    assert quote["totalPrice"] == 310_000
    assert quote["pickupStation"] == "Jita IV - Moon 4 - Caldari Navy Assembly Plant"
    assert quote["destinationStation"] == "Saminer - Stain is for Stain People"
    assert quote["volume"] == 1000
    assert quote["collateral"] == 1_000_000


def test_calculate_price_nullsec_rate():
    """Routes into nullsec use the flat 650 ISK/m³ rate."""
    quote = calculate_price(JITA, Y4U62, 10, 0)
    assert quote["basePrice"] == 6_500
    assert quote["collateralFee"] == 0
    assert quote["totalPrice"] == 6_500


def test_calculate_price_uses_injected_table():
    """The table argument replaces the default routes and percentage."""
    quote = calculate_price("alpha", "beta", 10, 1_000, table=TWIN_TABLE)
    assert quote["basePrice"] == 1_000
    assert quote["collateralFee"] == 50
    assert quote["totalPrice"] == 1_050


@pytest.mark.parametrize("volume", [
    0, -5, DEFAULT_ROUTE_TABLE.max_volume + 1, float("nan"), float("inf"),
])
def test_volume_out_of_range(volume):
    """Volume must be positive and at most max_volume."""
    with pytest.raises(PriceCalculationError, match="Volume must be between"):
        calculate_price(JITA, SAMINER, volume, 0)


def test_volume_at_max_is_allowed():
    """max_volume itself is a valid volume."""
    quote = calculate_price(JITA, SAMINER, DEFAULT_ROUTE_TABLE.max_volume, 0)
    assert quote["basePrice"] == 300 * DEFAULT_ROUTE_TABLE.max_volume


@pytest.mark.parametrize("collateral", [
    -1, DEFAULT_ROUTE_TABLE.max_collateral + 1, float("nan"), float("inf"),
])
def test_collateral_out_of_range(collateral):
    """Collateral must be within [0, max_collateral]."""
    with pytest.raises(PriceCalculationError, match="Collateral must be between"):
        calculate_price(JITA, SAMINER, 100, collateral)


def test_missing_station_ids():
    """Empty station ids are rejected before anything else."""
    with pytest.raises(PriceCalculationError, match="required"):
        calculate_price("", SAMINER, 0, -1)
    with pytest.raises(PriceCalculationError, match="required"):
        calculate_price(JITA, None, 100, 0)


def test_unknown_pickup_station():
    with pytest.raises(PriceCalculationError, match="Invalid pickup station"):
        calculate_price("nowhere", SAMINER, 100, 0)


def test_unknown_destination_station():
    with pytest.raises(PriceCalculationError, match="Invalid destination station"):
        calculate_price(JITA, "nowhere", 100, 0)


def test_route_not_available():
    """Known stations without a rate for the ordered pair are rejected."""
    with pytest.raises(PriceCalculationError, match="Price route not available"):
        calculate_price("alpha", "alpha-2", 10, 0, table=TWIN_TABLE)


def test_same_station_route_is_free():
    """Jita to Jita is priced at zero per m³."""
    quote = calculate_price(JITA, JITA, 500, 100)
    assert quote["basePrice"] == 0
    assert quote["totalPrice"] == 1


# -- system id resolution -------------------------------------------------- #

def test_resolve_single_station_system():
    assert resolve_station_from_system_id(30000142) == JITA


def test_resolve_unknown_system():
    with pytest.raises(PriceCalculationError, match="No stations found in system with ID 42"):
        resolve_station_from_system_id(42)


def test_resolve_ambiguous_system():
    """A system holding several stations cannot be resolved."""
    with pytest.raises(PriceCalculationError, match="Multiple stations found in system Alpha"):
        resolve_station_from_system_id(1, table=TWIN_TABLE)


def test_resolve_public_request_by_system():
    pickup, destination = resolve_public_request(
        pickup_system_id=30000142, destination_system_id=30001721,
    )
    assert (pickup, destination) == (JITA, SAMINER)


def test_resolve_public_request_station_wins():
    """A station id beats a system id on the same side."""
    pickup, destination = resolve_public_request(
        pickup_station_id=SAMINER,
        pickup_system_id=30000142,
        destination_station_id=Y4U62,
    )
    assert (pickup, destination) == (SAMINER, Y4U62)


def test_resolve_public_request_missing_side():
    with pytest.raises(PriceCalculationError, match="destinationStationId or destinationSystemId"):
        resolve_public_request(pickup_station_id=JITA)
    with pytest.raises(PriceCalculationError, match="pickupStationId or pickupSystemId"):
        resolve_public_request(destination_station_id=JITA)


# -- lookups --------------------------------------------------------------- #

def test_station_lookups():
    assert get_station_by_id(SAMINER).system == "Saminer"
    assert get_station_by_id("nowhere") is None
    assert len(get_all_stations()) == 7
    assert get_max_values() == {"maxVolume": 345_000, "maxCollateral": 3_000_000_000}


def test_every_station_has_a_full_row():
    """The default matrix prices every ordered pair of known stations."""
    ids = [s.id for s in DEFAULT_ROUTE_TABLE.stations]
    for src in ids:
        assert set(DEFAULT_ROUTE_TABLE.price_matrix[src]) == set(ids)
