"""Fixed station list and per-m³ price matrix for freight quotes."""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping


@dataclass(frozen=True)
class Station:
    """A dockable station that can be used as pickup or destination."""

    id: str
    name: str
    system: str
    system_id: int

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "system": self.system,
            "systemId": self.system_id,
        }


@dataclass(frozen=True)
class RouteTable:
    """Read-only route configuration consumed by the calculator.

    ``price_matrix`` maps ``from_station_id -> to_station_id -> ISK per m³``.
    A missing inner key means the ordered route is not offered.
    """

    stations: tuple[Station, ...]
    price_matrix: Mapping[str, Mapping[str, float]]
    max_volume: float
    max_collateral: float
    collateral_percentage: float
    default_pickup_station: str
    default_destination_station: str


def _freeze(matrix: dict) -> Mapping[str, Mapping[str, float]]:
    return MappingProxyType({k: MappingProxyType(dict(v)) for k, v in matrix.items()})


STATIONS = (
    Station("jita-iv-moon-4", "Jita IV - Moon 4 - Caldari Navy Assembly Plant", "Jita", 30000142),
    Station("saminer", "Saminer - Stain is for Stain People", "Saminer", 30001721),
    Station("t-nnjz", "T-NNJZ - meow meow", "T-NNJZ", 30001959),
    Station("z-xmuc", "Z-XMUC - Ends of Invention", "Z-XMUC", 30001929),
    Station("o-fthe", "O-FTHE - Good Sax Nightmare Dealership", "O-FTHE", 30001938),
    Station("y-4u62", "Y-4U62 - Neural-Link Giga Factory", "Y-4U62", 30001932),
    Station("37s-ko-vi-moon-14", "37S-KO VI - Moon 14 - True Creations Assembly Plant", "37S-KO", 30001868),
)

# Highsec legs are cheap, anything touching nullsec is a flat 650 ISK/m³.
HIGHSEC_RATE = 300
NULLSEC_RATE = 650

_IDS = [s.id for s in STATIONS]


def _build_matrix() -> dict:
    matrix = {src: {dst: NULLSEC_RATE for dst in _IDS} for src in _IDS}
    matrix["jita-iv-moon-4"]["saminer"] = HIGHSEC_RATE
    matrix["saminer"]["jita-iv-moon-4"] = HIGHSEC_RATE
    matrix["jita-iv-moon-4"]["jita-iv-moon-4"] = 0
    matrix["saminer"]["saminer"] = 0
    matrix["o-fthe"]["37s-ko-vi-moon-14"] = 0
    return matrix


DEFAULT_ROUTE_TABLE = RouteTable(
    stations=STATIONS,
    price_matrix=_freeze(_build_matrix()),
    max_volume=345_000,
    max_collateral=3_000_000_000,
    collateral_percentage=0.01,
    default_pickup_station="jita-iv-moon-4",
    default_destination_station="y-4u62",
)
