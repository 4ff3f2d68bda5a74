# Distance and fee formulas. Pure functions, no I/O.

import math

from api_structures import Coordinates
from delivery_config import ROAD_FACTOR

EARTH_RADIUS_KM = 6371

# (inclusive upper bound in km, flat fee), checked in ascending order.
FEE_TIERS = (
    (5, 15),
    (10, 20),
    (15, 30),
    (20, 35),
    (25, 40),
    (40, 45),
)


def haversine_km(start: Coordinates, end: Coordinates) -> float:
    """Great-circle distance between two points, in kilometers."""
    d_lat = math.radians(end.lat - start.lat)
    d_lon = math.radians(end.lon - start.lon)
    a = (math.sin(d_lat / 2) ** 2
         + math.cos(math.radians(start.lat)) * math.cos(math.radians(end.lat))
         * math.sin(d_lon / 2) ** 2)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def round_km(km: float) -> float:
    """Rounds to 0.1 km, halves going up (2.25 -> 2.3, unlike round())."""
    return math.floor(km * 10 + 0.5) / 10


def road_distance_km(hub: Coordinates, target: Coordinates, road_factor: float = ROAD_FACTOR) -> float:
    """Approximates driving distance from the straight line, rounded to 0.1 km."""
    return round_km(haversine_km(hub, target) * road_factor)


def distance_to_zone_fee(km: float) -> float | None:
    """Returns the flat fee for a distance, or None if it is beyond every tier."""
    for max_km, fee in FEE_TIERS:
        if km <= max_km:
            return fee
    return None


def resolve_fee(km: float | None, base_fee: float) -> float:
    # Failed lookups and far-away districts keep the zone's configured fee.
    if km is None:
        return base_fee
    fee = distance_to_zone_fee(km)
    return fee if fee is not None else base_fee
