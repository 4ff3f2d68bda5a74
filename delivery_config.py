# Static delivery configuration: the hub, the zone list and the geocoding tweaks.

import os
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType

from dotenv import load_dotenv

from api_structures import Coordinates, DistrictEntry, Zone

# --- Fixed Values ---
HUB = Coordinates(lat=24.695074, lon=46.792129)
ROAD_FACTOR = 1.3
# Bounding box for Riyadh as "min_lon,min_lat,max_lon,max_lat".
VIEWBOX = "46.4,24.4,47.2,25.4"
DEFAULT_USER_AGENT = "DistrictFlowers-DeliveryCalc/1.0"
DEFAULT_REQUEST_DELAY_SEC = 1.1  # Nominatim allows one request per second.
DEFAULT_REQUEST_TIMEOUT_SEC = 10.0
DEFAULT_OUTPUT_PATH = "distances-output.json"

# Districts where the search service returns a wrong or different location.
MANUAL_COORDS = MappingProxyType({
    "Al Malqa": Coordinates(lat=24.8008, lon=46.5978),  # N Riyadh, ~30 km by road
    "Al Rimal": Coordinates(lat=24.698, lon=46.805),    # next to Al Rawabi
})

# Districts that do not geocode under their display name.
FALLBACK_QUERIES = MappingProxyType({
    "Al Naseem East": "Al Naseem Riyadh Saudi Arabia",
    "Al Naseem West": "Al Naseem Riyadh Saudi Arabia",
    "KAFD": "King Abdullah Financial District Riyadh Saudi Arabia",
    "Al Dar Al Baida": "Al Dar Al Baida Riyadh Saudi Arabia",
    "Ad Dirah": "Ad Dirah Riyadh Saudi Arabia",
    "As Saadah": "As Saadah Riyadh Saudi Arabia",
    "As Salhiyah": "As Salhiyah Riyadh Saudi Arabia",
    "Al Sinaiyah": "Al Sinaiyah Riyadh Saudi Arabia",
    "An Nada": "An Nada Riyadh Saudi Arabia",
    "An Nafal": "An Nafal Riyadh Saudi Arabia",
    "An Namudhajiyah": "An Namudhajiyah Riyadh Saudi Arabia",
})

DELIVERY_ZONES = (
    Zone(name="Zone A", fee=15, neighborhoods=(
        "Al Rimal", "Al Rawabi", "Al Naseem East", "Al Naseem West",
        "As Salam", "Al Manar",
    )),
    Zone(name="Zone B", fee=20, neighborhoods=(
        "Al Rawdah", "Al Quds", "An Nahdah", "Al Khaleej", "Ishbiliyah",
        "Al Hamra", "As Saadah",
    )),
    Zone(name="Zone C", fee=30, neighborhoods=(
        "Al Malaz", "Al Rabwah", "Al Andalus", "Granada", "Al Yarmuk",
        "Qurtubah", "Al Jazirah", "As Salhiyah",
    )),
    Zone(name="Zone D", fee=35, neighborhoods=(
        "Al Olaya", "As Sulimaniyah", "Al Wurud", "Al Murabba", "Ad Dirah",
        "Al Sinaiyah", "An Nada", "An Nafal", "Al Izdihar", "An Namudhajiyah",
    )),
    Zone(name="Zone E", fee=40, neighborhoods=(
        "KAFD", "Al Yasmin", "Al Sahafa", "Al Aqiq", "Al Ghadir",
        "Al Nakheel", "Al Dar Al Baida",
    )),
    Zone(name="Zone F", fee=45, neighborhoods=(
        "Al Malqa", "Hittin", "Al Narjis", "Al Arid", "Al Qirawan",
        "Dhahrat Laban", "Al Suwaidi",
    )),
)


def flatten_zones(zones) -> list[DistrictEntry]:
    """Flattens zones into districts in configuration order.

    A name listed in several zones is measured once, at its first position,
    with the fee of the last zone that lists it.
    """
    fees = {}
    for zone in zones:
        for name in zone.neighborhoods:
            fees[name] = zone.fee
    return [DistrictEntry(name=name, base_fee=fee) for name, fee in fees.items()]


@dataclass(frozen=True)
class CalculatorSettings:
    """Everything the batch run needs besides the district list itself."""
    hub: Coordinates = HUB
    road_factor: float = ROAD_FACTOR
    request_delay_sec: float = DEFAULT_REQUEST_DELAY_SEC
    request_timeout_sec: float = DEFAULT_REQUEST_TIMEOUT_SEC
    viewbox: str = VIEWBOX
    user_agent: str = DEFAULT_USER_AGENT
    output_path: str = DEFAULT_OUTPUT_PATH
    manual_coords: Mapping[str, Coordinates] = field(default_factory=lambda: MANUAL_COORDS)
    fallback_queries: Mapping[str, str] = field(default_factory=lambda: FALLBACK_QUERIES)

    def __post_init__(self):
        # Freeze caller-supplied dicts as well.
        object.__setattr__(self, 'manual_coords',
                           MappingProxyType(dict(self.manual_coords)))
        object.__setattr__(self, 'fallback_queries',
                           MappingProxyType(dict(self.fallback_queries)))


def _read_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(
            f"FATAL ERROR: The {name} environment variable must be a number, got '{raw}'.")
    if value < 0:
        raise ValueError(
            f"FATAL ERROR: The {name} environment variable must not be negative.")
    return value


def load_settings(**overrides) -> CalculatorSettings:
    """Builds settings from the defaults above, the environment (.env included) and explicit overrides."""
    load_dotenv()
    settings = CalculatorSettings(
        request_delay_sec=_read_float(
            "NOMINATIM_DELAY_SEC", DEFAULT_REQUEST_DELAY_SEC),
        request_timeout_sec=_read_float(
            "NOMINATIM_TIMEOUT_SEC", DEFAULT_REQUEST_TIMEOUT_SEC),
        user_agent=os.getenv("NOMINATIM_USER_AGENT") or DEFAULT_USER_AGENT,
        output_path=os.getenv("DISTANCES_OUTPUT_PATH") or DEFAULT_OUTPUT_PATH,
    )
    overrides = {k: v for k, v in overrides.items() if v is not None}
    if overrides:
        settings = replace(settings, **overrides)
    return settings
