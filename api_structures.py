# Defines the standardized, internal data structures for the application.

from dataclasses import dataclass


@dataclass(frozen=True)
class Coordinates:
    """A standardized representation of geographic coordinates."""
    lat: float
    lon: float


@dataclass(frozen=True)
class Zone:
    """A configured delivery zone: a flat fee shared by a group of neighborhoods."""
    name: str
    fee: float
    neighborhoods: tuple[str, ...]


@dataclass(frozen=True)
class DistrictEntry:
    """A single district to measure, with the fee of the zone it belongs to."""
    name: str
    base_fee: float


@dataclass
class DistanceResult:
    """Estimated road distance and delivery fee for one district.

    km is None when the district could not be geocoded; fee then holds the
    district's configured base fee.
    """
    km: float | None
    fee: float

    def to_dict(self) -> dict:
        return {'km': self.km, 'fee': self.fee}
