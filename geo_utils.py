"""
Distance, ETA and fare calculations for ride quotes.

All functions are pure. Coordinates are validated on construction so that
unparseable client input fails loudly instead of turning into NaN text.
"""

import math
from dataclasses import dataclass
from typing import Any, Dict

EARTH_RADIUS_KM = 6371
AVERAGE_SPEED_KMH = 40
BASE_FARE = 50
RATE_PER_KM = 10


@dataclass(frozen=True)
class Coordinates:
    latitude: float
    longitude: float

    def __post_init__(self):
        for name, value, limit in (('latitude', self.latitude, 90), ('longitude', self.longitude, 180)):
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValueError(f"{name} must be a number, got {value!r}")
            if not math.isfinite(value):
                raise ValueError(f"{name} must be finite, got {value!r}")
            if abs(value) > limit:
                raise ValueError(f"{name} out of range: {value}")

    @classmethod
    def parse(cls, latitude: Any, longitude: Any) -> 'Coordinates':
        """Build from strings or numbers, e.g. geocoder or form output."""
        try:
            return cls(float(latitude), float(longitude))
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid coordinates ({latitude!r}, {longitude!r}): {e}") from e


def distance(a: Coordinates, b: Coordinates) -> float:
    """Great-circle distance in km using the Haversine formula, 2 decimals."""
    lat1, lon1, lat2, lon2 = map(math.radians, [a.latitude, a.longitude, b.latitude, b.longitude])
    dlat = lat2 - lat1
    dlon = lon2 - lon1

    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))

    return round(EARTH_RADIUS_KM * c, 2)


def eta(distance_km: float) -> int:
    """Travel time in whole minutes at a constant average speed (halves round up)."""
    minutes = distance_km / AVERAGE_SPEED_KMH * 60
    return int(math.floor(minutes + 0.5))


def fare(distance_km: float) -> str:
    return f"{BASE_FARE + RATE_PER_KM * distance_km:.2f}"


def trip_quote(a: Coordinates, b: Coordinates) -> Dict[str, Any]:
    km = distance(a, b)
    return {
        'distance_km': km,
        'eta_minutes': eta(km),
        'fare': fare(km),
    }
