# gpxstat/model/point.py
"""
A single GPS sample and the great-circle distance between two samples.
"""

from __future__ import annotations

import datetime as dt
import math
from dataclasses import dataclass
from typing import Optional

# Mean Earth radius used by every distance in gpxstat (km)
EARTH_RADIUS_KM = 6371.0


def as_utc(value: Optional[dt.datetime]) -> Optional[dt.datetime]:
    """Return `value` as a tz-aware UTC datetime (naive values are taken as UTC)."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=dt.timezone.utc)
    return value.astimezone(dt.timezone.utc)


@dataclass(frozen=True)
class Point:
    """
    One recorded position.

    Coordinates are WGS84 decimal degrees and are not range-checked;
    malformed values pass through unchanged.
    """
    lat: float
    lon: float
    elevation: Optional[float] = None
    time: Optional[dt.datetime] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "time", as_utc(self.time))

    def has_elevation(self) -> bool:
        return self.elevation is not None

    def has_time(self) -> bool:
        return self.time is not None

    def distance_to(self, other: "Point") -> float:
        """Great-circle distance to `other` in kilometres."""
        return haversine_distance(self, other)


def haversine_distance(a: Point, b: Point) -> float:
    """
    Great-circle distance between two points in kilometres.

    Uses the atan2 form of the haversine formula, which stays well-defined
    for antipodal points.
    """
    lat1 = math.radians(a.lat)
    lat2 = math.radians(b.lat)
    dlat = math.radians(b.lat - a.lat)
    dlon = math.radians(b.lon - a.lon)

    hav = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    # Rounding can push hav just past 1.0 for antipodes; NaN passes through.
    hav = min(max(hav, 0.0), 1.0)
    return 2 * EARTH_RADIUS_KM * math.atan2(math.sqrt(hav), math.sqrt(1 - hav))
