# gpxstat/model/waypoint.py
"""
Waypoints: named points of interest, independent of any track.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Optional

from gpxstat.model.point import as_utc


@dataclass(frozen=True)
class Waypoint:
    lat: float
    lon: float
    name: Optional[str] = None
    elevation: Optional[float] = None
    time: Optional[dt.datetime] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "time", as_utc(self.time))

    def has_elevation(self) -> bool:
        return self.elevation is not None

    def has_time(self) -> bool:
        return self.time is not None

    def display_name(self) -> str:
        """Stored name, or a coordinate label when the waypoint is unnamed."""
        if self.name is not None:
            return self.name
        return f"Waypoint ({self.lat:.4f}, {self.lon:.4f})"

    def description(self) -> str:
        """
        One-line summary, e.g.

          Summit at (46.558200, 7.977800), elevation: 4158.0m, time: 2024-07-11 10:00:00 UTC

        Elevation and time are appended only when present.
        """
        desc = f"{self.display_name()} at ({self.lat:.6f}, {self.lon:.6f})"
        if self.elevation is not None:
            desc += f", elevation: {self.elevation:.1f}m"
        if self.time is not None:
            desc += f", time: {self.time:%Y-%m-%d %H:%M:%S} UTC"
        return desc
