# gpxstat/analyze/statistics.py
"""
Immutable statistics snapshot for a GPX document.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Tuple

from gpxstat.analyze.metrics import format_duration


@dataclass(frozen=True)
class GpxStatistics:
    """
    Computed on demand by Gpx.statistics(); never cached or updated.

    Every Optional field is None when the underlying data is absent
    (no elevations, no timestamps, zero duration for speed).
    """
    total_tracks: int
    total_waypoints: int
    total_segments: int
    total_points: int
    total_distance_km: float
    elevation_range: Optional[Tuple[float, float]] = None
    elevation_gain: Optional[float] = None
    elevation_loss: Optional[float] = None
    duration_seconds: Optional[int] = None
    average_speed_kmh: Optional[float] = None

    def elevation_difference(self) -> Optional[float]:
        """Highest minus lowest elevation, or None."""
        if self.elevation_range is None:
            return None
        lo, hi = self.elevation_range
        return hi - lo

    def duration_formatted(self) -> Optional[str]:
        return format_duration(self.duration_seconds)

    def summary(self) -> str:
        lines = [
            "GPX Statistics:",
            f"- Tracks: {self.total_tracks}",
            f"- Waypoints: {self.total_waypoints}",
            f"- Segments: {self.total_segments}",
            f"- Points: {self.total_points}",
            f"- Distance: {self.total_distance_km:.2f} km",
        ]
        duration = self.duration_formatted()
        if duration is not None:
            lines.append(f"- Duration: {duration}")
        if self.average_speed_kmh is not None:
            lines.append(f"- Average speed: {self.average_speed_kmh:.2f} km/h")
        if self.elevation_range is not None:
            lo, hi = self.elevation_range
            lines.append(f"- Elevation range: {lo:.1f}m - {hi:.1f}m")
        if self.elevation_gain is not None:
            lines.append(f"- Elevation gain: {self.elevation_gain:.1f}m")
        if self.elevation_loss is not None:
            lines.append(f"- Elevation loss: {self.elevation_loss:.1f}m")
        return "\n".join(lines)

    def as_dict(self) -> dict[str, Any]:
        """Flat mapping for tabular output (range split into min/max)."""
        lo, hi = self.elevation_range if self.elevation_range is not None else (None, None)
        return {
            "tracks": self.total_tracks,
            "waypoints": self.total_waypoints,
            "segments": self.total_segments,
            "points": self.total_points,
            "distance_km": self.total_distance_km,
            "ele_min_m": lo,
            "ele_max_m": hi,
            "ele_gain_m": self.elevation_gain,
            "ele_loss_m": self.elevation_loss,
            "duration_s": self.duration_seconds,
            "avg_speed_kmh": self.average_speed_kmh,
        }
