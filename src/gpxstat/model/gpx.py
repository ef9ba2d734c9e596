# gpxstat/model/gpx.py
"""
The GPX document: root aggregate of tracks, waypoints and metadata, and the
statistics engine that walks it.

All metrics are recomputed on every call. They are O(points) and a single
GPS log holds a few thousand points, so nothing is cached.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple

from gpxstat.analyze import metrics
from gpxstat.analyze.statistics import GpxStatistics
from gpxstat.model.point import Point
from gpxstat.model.track import Track
from gpxstat.model.waypoint import Waypoint


@dataclass
class Metadata:
    # Raw text: document-level time formats vary more than point times do.
    time: Optional[str] = None


@dataclass
class Gpx:
    tracks: list[Track] = field(default_factory=list)
    waypoints: list[Waypoint] = field(default_factory=list)
    metadata: Optional[Metadata] = None
    # Root attributes; None means "write the default".
    version: Optional[str] = None
    creator: Optional[str] = None

    # ---------------------------
    # Construction / codec
    # ---------------------------
    @classmethod
    def from_xml(cls, text: str | bytes) -> "Gpx":
        """
        Decode GPX XML text.

        Raises:
          GpxDecodeError
        """
        from gpxstat.formats.gpx import decode
        return decode(text)

    def to_xml(self, *, pretty: bool = True) -> str:
        from gpxstat.formats.gpx import encode
        return encode(self, pretty=pretty)

    def __str__(self) -> str:
        return self.to_xml()

    def add_track(self, track: Track) -> None:
        self.tracks.append(track)

    def add_waypoint(self, waypoint: Waypoint) -> None:
        self.waypoints.append(waypoint)

    # ---------------------------
    # Plain queries
    # ---------------------------
    def is_empty(self) -> bool:
        return not self.tracks and not self.waypoints

    def date(self) -> Optional[str]:
        """Metadata time exactly as written in the file, or None."""
        if self.metadata is None:
            return None
        return self.metadata.time

    def all_points(self) -> list[Point]:
        """Every track point in document order (waypoints excluded)."""
        return [p for trk in self.tracks for p in trk.all_points()]

    def total_points(self) -> int:
        return sum(trk.total_points() for trk in self.tracks)

    def total_segments(self) -> int:
        return sum(len(trk.segments) for trk in self.tracks)

    def track_names(self) -> list[str]:
        return [trk.display_name() for trk in self.tracks]

    def waypoint_names(self) -> list[str]:
        return [wpt.display_name() for wpt in self.waypoints]

    # ---------------------------
    # Statistics engine
    # ---------------------------
    def total_distance_km(self) -> float:
        return sum((trk.total_distance_km() for trk in self.tracks), 0.0)

    def elevation_range(self) -> Optional[Tuple[float, float]]:
        return metrics.elevation_bounds(
            p.elevation for p in self.all_points() if p.elevation is not None
        )

    def _elevation_changes(self) -> Tuple[float, float, int]:
        # Pairs never straddle a segment or track boundary: a new segment is
        # a recording gap and must not produce an elevation delta.
        gain = loss = 0.0
        pairs = 0
        for trk in self.tracks:
            for seg in trk.segments:
                g, l, n = metrics.elevation_changes(seg.points)
                gain += g
                loss += l
                pairs += n
        return gain, loss, pairs

    def total_elevation_gain(self) -> Optional[float]:
        gain, _, pairs = self._elevation_changes()
        return gain if pairs else None

    def total_elevation_loss(self) -> Optional[float]:
        _, loss, pairs = self._elevation_changes()
        return loss if pairs else None

    def total_duration_seconds(self) -> Optional[int]:
        """Span between earliest and latest track-point time, whatever the point order."""
        return metrics.duration_seconds(p.time for p in self.all_points() if p.time is not None)

    def total_duration_formatted(self) -> Optional[str]:
        return metrics.format_duration(self.total_duration_seconds())

    def average_speed_kmh(self) -> Optional[float]:
        return metrics.average_speed_kmh(self.total_distance_km(), self.total_duration_seconds())

    def statistics(self) -> GpxStatistics:
        distance = self.total_distance_km()
        duration = self.total_duration_seconds()
        gain, loss, pairs = self._elevation_changes()

        return GpxStatistics(
            total_tracks=len(self.tracks),
            total_waypoints=len(self.waypoints),
            total_segments=self.total_segments(),
            total_points=self.total_points(),
            total_distance_km=distance,
            elevation_range=self.elevation_range(),
            elevation_gain=gain if pairs else None,
            elevation_loss=loss if pairs else None,
            duration_seconds=duration,
            average_speed_kmh=metrics.average_speed_kmh(distance, duration),
        )
