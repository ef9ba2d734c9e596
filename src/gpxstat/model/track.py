# gpxstat/model/track.py
"""
Tracks and track segments.

A track is one recorded activity. It is split into segments, each a
continuously recorded run of points; a gap in recording (GPS switched off,
signal lost) starts a new segment rather than inserting a marker point.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple

from gpxstat.analyze.metrics import elevation_bounds
from gpxstat.model.point import Point, haversine_distance

UNNAMED_TRACK = "Unnamed Track"


@dataclass
class TrackSegment:
    points: list[Point] = field(default_factory=list)

    def add_point(self, point: Point) -> None:
        self.points.append(point)

    def distance_km(self) -> float:
        """Sum of haversine distances between consecutive points (0.0 below two points)."""
        return sum(
            (haversine_distance(p0, p1) for p0, p1 in zip(self.points, self.points[1:])),
            0.0,
        )

    def elevation_range(self) -> Optional[Tuple[float, float]]:
        return elevation_bounds(p.elevation for p in self.points if p.elevation is not None)

    def point_count(self) -> int:
        return len(self.points)


@dataclass
class Track:
    name: Optional[str] = None
    segments: list[TrackSegment] = field(default_factory=list)

    def add_segment(self, segment: TrackSegment) -> None:
        self.segments.append(segment)

    def all_points(self) -> list[Point]:
        """Every point of every segment, in recording order."""
        return [p for seg in self.segments for p in seg.points]

    def total_distance_km(self) -> float:
        return sum((seg.distance_km() for seg in self.segments), 0.0)

    def total_points(self) -> int:
        return sum(seg.point_count() for seg in self.segments)

    def elevation_range(self) -> Optional[Tuple[float, float]]:
        # One fold over all points, not a merge of the per-segment ranges.
        return elevation_bounds(p.elevation for p in self.all_points() if p.elevation is not None)

    def display_name(self) -> str:
        return self.name if self.name is not None else UNNAMED_TRACK
