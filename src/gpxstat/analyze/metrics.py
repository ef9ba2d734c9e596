# gpxstat/analyze/metrics.py
"""
Pure metric helpers shared by the track model and the statistics engine.

These work on plain values (floats, datetimes, point sequences) so they can
be reused without pulling in the document model.
"""

from __future__ import annotations

import datetime as dt
import math
from functools import reduce
from typing import Iterable, Optional, Sequence, Tuple


def elevation_bounds(elevations: Iterable[float]) -> Optional[Tuple[float, float]]:
    """
    Return (min, max) over the given elevations, or None if there are none.

    The folds are seeded with +inf / -inf. A NaN never wins a comparison,
    so NaN elevations are skipped silently (an all-NaN input yields
    (inf, -inf)).
    """
    values = list(elevations)
    if not values:
        return None
    lo = reduce(lambda acc, x: x if x < acc else acc, values, math.inf)
    hi = reduce(lambda acc, x: x if x > acc else acc, values, -math.inf)
    return lo, hi


def elevation_changes(points: Sequence) -> Tuple[float, float, int]:
    """
    Accumulate elevation change over consecutive pairs of one segment.

    Returns (gain, loss, pairs) where `pairs` counts the pairs in which both
    points carried an elevation. Loss is reported as a positive number.
    """
    gain = 0.0
    loss = 0.0
    pairs = 0

    for p0, p1 in zip(points, points[1:]):
        if p0.elevation is None or p1.elevation is None:
            continue
        pairs += 1
        diff = p1.elevation - p0.elevation
        if diff > 0.0:
            gain += diff
        elif diff < 0.0:
            loss += -diff

    return gain, loss, pairs


def duration_seconds(times: Iterable[dt.datetime]) -> Optional[int]:
    """Whole seconds between the earliest and latest timestamp, in any order."""
    stamps = list(times)
    if not stamps:
        return None
    return int((max(stamps) - min(stamps)).total_seconds())


def average_speed_kmh(distance_km: float, seconds: Optional[int]) -> Optional[float]:
    """Distance over duration; None for an unknown or zero duration."""
    if seconds is None or seconds == 0:
        return None
    return distance_km / (seconds / 3600.0)


def format_duration(seconds: Optional[int]) -> Optional[str]:
    """Render seconds as HH:MM:SS. Hours are not wrapped into days."""
    if seconds is None:
        return None
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"
