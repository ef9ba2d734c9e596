# gpxstat/visualize/plot.py
"""
Plotting routines for gpxstat
"""

from __future__ import annotations

from typing import Optional

import matplotlib.pyplot as plt

from gpxstat.model.gpx import Gpx
from gpxstat.model.point import haversine_distance


def plot_tracks(gpx: Gpx, *, title: Optional[str] = None, show: bool = True):
    """Scatter every track point on a lon/lat plane, coloured by elevation."""
    points = gpx.all_points()
    with_ele = [p for p in points if p.elevation is not None]
    without_ele = [p for p in points if p.elevation is None]

    fig, ax = plt.subplots(figsize=(8, 6))
    if without_ele:
        ax.scatter([p.lon for p in without_ele], [p.lat for p in without_ele],
                   s=5, color="lightgrey", label="no elevation")
    if with_ele:
        sc = ax.scatter([p.lon for p in with_ele], [p.lat for p in with_ele],
                        c=[p.elevation for p in with_ele], s=5, cmap="terrain")
        fig.colorbar(sc, ax=ax, label="Elevation (m)")

    for wpt in gpx.waypoints:
        ax.plot(wpt.lon, wpt.lat, marker="^", color="red")
        ax.annotate(wpt.display_name(), (wpt.lon, wpt.lat), fontsize=8)

    ax.set_xlabel("Longitude")
    ax.set_ylabel("Latitude")
    ax.set_title(title or ", ".join(gpx.track_names()) or "GPX tracks")
    if show:
        plt.show()
    return fig


def plot_elevation_profile(gpx: Gpx, *, title: Optional[str] = None, show: bool = True):
    """
    Elevation against cumulative distance (km).

    Distance keeps accumulating across segments and tracks, but the line is
    broken at every segment boundary so recording gaps are not bridged.
    Points without elevation are skipped.
    """
    fig, ax = plt.subplots(figsize=(10, 4))
    offset = 0.0

    for trk in gpx.tracks:
        for seg in trk.segments:
            xs, ys = [], []
            dist = offset
            prev = None
            for p in seg.points:
                if prev is not None:
                    dist += haversine_distance(prev, p)
                prev = p
                if p.elevation is not None:
                    xs.append(dist)
                    ys.append(p.elevation)
            if xs:
                ax.plot(xs, ys, color="tab:brown")
            offset = dist

    ax.set_xlabel("Distance (km)")
    ax.set_ylabel("Elevation (m)")
    ax.set_title(title or "Elevation profile")
    if show:
        plt.show()
    return fig
