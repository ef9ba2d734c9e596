#!/usr/bin/env python3
"""
gpxstat: analyze GPX file(s) and print trip statistics.

Paths may be files or directories (directories contribute their .gpx
files). With no paths, the configured gpx_root is scanned.
"""

from __future__ import annotations

import argparse
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from gpxstat.config import load_config
from gpxstat.errors import ConfigError, GpxStatError
from gpxstat.formats.gpx import read_gpx
from gpxstat.model.gpx import Gpx
from gpxstat.util.logging import log
from gpxstat.util.paths import expand_gpx_paths
from gpxstat.visualize.plot import plot_elevation_profile, plot_tracks

RULE = "-" * 46

TSV_COLUMNS = (
    "tracks", "waypoints", "segments", "points", "distance_km",
    "ele_min_m", "ele_max_m", "ele_gain_m", "ele_loss_m",
    "duration_s", "avg_speed_kmh",
)


@dataclass
class LoadResult:
    path: Path
    gpx: Optional[Gpx] = None
    error: Optional[str] = None


# ---------------------------
# Loading
# ---------------------------
def load_one(path: Path) -> LoadResult:
    try:
        return LoadResult(path, gpx=read_gpx(path))
    except (GpxStatError, OSError) as e:
        return LoadResult(path, error=str(e))


def load_all(paths: Sequence[Path], *, workers: int = 1) -> list[LoadResult]:
    """
    Load every file, in parallel when workers > 1.

    Files are independent, so this is a plain fan-out/fan-in; results come
    back in the order of `paths`.
    """
    if workers <= 1 or len(paths) <= 1:
        return [load_one(p) for p in paths]
    with ThreadPoolExecutor(max_workers=workers) as pool:
        return list(pool.map(load_one, paths))


def sort_by_date(results: list[LoadResult]) -> list[LoadResult]:
    """Order by metadata date ascending; undated documents go last (stable)."""
    return sorted(results, key=lambda r: (r.gpx.date() is None, r.gpx.date() or ""))


# ---------------------------
# Reporting
# ---------------------------
def _fmt(value, spec: str) -> str:
    return "" if value is None else format(value, spec)


def print_compact(path: Path, gpx: Gpx) -> None:
    print(f"{path}")
    print(
        f"  Tracks: {len(gpx.tracks)} | Waypoints: {len(gpx.waypoints)} | "
        f"Points: {gpx.total_points()} | Distance: {gpx.total_distance_km():.2f} km"
    )


def print_verbose(path: Path, gpx: Gpx) -> None:
    stats = gpx.statistics()

    print(f"\n{path}")
    print(RULE)
    date = gpx.date()
    if date is not None:
        print(f"  date          : {date}")
    print(f"  tracks        : {stats.total_tracks}")
    print(f"  waypoints     : {stats.total_waypoints}")
    print(f"  segments      : {stats.total_segments}")
    print(f"  points        : {stats.total_points}")

    for i, trk in enumerate(gpx.tracks, start=1):
        print(f"    track #{i}: {trk.display_name()} "
              f"({len(trk.segments)} segments, {trk.total_points()} points, "
              f"{trk.total_distance_km():.2f} km)")
    for wpt in gpx.waypoints:
        print(f"    waypoint: {wpt.description()}")

    print(f"  distance (km) : {stats.total_distance_km:.2f}")
    if stats.duration_seconds is not None:
        print(f"  duration      : {stats.duration_formatted()}")
    if stats.average_speed_kmh is not None:
        print(f"  avg speed km/h: {stats.average_speed_kmh:.2f}")
    if stats.elevation_range is not None:
        lo, hi = stats.elevation_range
        print(f"  elevation (m) : {lo:.1f} - {hi:.1f}")
    if stats.elevation_gain is not None:
        print(f"  gain (m)      : {stats.elevation_gain:.1f}")
    if stats.elevation_loss is not None:
        print(f"  loss (m)      : {stats.elevation_loss:.1f}")
    print(RULE)


def print_tsv_header() -> None:
    print("file\tdate\t" + "\t".join(TSV_COLUMNS))


def print_tsv_row(path: Path, gpx: Gpx) -> None:
    row = gpx.statistics().as_dict()
    cells = [str(path), gpx.date() or ""]
    for col in TSV_COLUMNS:
        v = row[col]
        cells.append(_fmt(v, ".3f") if isinstance(v, float) else _fmt(v, ""))
    print("\t".join(cells))


# ---------------------------
# CLI
# ---------------------------
def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="gpxstat", description="gpxstat: Analyze GPX file(s).")
    ap.add_argument("paths", nargs="*", type=Path,
                    help="GPX files or directories. If omitted, scan the configured gpx_root.")
    ap.add_argument("-v", "--verbose", action="store_true", default=None,
                    help="Show detailed statistics per file.")
    ap.add_argument("-s", "--sort", action="store_true", default=None,
                    help="Sort files by their metadata date.")
    ap.add_argument("-r", "--recursive", action="store_true", default=None,
                    help="Descend into subdirectories.")
    ap.add_argument("--tsv", action="store_true", default=None,
                    help="Print tab-separated output (good for piping).")
    ap.add_argument("-j", "--workers", type=int, default=None,
                    help="Number of files to load in parallel.")
    ap.add_argument("--plot", action="store_true",
                    help="Show each track coloured by elevation.")
    ap.add_argument("--profile", action="store_true",
                    help="Show each file's elevation profile.")
    return ap


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        cfg = load_config()
    except ConfigError as e:
        raise SystemExit(str(e)) from e

    # CLI flags override config
    verbose = cfg.report.verbose if args.verbose is None else args.verbose
    sort = cfg.report.sort_by_date if args.sort is None else args.sort
    recursive = cfg.report.recursive if args.recursive is None else args.recursive
    tsv = cfg.report.tsv if args.tsv is None else args.tsv
    workers = cfg.report.workers if args.workers is None else max(1, args.workers)

    roots = args.paths or [cfg.paths.gpx_root]
    files = expand_gpx_paths(roots, recursive=recursive)
    if not files:
        raise SystemExit(f"No GPX files found under {', '.join(str(p) for p in roots)}")
    if len(files) > 1:
        log(f"Found {len(files)} GPX files")

    results = load_all(files, workers=workers)
    failed = [r for r in results if r.error is not None]
    loaded = [r for r in results if r.gpx is not None]
    for r in failed:
        log(f"Skipping ({r.error})")

    if sort:
        loaded = sort_by_date(loaded)

    if tsv:
        print_tsv_header()
    for r in loaded:
        if tsv:
            print_tsv_row(r.path, r.gpx)
        elif verbose:
            print_verbose(r.path, r.gpx)
        else:
            print_compact(r.path, r.gpx)

        if args.plot:
            plot_tracks(r.gpx, title=r.path.name)
        if args.profile:
            plot_elevation_profile(r.gpx, title=r.path.name)

    if len(loaded) > 1 and not tsv:
        total = sum(r.gpx.total_distance_km() for r in loaded)
        print(f"\nTotal distance across {len(loaded)} files: {total:.2f} km")

    return 1 if failed else 0


if __name__ == "__main__":
    raise SystemExit(main())
