# gpxstat/util/paths.py
from __future__ import annotations

from pathlib import Path
from typing import Iterable, Iterator

GPX_SUFFIX = ".gpx"


def ensure_dir(path: Path) -> None:
    """Ensure a directory exists."""
    path.mkdir(parents=True, exist_ok=True)


def is_gpx_file(path: Path) -> bool:
    return path.is_file() and path.suffix.lower() == GPX_SUFFIX


def iter_gpx_files(root: Path, *, recursive: bool = False) -> Iterator[Path]:
    """Yield the .gpx files under `root` in sorted order."""
    if not root.is_dir():
        return
    candidates = root.rglob("*") if recursive else root.iterdir()
    yield from sorted(p for p in candidates if is_gpx_file(p))


def expand_gpx_paths(paths: Iterable[Path], *, recursive: bool = False) -> list[Path]:
    """
    Expand a mix of files and directories into a flat list of GPX files.

    Explicit files are kept as given (whatever their suffix); directories
    contribute the .gpx files they contain. Duplicates are dropped, first
    occurrence wins.
    """
    out: list[Path] = []
    seen: set[Path] = set()

    for p in paths:
        p = Path(p).expanduser()
        found = list(iter_gpx_files(p, recursive=recursive)) if p.is_dir() else [p]
        for f in found:
            key = f.resolve()
            if key in seen:
                continue
            seen.add(key)
            out.append(f)
    return out
