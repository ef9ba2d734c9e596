"""
gpxstat configuration loader

This module centralizes all configuration handling for the gpxstat CLI.
The GPX core (model, codec, statistics) takes no configuration at all.

Sources:
- per-machine config without committing personal paths:
    ~/.config/gpxstat/config.toml
- repo-local config:
    <repo_root>/config/config.toml
- environment variable overrides for automation (GPXSTAT_*)

Precedence (highest to lowest) for any given value:
1) CLI argument (handled in gpxstat.analyze.gpx_analyze)
2) Environment variables (GPXSTAT_*)
3) User config: ~/.config/gpxstat/config.toml
4) Repo config: <repo_root>/config/config.toml
5) Hard defaults

This module uses Python's built-in tomllib on Python 3.11+, or `tomli`.

Example config.toml:

    [paths]
    gpx_root = "~/GPS/_work"

    [report]
    verbose = false
    sort_by_date = true
    recursive = true
    tsv = false
    workers = 4
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from gpxstat.errors import ConfigError

try:
    import tomllib
except ModuleNotFoundError:  # Python < 3.11
    import tomli as tomllib


# ---------------------------------------------------------------------------
# TOML loading helpers
# ---------------------------------------------------------------------------
def _load_toml(path: Path) -> dict[str, Any]:
    """
    Parse a TOML file at `path`.

    - A missing file yields an empty dict (missing config is normal).
    - A file that exists but is not valid TOML raises ConfigError.
    """
    if not path.is_file():
        return {}

    try:
        return tomllib.loads(path.read_text(encoding="utf-8")) or {}
    except (tomllib.TOMLDecodeError, OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"Failed to parse TOML config: {path} ({e})") from e


# ---------------------------------------------------------------------------
# Generic coercion helpers
# ---------------------------------------------------------------------------
def _deep_get(d: dict[str, Any], dotted_key: str) -> Any:
    """
    Fetch nested dictionary values using dot-separated keys.

    Example:
        _deep_get(cfg, "paths.gpx_root")

    Returns None if any part of the path is missing.
    """
    cur: Any = d
    for part in dotted_key.split("."):
        if not isinstance(cur, dict) or part not in cur:
            return None
        cur = cur[part]
    return cur


def _as_path(v: Any) -> Optional[Path]:
    if isinstance(v, Path):
        return v.expanduser()
    if isinstance(v, str) and v.strip():
        return Path(v.strip()).expanduser()
    return None


def _as_bool(v: Any) -> Optional[bool]:
    """
    Coerce loosely-typed config values into booleans.

    Accepts the usual truthy / falsy spellings so TOML and environment
    variables behave the same. Unrecognised values yield None (ignored).
    """
    if isinstance(v, bool):
        return v
    if isinstance(v, (int, float)):
        return bool(v)
    if isinstance(v, str):
        s = v.strip().lower()
        if s in ("true", "yes", "y", "1", "on"):
            return True
        if s in ("false", "no", "n", "0", "off"):
            return False
    return None


def _as_workers(v: Any) -> Optional[int]:
    """Positive worker count, or None if `v` is not one."""
    if isinstance(v, bool):
        return None
    try:
        n = int(v)
    except (TypeError, ValueError):
        return None
    return n if n >= 1 else None


# ---------------------------------------------------------------------------
# Repo discovery + defaults
# ---------------------------------------------------------------------------
def find_repo_root(start: Path) -> Optional[Path]:
    """
    Walk upward from `start` looking for the gpxstat repo root.

    The presence of a `config/config.toml` file marks the repo root.
    """
    start = start.resolve()
    for p in [start] + list(start.parents):
        if (p / "config" / "config.toml").is_file():
            return p
    return None


def default_gpx_root() -> Path:
    """Directory scanned when the CLI is given no paths."""
    return Path.home() / "GPS"


def default_user_config_path() -> Path:
    return Path.home() / ".config" / "gpxstat" / "config.toml"


# ---------------------------------------------------------------------------
# Typed config dataclasses
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class GpxStatPaths:
    gpx_root: Path


@dataclass(frozen=True)
class ReportConfig:
    """Defaults for the CLI report; each one can be overridden by a flag."""
    verbose: bool = False
    sort_by_date: bool = False
    recursive: bool = False
    tsv: bool = False
    workers: int = 1


@dataclass(frozen=True)
class GpxStatConfig:
    """
    Fully merged configuration.

    `source` maps each dotted key to where its value came from
    ("default", "repo:<file>", "user:<file>", "env:<VAR>").
    """
    paths: GpxStatPaths
    report: ReportConfig = field(default_factory=ReportConfig)
    source: dict[str, str] = field(default_factory=dict)


# key -> coercion helper
_KEYS = {
    "paths.gpx_root": _as_path,
    "report.verbose": _as_bool,
    "report.sort_by_date": _as_bool,
    "report.recursive": _as_bool,
    "report.tsv": _as_bool,
    "report.workers": _as_workers,
}

_ENV = {
    "GPXSTAT_GPX_ROOT": "paths.gpx_root",
    "GPXSTAT_VERBOSE": "report.verbose",
    "GPXSTAT_SORT_BY_DATE": "report.sort_by_date",
    "GPXSTAT_RECURSIVE": "report.recursive",
    "GPXSTAT_WORKERS": "report.workers",
}


# ---------------------------------------------------------------------------
# Main config loader
# ---------------------------------------------------------------------------
def load_config(
    repo_root: Optional[Path] = None,
    repo_config_path: Optional[Path] = None,
    user_config_path: Optional[Path] = None,
) -> GpxStatConfig:
    """
    Load and merge all gpxstat configuration.

    Raises:
      ConfigError if a config file exists but is malformed.
    """
    if repo_root is None:
        repo_root = find_repo_root(Path(__file__).resolve())
    if repo_config_path is None and repo_root is not None:
        repo_config_path = repo_root / "config" / "config.toml"
    if user_config_path is None:
        user_config_path = default_user_config_path()

    layers = [
        ("repo", repo_config_path, _load_toml(repo_config_path) if repo_config_path else {}),
        ("user", user_config_path, _load_toml(user_config_path) if user_config_path else {}),
    ]

    values: dict[str, Any] = {
        "paths.gpx_root": default_gpx_root(),
        "report.verbose": ReportConfig.verbose,
        "report.sort_by_date": ReportConfig.sort_by_date,
        "report.recursive": ReportConfig.recursive,
        "report.tsv": ReportConfig.tsv,
        "report.workers": ReportConfig.workers,
    }
    src = {k: "default" for k in values}

    # Repo first, then user, so user config wins
    for label, cfg_path, cfg in layers:
        for key, coerce in _KEYS.items():
            v = coerce(_deep_get(cfg, key))
            if v is None:
                continue
            values[key] = v
            src[key] = f"{label}:{cfg_path}"

    # Environment variable overrides (highest non-CLI precedence)
    for env, key in _ENV.items():
        v = _KEYS[key](os.environ.get(env))
        if v is None:
            continue
        values[key] = v
        src[key] = f"env:{env}"

    return GpxStatConfig(
        paths=GpxStatPaths(gpx_root=values["paths.gpx_root"]),
        report=ReportConfig(
            verbose=values["report.verbose"],
            sort_by_date=values["report.sort_by_date"],
            recursive=values["report.recursive"],
            tsv=values["report.tsv"],
            workers=values["report.workers"],
        ),
        source=src,
    )
