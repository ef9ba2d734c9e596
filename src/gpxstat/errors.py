# gpxstat/errors

"""
gpxstat.errors

Central exception hierarchy for gpxstat.

Callers can catch GpxStatError (broad) or specific subclasses (narrow).
Missing optional data (no elevation, no timestamps, no name) is never an
error; it shows up as None in the computed metrics.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class GpxStatError(RuntimeError):
    """Base class for all gpxstat runtime errors."""


# ---- GPX decoding ------------------------------

class GpxDecodeError(GpxStatError):
    """
    GPX text could not be parsed into a document.

    Attributes:
      reason  human-readable diagnostic
      line    1-based line reported by the XML parser, if known
      column  0-based column reported by the XML parser, if known
      path    source file, when decoding went through read_gpx()
    """

    def __init__(
            self,
            reason: str,
            *,
            line: Optional[int] = None,
            column: Optional[int] = None,
            path: Optional[Path] = None,
    ) -> None:
        self.reason = reason
        self.line = line
        self.column = column
        self.path = path
        super().__init__(str(self))

    def with_path(self, path: Path) -> "GpxDecodeError":
        """Return a copy of this error annotated with its source file."""
        return GpxDecodeError(self.reason, line=self.line, column=self.column, path=path)

    def __str__(self) -> str:
        msg = f"parse failed: {self.reason}"
        if self.line is not None:
            msg += f" (line {self.line}, column {self.column})"
        if self.path is not None:
            msg = f"{self.path}: {msg}"
        return msg


# ---- Configuration -----------------------------

class ConfigError(GpxStatError):
    """A configuration file exists but could not be read as TOML."""
