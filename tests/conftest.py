import datetime as dt
import math
import os
from pathlib import Path

import pytest

# Plots are rendered off-screen during tests
os.environ.setdefault("MPLBACKEND", "Agg")

# Distance between two points 0.01 degrees apart on the same meridian (km)
MERIDIAN_STEP_KM = 6371.0 * math.radians(0.01)


def utc(hour: int, minute: int = 0, second: int = 0, day: int = 11) -> dt.datetime:
    return dt.datetime(2024, 7, day, hour, minute, second, tzinfo=dt.timezone.utc)


@pytest.fixture
def sample_gpx_path() -> Path:
    return Path(__file__).parent / "data" / "sample.gpx"


@pytest.fixture
def sample_gpx_text(sample_gpx_path) -> str:
    return sample_gpx_path.read_text(encoding="utf-8")


@pytest.fixture
def nyc_xml() -> str:
    return (
        '<gpx><trk><trkseg>'
        '<trkpt lat="40.7128" lon="-74.0060"><ele>10.0</ele></trkpt>'
        '<trkpt lat="40.7589" lon="-73.9851"><ele>15.0</ele></trkpt>'
        '</trkseg></trk></gpx>'
    )
